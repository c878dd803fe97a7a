"""Journash CLI - Coding Journal."""

import logging
import shutil
import sys
from datetime import datetime

import click

from .adapters.git_cli import GitCLI
from .config import Settings, ensure_directories, load_config, save_setting
from .core.entry import EntryKind
from .core.formatter import parse_entries
from .core.stats import StatsStatus
from .errors import JournashError, NotFoundError
from .security import hash_password, verify_password
from .workflows import get_journal

logger = logging.getLogger(__name__)

QUESTIONS: dict[EntryKind, dict[str, str]] = {
    EntryKind.CODING: {
        "Worked on": "What did you work on today?",
        "Challenges": "What challenges did you face?",
        "Solutions": "What solutions did you discover?",
        "Learned": "What did you learn today?",
        "Next Steps": "What are your next steps?",
    },
    EntryKind.PERSONAL: {
        "Grateful for": "What are you most grateful for today?",
        "Accomplished": "What did you accomplish today?",
        "Thoughts": "What's on your mind?",
    },
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(settings: Settings, debug: bool) -> None:
    debug = debug or settings.debug
    if not (debug or settings.verbose_logging):
        return
    level = logging.DEBUG if debug else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.verbose_logging:
        settings.home.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    logging.basicConfig(format=LOG_FORMAT, level=level, handlers=handlers, force=True)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option()
@click.option("--home", envvar="JOURNASH_HOME", default=None, help="Journal home directory")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, home: str | None, debug: bool):
    """Journash - Coding Journal CLI."""
    settings = load_config(home)
    _configure_logging(settings, debug)
    logger.debug(f"Journal home: {settings.home}")
    ctx.obj = settings


# ============== Entry creation ==============


def _read_multiline(question: str) -> str:
    """Read lines until EOF (Ctrl+D) or a line holding a single '.'."""
    click.echo(f"{question} (Press Ctrl+D on a new line when finished)")
    lines = []
    while True:
        line = sys.stdin.readline()
        if not line or line.rstrip("\n") == ".":
            break
        lines.append(line.rstrip("\n"))
    return "\n".join(lines)


def _prompt_password(settings: Settings) -> str | None:
    """Ask for the encryption password and check it against the stored hash."""
    password = click.prompt("Please enter your encryption password", hide_input=True, default="", show_default=False)
    if not verify_password(password, settings.password_hash):
        click.echo("❌ Incorrect password.", err=True)
        return None
    return password


def _create_entry(settings: Settings, kind: EntryKind) -> None:
    now = datetime.now()
    label = "Coding" if kind is EntryKind.CODING else "Personal"
    click.echo(f"{settings.prompt_symbol} {label} Journal - {now:%d-%m-%Y %H:%M}")
    click.echo(f"Creating a new {label.lower()} journal entry...\n")

    duration = None
    if kind.has_duration:
        duration = click.prompt(
            "How long was your coding session? (e.g. 2h 30m)", default="", show_default=False
        ).strip()

    answers = {field: _read_multiline(question) for field, question in QUESTIONS[kind].items()}

    encrypt_requested = False
    key = None
    if settings.encryption_ready:
        encrypt_requested = settings.auto_encrypt or click.confirm(
            "Would you like to encrypt this entry?", default=False
        )
        if encrypt_requested:
            key = _prompt_password(settings)

    ensure_directories(settings)
    journal = get_journal(settings)
    try:
        result = journal.append_entry(kind, answers, duration, encrypt_requested, key)
    except JournashError as e:
        _fail(str(e))

    for warning in result.warnings:
        click.echo(f"⚠️ {warning}", err=True)
    if result.encrypted:
        click.echo(f"\n✓ Encrypted journal entry saved to {result.path}")
    else:
        click.echo(f"\n✓ Journal entry saved to {result.path}")


@main.command()
@click.pass_obj
def coding(settings: Settings):
    """Create a coding journal entry."""
    _create_entry(settings, EntryKind.CODING)


@main.command()
@click.pass_obj
def personal(settings: Settings):
    """Create a personal journal entry."""
    _create_entry(settings, EntryKind.PERSONAL)


# ============== Reading ==============


@main.command("list")
@click.pass_obj
def list_cmd(settings: Settings):
    """List journal periods with entry counts."""
    warnings: list[str] = []
    summaries = get_journal(settings).list_periods(warnings)
    for warning in warnings:
        click.echo(f"⚠️ {warning}", err=True)
    if not summaries:
        click.echo("No journal entries found.")
        return

    click.echo("📚 Available Journal Periods:")
    click.echo("-" * 40)
    for s in summaries:
        click.echo(
            f"📔 {s.display_label}: {s.entry_count} entries "
            f"({s.coding_count} coding, {s.personal_count} personal, {s.encrypted_count} encrypted)"
        )
    click.echo("\nUse 'journash view DD-MM-YYYY' to view a specific date.")
    click.echo("Use 'journash view MM-YYYY' to view all entries for a month.")


@main.command()
@click.argument("period", required=False)
@click.option("--decrypt/--no-decrypt", default=None, help="Decrypt encrypted entries for display")
@click.pass_context
def view(ctx, period: str | None, decrypt: bool | None):
    """View entries for a day (DD-MM-YYYY) or month (MM-YYYY)."""
    settings: Settings = ctx.obj
    if not period:
        ctx.invoke(list_cmd)
        return

    journal = get_journal(settings)
    try:
        result = journal.view_period(period)
    except NotFoundError as e:
        click.echo(f"❌ {e}")
        ctx.invoke(list_cmd)
        sys.exit(1)
    except JournashError as e:
        _fail(str(e))

    if any(entry.encrypted for entry in parse_entries(result.text)):
        if decrypt is None:
            click.echo("This file contains encrypted entries.")
            decrypt = settings.encryption_ready and click.confirm(
                "Would you like to decrypt them?", default=False
            )
        if decrypt:
            password = click.prompt(
                "Please enter your encryption password", hide_input=True, default="", show_default=False
            )
            if settings.password_hash and not verify_password(password, settings.password_hash):
                click.echo("⚠️ Password does not match the current one; some entries may not decrypt.", err=True)
            result = journal.view_period(period, decrypt_key=password)

    label = journal.store.display_label(period) if len(result.keys) == 1 else period
    for warning in result.warnings:
        click.echo(f"⚠️ {warning}", err=True)
    click.echo(f"📖 Viewing entries for {label}")
    click.echo("-" * 40)
    click.echo_via_pager(result.text)


@main.command()
@click.argument("term")
@click.pass_obj
def search(settings: Settings, term: str):
    """Search all entries for a term (case-insensitive)."""
    journal = get_journal(settings)
    try:
        report = journal.search(term)
    except ValueError as e:
        _fail(str(e))

    click.echo(f"🔍 Searching for: '{term}'\n")
    for warning in report.warnings:
        click.echo(f"⚠️ {warning}", err=True)
    for period_key in report.skipped_encrypted:
        click.echo(f"📔 {journal.store.display_label(period_key)}: Contains encrypted entries (not searched)")

    for period_key, hits in report.hits_by_period().items():
        click.echo(f"📔 Results from {journal.store.display_label(period_key)}:")
        click.echo("----------------------------")
        for i, hit in enumerate(hits):
            if i:
                click.echo("...")
            first = hit.line_number - len(hit.context_before)
            for offset, line in enumerate(hit.context_before):
                click.echo(f"  Line {first + offset}- {line}")
            click.echo(f"  Line {hit.line_number}: {hit.line}")
            for offset, line in enumerate(hit.context_after, start=1):
                click.echo(f"  Line {hit.line_number + offset}- {line}")
        click.echo("")

    if not report.has_matches:
        click.echo(f"No matches found for '{term}'.")
        if report.skipped_encrypted:
            click.echo("Note: Encrypted entries were not searched.")


def _format_bytes(size: int) -> str:
    for unit in ("B", "K", "M", "G"):
        if size < 1024:
            return f"{size}{unit}"
        size //= 1024
    return f"{size}T"


@main.command()
@click.pass_obj
def stats(settings: Settings):
    """Show journal statistics."""
    journal = get_journal(settings)
    summary = journal.stats()

    click.echo("📊 Journal Statistics")
    click.echo("-" * 40)
    for warning in summary.warnings:
        click.echo(f"⚠️ {warning}", err=True)

    if summary.status is StatsStatus.NO_ENTRIES and not summary.period_count:
        click.echo("No journal entries found.")
        return

    unit = "days" if journal.store.is_daily else "months"
    click.echo(f"Total journal entries: {summary.total_entries}")
    click.echo(f"Coding journal entries: {summary.coding_entries}")
    click.echo(f"Personal journal entries: {summary.personal_entries}")
    click.echo(f"Encrypted entries: {summary.encrypted_entries} ({summary.encrypted_percentage}%)")
    click.echo(f"Total {unit} with entries: {summary.period_count}")
    click.echo(f"Average entries per {unit[:-1]}: {summary.average_per_period}")
    if summary.most_active_period:
        label = journal.store.display_label(summary.most_active_period)
        click.echo(f"Most active {unit[:-1]}: {label} ({summary.most_active_count} entries)")
    if summary.oldest_period and summary.newest_period:
        click.echo(
            f"Date range: {journal.store.display_label(summary.oldest_period)} "
            f"to {journal.store.display_label(summary.newest_period)}"
        )

    click.echo("\n📁 Storage Information")
    click.echo("-" * 40)
    if settings.git_enabled:
        click.echo("Git integration: Enabled")
        click.echo(f"Remote repository: {settings.git_remote_url or 'Not configured'}")
        git = GitCLI(settings.home)
        if git.is_repository():
            try:
                click.echo(f"Uncommitted changes: {'Yes' if git.has_changes() else 'No'}")
            except RuntimeError as e:
                click.echo(f"Uncommitted changes: unknown ({e})")
    else:
        click.echo("Git integration: Not enabled")
    click.echo(f"Storage used: {_format_bytes(summary.storage_bytes)}")


# ============== Security ==============


@main.group()
def security():
    """Manage encryption for private entries."""
    pass


def _cipher_available(settings: Settings) -> bool:
    if settings.cipher == "openssl":
        return shutil.which("openssl") is not None
    return True


@security.command("setup")
@click.pass_obj
def security_setup(settings: Settings):
    """Set up encryption with a password."""
    if not _cipher_available(settings):
        _fail("OpenSSL is not installed. Encryption is not available.")

    click.echo("🔒 Setting up encryption for private journal entries")
    password = click.prompt(
        "Please enter a password to use for encrypting private entries",
        hide_input=True,
        confirmation_prompt=True,
    )
    if not password:
        _fail("Password cannot be empty.")

    save_setting(settings.security_file, "PASSWORD_HASH", hash_password(password), private=True)
    save_setting(settings.security_file, "ENCRYPTION_ENABLED", "true", private=True)
    click.echo("✓ Encryption set up successfully!")
    click.echo("You can now mark journal entries as private.")


@security.command("status")
@click.pass_obj
def security_status(settings: Settings):
    """Check encryption status."""
    click.echo("Encryption status:")
    click.echo("✓ Encryption is enabled" if settings.encryption_enabled else "✗ Encryption is disabled")
    if settings.encryption_enabled:
        click.echo("✓ Password is set up" if settings.password_hash else "✗ Password is not set up")
    click.echo(f"Cipher backend: {settings.cipher}")
    if settings.cipher == "openssl":
        click.echo("✓ OpenSSL is available" if _cipher_available(settings) else "✗ OpenSSL is not installed")


@security.command("password")
@click.pass_obj
def security_password(settings: Settings):
    """Change your encryption password."""
    if not settings.encryption_ready:
        _fail("Encryption is not set up. Please run 'journash security setup' first.")

    current = click.prompt("Please enter your current password", hide_input=True)
    if not verify_password(current, settings.password_hash):
        _fail("Incorrect password.")

    new_password = click.prompt("Please enter your new password", hide_input=True, confirmation_prompt=True)
    if not new_password:
        _fail("Password cannot be empty.")

    save_setting(settings.security_file, "PASSWORD_HASH", hash_password(new_password), private=True)
    click.echo("✓ Password changed successfully!")
    click.echo("Note: Existing encrypted entries will still use the old password.")


# ============== Git ==============


@main.group()
def git():
    """Back up the journal with git."""
    pass


def _git_or_fail(settings: Settings) -> GitCLI:
    if not settings.git_enabled:
        _fail("Git integration is not enabled. Run 'journash git init' first.")
    return GitCLI(settings.home)


@git.command("init")
@click.pass_obj
def git_init(settings: Settings):
    """Initialize a git repository for the journal."""
    ensure_directories(settings)
    try:
        GitCLI(settings.home).init()
    except RuntimeError as e:
        _fail(str(e))
    save_setting(settings.git_file, "GIT_ENABLED", "true")
    save_setting(settings.git_file, "GIT_AUTO_COMMIT", "true")
    click.echo(f"✓ Git repository initialized in {settings.home}")


@git.command("commit")
@click.pass_obj
def git_commit(settings: Settings):
    """Commit journal changes."""
    repo = _git_or_fail(settings)
    try:
        repo.commit(f"Journal update - {datetime.now():%d-%m-%Y %H:%M}")
    except RuntimeError as e:
        _fail(str(e))
    click.echo("✓ Changes committed")


@git.command("push")
@click.pass_obj
def git_push(settings: Settings):
    """Push journal commits to the remote."""
    repo = _git_or_fail(settings)
    try:
        repo.push()
    except RuntimeError as e:
        _fail(str(e))
    click.echo("✓ Changes pushed to remote repository")


@git.command("status")
@click.pass_obj
def git_status(settings: Settings):
    """Show git repository status."""
    repo = _git_or_fail(settings)
    try:
        click.echo(repo.status())
    except RuntimeError as e:
        _fail(str(e))


@git.command("remote")
@click.argument("url")
@click.pass_obj
def git_remote(settings: Settings, url: str):
    """Set the remote repository URL."""
    repo = _git_or_fail(settings)
    try:
        repo.set_remote(url)
    except RuntimeError as e:
        _fail(str(e))
    save_setting(settings.git_file, "GIT_REMOTE_URL", url)
    click.echo(f"✓ Remote repository set to {url}")


if __name__ == "__main__":
    main()
