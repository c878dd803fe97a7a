"""Configuration management for Journash."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

JOURNASH_HOME = Path(os.environ.get("JOURNASH_HOME", Path.home() / ".coding_journal"))

SETTINGS_FILE_NAME = "settings.conf"
SECURITY_FILE_NAME = "security.conf"
GIT_FILE_NAME = "git.conf"

CIPHERS = ("fernet", "openssl")


@dataclass(frozen=True)
class Settings:
    """Journash configuration. Built once by load_config and passed around."""

    home: Path = JOURNASH_HOME
    journal_file_format: str = "%d-%m-%Y.md"
    prompt_symbol: str = "📝"
    search_context_lines: int = 2
    # Security settings
    encryption_enabled: bool = False
    auto_encrypt: bool = False
    password_hash: str = ""
    cipher: str = "fernet"
    # Git settings
    git_enabled: bool = False
    git_auto_commit: bool = False
    git_remote_url: str = ""
    # Logging
    debug: bool = False
    verbose_logging: bool = False

    @property
    def config_dir(self) -> Path:
        return self.home / "config"

    @property
    def data_dir(self) -> Path:
        return self.home / "data"

    @property
    def log_file(self) -> Path:
        return self.home / "journash.log"

    @property
    def settings_file(self) -> Path:
        return self.config_dir / SETTINGS_FILE_NAME

    @property
    def security_file(self) -> Path:
        return self.config_dir / SECURITY_FILE_NAME

    @property
    def git_file(self) -> Path:
        return self.config_dir / GIT_FILE_NAME

    @property
    def encryption_ready(self) -> bool:
        """Encryption is enabled and a password has been set up."""
        return self.encryption_enabled and bool(self.password_hash)


def _parse_value(value: str) -> str:
    """Strip quotes and inline comments from a raw conf value."""
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"'):
        end_quote = value.find('"', 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if value.startswith("'"):
        end_quote = value.find("'", 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0]
    return value.strip()


def read_conf(path: Path) -> dict[str, str]:
    """Read shell-style KEY=VALUE lines. Keys are lower-cased."""
    if not path.exists():
        return {}

    values = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        values[key.strip().lower()] = _parse_value(value.strip())
    return values


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "yes", "1", "on")


def load_config(home: Path | str | None = None) -> Settings:
    """Load configuration from the settings, security and git conf files."""
    home = Path(home).expanduser() if home else JOURNASH_HOME
    config_dir = home / "config"
    values: dict = {"home": home}

    for name in (SETTINGS_FILE_NAME, SECURITY_FILE_NAME, GIT_FILE_NAME):
        for key, value in read_conf(config_dir / name).items():
            match key:
                case "journal_file_format":
                    if value:
                        values["journal_file_format"] = value
                case "prompt_symbol":
                    values["prompt_symbol"] = value
                case "search_context_lines":
                    try:
                        values["search_context_lines"] = max(0, int(value))
                    except ValueError:
                        logger.warning(f"Invalid SEARCH_CONTEXT_LINES {value!r}; using default")
                case "encryption_enabled":
                    values["encryption_enabled"] = _as_bool(value)
                case "auto_encrypt":
                    values["auto_encrypt"] = _as_bool(value)
                case "password_hash":
                    values["password_hash"] = value
                case "cipher":
                    if value.lower() in CIPHERS:
                        values["cipher"] = value.lower()
                    else:
                        logger.warning(f"Unknown CIPHER {value!r}; using fernet")
                case "git_enabled":
                    values["git_enabled"] = _as_bool(value)
                case "git_auto_commit":
                    values["git_auto_commit"] = _as_bool(value)
                case "git_remote_url":
                    values["git_remote_url"] = value
                case "debug":
                    values["debug"] = _as_bool(value)
                case "verbose_logging":
                    values["verbose_logging"] = _as_bool(value)

    return Settings(**values)


def save_setting(path: Path, key: str, value: str, private: bool = False) -> None:
    """
    Set ``KEY="value"`` in a conf file, replacing an existing or
    commented-out line for the same key.
    """
    key = key.upper()
    new_line = f'{key}="{value}"'
    lines = path.read_text(encoding="utf-8").splitlines() if path.exists() else []

    kept = []
    replaced = False
    for line in lines:
        bare = line.strip().lstrip("#").strip()
        if "=" in bare and bare.split("=", 1)[0].strip().upper() == key:
            if not replaced:
                kept.append(new_line)
                replaced = True
            continue
        kept.append(line)
    if not replaced:
        kept.append(new_line)
    lines = kept

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        if private:
            os.chmod(tmp, 0o600)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def ensure_directories(settings: Settings) -> None:
    """Create the journal home, config and content directories."""
    for directory in (settings.home, settings.config_dir, settings.data_dir):
        if not directory.is_dir():
            logger.info(f"Creating directory {directory}")
            directory.mkdir(parents=True, exist_ok=True)
