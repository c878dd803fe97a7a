"""git adapter - subprocess wrapper for journal backups."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitCLI:
    """
    git subprocess adapter.

    Implements VersionControl protocol over a repository rooted at the
    journal home directory.
    """

    def __init__(self, repo_dir: Path | str, timeout: int = 60):
        self.repo_dir = Path(repo_dir).expanduser()
        self.timeout = timeout

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RuntimeError("git is not installed") from None
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"git {args[0]} timed out after {self.timeout}s") from None

        if check and result.returncode != 0:
            logger.error(f"git {args[0]} failed: {result.stderr}")
            raise RuntimeError(f"git {args[0]} failed: {result.stderr.strip()}")
        return result

    def is_repository(self) -> bool:
        return (self.repo_dir / ".git").is_dir()

    def init(self) -> None:
        """Create the repository and commit the current journal state."""
        if self.is_repository():
            logger.info(f"Git repository already exists in {self.repo_dir}")
            return
        self._git("init", "-b", "main")
        self._git("add", ".")
        self._git("commit", "-m", "Initial commit - Journash setup")

    def has_changes(self) -> bool:
        return bool(self._git("status", "--porcelain").stdout.strip())

    def commit(self, message: str) -> None:
        if not self.is_repository():
            raise RuntimeError(f"No git repository in {self.repo_dir}. Run 'journash git init' first.")
        if not self.has_changes():
            logger.info("No changes to commit")
            return
        self._git("add", ".")
        self._git("commit", "-m", message)

    def remote_url(self) -> str | None:
        result = self._git("remote", "get-url", "origin", check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def set_remote(self, url: str) -> None:
        self._git("remote", "remove", "origin", check=False)
        self._git("remote", "add", "origin", url)

    def push(self) -> None:
        if not self.remote_url():
            raise RuntimeError("No remote repository configured. Use 'journash git remote <url>'.")
        branch = self._git("symbolic-ref", "--short", "HEAD", check=False).stdout.strip() or "main"
        self._git("push", "origin", branch)

    def status(self) -> str:
        if not self.is_repository():
            return "Git repository not initialized"
        return self._git("status", "--short", "--branch").stdout.strip()


class NullVersionControl:
    """Implements VersionControl protocol for journals without git backup."""

    def commit(self, message: str) -> None:
        logger.debug("Git integration not enabled; skipping commit")

    def push(self) -> None:
        logger.debug("Git integration not enabled; skipping push")

    def status(self) -> str:
        return "Git integration: Not enabled"
