"""Tests for configuration loading and saving."""

import stat

from journash.config import Settings, ensure_directories, load_config, read_conf, save_setting


def write_conf(home, name, content):
    config_dir = home / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / name).write_text(content)


class TestLoadConfig:
    def test_defaults_without_files(self, tmp_path):
        settings = load_config(tmp_path)

        assert settings.home == tmp_path
        assert settings.data_dir == tmp_path / "data"
        assert settings.journal_file_format == "%d-%m-%Y.md"
        assert settings.search_context_lines == 2
        assert settings.cipher == "fernet"
        assert not settings.encryption_ready
        assert not settings.git_enabled

    def test_reads_all_conf_files(self, tmp_path):
        write_conf(
            tmp_path,
            "settings.conf",
            '# Journash settings\nJOURNAL_FILE_FORMAT="%m-%Y.md"\nPROMPT_SYMBOL="> " # inline\n'
            "export SEARCH_CONTEXT_LINES=4\nDEBUG=yes\n",
        )
        write_conf(tmp_path, "security.conf", 'ENCRYPTION_ENABLED=true\nPASSWORD_HASH="ab:cd"\nCIPHER=openssl\n')
        write_conf(tmp_path, "git.conf", "GIT_ENABLED=true\nGIT_AUTO_COMMIT=false\nGIT_REMOTE_URL=git@host:j.git\n")

        settings = load_config(tmp_path)

        assert settings.journal_file_format == "%m-%Y.md"
        assert settings.prompt_symbol == "> "
        assert settings.search_context_lines == 4
        assert settings.debug
        assert settings.encryption_ready
        assert settings.password_hash == "ab:cd"
        assert settings.cipher == "openssl"
        assert settings.git_enabled
        assert not settings.git_auto_commit
        assert settings.git_remote_url == "git@host:j.git"

    def test_invalid_values_keep_defaults(self, tmp_path):
        write_conf(tmp_path, "settings.conf", "SEARCH_CONTEXT_LINES=lots\nCIPHER=rot13\nUNKNOWN_KEY=1\n")

        settings = load_config(tmp_path)

        assert settings.search_context_lines == 2
        assert settings.cipher == "fernet"

    def test_encryption_needs_password(self):
        assert not Settings(encryption_enabled=True).encryption_ready
        assert Settings(encryption_enabled=True, password_hash="a:b").encryption_ready


class TestReadConf:
    def test_missing_file(self, tmp_path):
        assert read_conf(tmp_path / "nope.conf") == {}

    def test_quoted_values(self, tmp_path):
        path = tmp_path / "x.conf"
        path.write_text("A='single # kept'\nB=\"double\" # comment\nnot a setting\n")

        assert read_conf(path) == {"a": "single # kept", "b": "double"}


class TestSaveSetting:
    def test_creates_file(self, tmp_path):
        path = tmp_path / "config" / "security.conf"

        save_setting(path, "PASSWORD_HASH", "ab:cd")

        assert path.read_text() == 'PASSWORD_HASH="ab:cd"\n'

    def test_replaces_existing_and_commented_lines(self, tmp_path):
        path = tmp_path / "git.conf"
        path.write_text('# Git settings\n#GIT_ENABLED=false\nGIT_REMOTE_URL=""\nGIT_ENABLED=false\n')

        save_setting(path, "GIT_ENABLED", "true")

        assert path.read_text() == '# Git settings\nGIT_ENABLED="true"\nGIT_REMOTE_URL=""\n'
        assert read_conf(path)["git_enabled"] == "true"

    def test_private_file_mode(self, tmp_path):
        path = tmp_path / "security.conf"

        save_setting(path, "PASSWORD_HASH", "ab:cd", private=True)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600


class TestEnsureDirectories:
    def test_creates_layout(self, tmp_path):
        settings = Settings(home=tmp_path / "journal")

        ensure_directories(settings)

        assert settings.config_dir.is_dir()
        assert settings.data_dir.is_dir()
