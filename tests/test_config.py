"""Unit tests for the configuration."""

import pytest

from pywaifuvault.config import DEFAULT_API_URL, Config
from pywaifuvault.exceptions import VaultConfigError


@pytest.fixture
def cfg(tmp_path, monkeypatch):
    """Provide a Config using a temporary directory and a clean environment."""
    monkeypatch.delenv("WAIFUVAULT_URL", raising=False)
    monkeypatch.delenv("WAIFUVAULT_TIMEOUT", raising=False)
    return Config(config_dir=tmp_path / "pywaifuvault")


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, cfg):
        assert cfg.api_url == DEFAULT_API_URL
        assert cfg.timeout is None
        assert cfg.is_configured() is False

    def test_env_overrides(self, cfg, monkeypatch):
        monkeypatch.setenv("WAIFUVAULT_URL", "https://vault.local/")
        monkeypatch.setenv("WAIFUVAULT_TIMEOUT", "30")
        assert cfg.api_url == "https://vault.local"
        assert cfg.timeout == 30.0
        assert cfg.is_configured() is True

    def test_save_api_url(self, cfg):
        cfg.save_api_url("https://vault.example/")

        assert cfg.get_config_path().exists()
        assert cfg.api_url == "https://vault.example"
        assert cfg.is_configured() is True
        assert "WAIFUVAULT_URL=https://vault.example" in (
            cfg.get_config_path().read_text()
        )

    def test_env_wins_over_file(self, cfg, monkeypatch):
        cfg.save_api_url("https://from-file.example")
        monkeypatch.setenv("WAIFUVAULT_URL", "https://from-env.example")
        assert cfg.api_url == "https://from-env.example"

    def test_save_invalid_url(self, cfg):
        with pytest.raises(VaultConfigError, match="Invalid vault URL"):
            cfg.save_api_url("ftp://vault.example")

    def test_file_comments_and_quotes(self, cfg):
        cfg.config_dir.mkdir(parents=True)
        cfg.config_file.write_text(
            '# settings\n\n'
            'WAIFUVAULT_URL="https://quoted.example"\n'
            "WAIFUVAULT_TIMEOUT=5\n"
        )
        assert cfg.api_url == "https://quoted.example"
        assert cfg.timeout == 5.0

    @pytest.mark.parametrize("raw", ["abc", "0", "-1"])
    def test_invalid_timeout(self, cfg, monkeypatch, raw):
        monkeypatch.setenv("WAIFUVAULT_TIMEOUT", raw)
        with pytest.raises(VaultConfigError):
            _ = cfg.timeout
