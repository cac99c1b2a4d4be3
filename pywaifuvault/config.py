"""Configuration for the WaifuVault client."""

import os
from pathlib import Path
from typing import Optional

from .exceptions import VaultConfigError

DEFAULT_API_URL = "https://waifuvault.moe"


class Config:
    """Client settings read from the environment and the config file.

    Lookup order for each setting: environment variable, then
    ``~/.config/pywaifuvault/config``, then the built-in default.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".config" / "pywaifuvault"
        self.config_file = self.config_dir / "config"

    def _read_config_file(self) -> dict[str, str]:
        """Read KEY=value pairs from the config file."""
        values: dict[str, str] = {}
        if not self.config_file.exists():
            return values

        with open(self.config_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip().strip('"').strip("'")
        return values

    def _write_config_file(self, values: dict[str, str]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            for key, value in values.items():
                f.write(f"{key}={value}\n")
        # Restrict permissions to owner only
        self.config_file.chmod(0o600)

    @property
    def api_url(self) -> str:
        """Vault host, without trailing slash."""
        url = os.environ.get("WAIFUVAULT_URL") or self._read_config_file().get(
            "WAIFUVAULT_URL"
        )
        return (url or DEFAULT_API_URL).rstrip("/")

    @property
    def timeout(self) -> Optional[float]:
        """Request timeout in seconds, or None to wait indefinitely."""
        raw = os.environ.get("WAIFUVAULT_TIMEOUT") or self._read_config_file().get(
            "WAIFUVAULT_TIMEOUT"
        )
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError as e:
            raise VaultConfigError(f"Invalid WAIFUVAULT_TIMEOUT: {raw!r}") from e
        if value <= 0:
            raise VaultConfigError(f"WAIFUVAULT_TIMEOUT must be positive: {raw!r}")
        return value

    def save_api_url(self, api_url: str) -> None:
        """Persist the vault host to the config file.

        Args:
            api_url: Base URL such as ``https://waifuvault.moe``

        Raises:
            VaultConfigError: If the URL is not http(s)
        """
        if not api_url.startswith(("http://", "https://")):
            raise VaultConfigError(f"Invalid vault URL: {api_url!r}")
        values = self._read_config_file()
        values["WAIFUVAULT_URL"] = api_url.rstrip("/")
        self._write_config_file(values)

    def is_configured(self) -> bool:
        """True if a custom vault host is set."""
        return bool(
            os.environ.get("WAIFUVAULT_URL")
            or self._read_config_file().get("WAIFUVAULT_URL")
        )

    def get_config_path(self) -> Path:
        return self.config_file


config = Config()
