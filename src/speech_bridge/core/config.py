#!/usr/bin/env python3
"""Configuration loader that reads from config files."""
import os
from pathlib import Path
from typing import Any

import tomllib

DEFAULT_CONFIG: dict[str, Any] = {
    "recognition": {
        "language": "en-US",
        "sample_rate": 16000,
        # One of "video", "phone_call", "command_and_search", "default"
        "model": "default",
        # 0 and 1 both request a single alternative
        "max_alternatives": 1,
        "interim_results": False,
    },
    "google": {
        "credentials_file": "",
        "api_endpoint": "",
    },
    "cli": {"block_ms": 100, "linger_s": 2.0},
}


class ConfigLoader:
    """Load configuration from config files."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        if config_path is None:
            config_path = self._default_config_path()

        self.config_file = str(config_path)
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path, "rb") as f:
                full_config = tomllib.load(f)
            bridge_config = full_config.get("bridge", {})
        else:
            bridge_config = {}

        self._config = self._merge_dicts(DEFAULT_CONFIG, bridge_config)

    def _default_config_path(self) -> Path:
        env_path = os.environ.get("SPEECH_BRIDGE_CONFIG")
        if env_path:
            return Path(env_path)
        return Path.home() / ".speech-bridge" / "config.toml"

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = base.copy()
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_dicts(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a value using dot notation (e.g., 'recognition.language')"""
        keys = key_path.split(".")
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    @property
    def language(self) -> str:
        env_language = os.environ.get("SPEECH_BRIDGE_LANGUAGE")
        if env_language:
            return env_language
        return str(self.get("recognition.language", "en-US"))

    @property
    def sample_rate(self) -> int:
        env_rate = os.environ.get("SPEECH_BRIDGE_SAMPLE_RATE")
        if env_rate:
            return int(env_rate)
        return int(self.get("recognition.sample_rate", 16000))

    @property
    def recognition_model(self) -> str:
        env_model = os.environ.get("SPEECH_BRIDGE_MODEL")
        if env_model:
            return env_model
        return str(self.get("recognition.model", "default"))

    @property
    def max_alternatives(self) -> int:
        return int(self.get("recognition.max_alternatives", 1))

    @property
    def interim_results(self) -> bool:
        return bool(self.get("recognition.interim_results", False))

    @property
    def credentials_file(self) -> str:
        """Service account file; empty means application default credentials."""
        return str(self.get("google.credentials_file", ""))

    @property
    def api_endpoint(self) -> str:
        return str(self.get("google.api_endpoint", ""))

    @property
    def cli_block_ms(self) -> int:
        return int(self.get("cli.block_ms", 100))

    @property
    def cli_linger_seconds(self) -> float:
        return float(self.get("cli.linger_s", 2.0))


# Global singleton instance
_config_loader: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Get the global config loader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config() -> None:
    """Drop the cached loader so the next get_config() re-reads the file."""
    global _config_loader
    _config_loader = None


# Re-export logging functions
from .logging import get_logger, setup_logging  # noqa: E402, F401
