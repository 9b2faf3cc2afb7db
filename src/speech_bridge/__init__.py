"""Speech Bridge - relay raw PCM audio to a streaming speech recognizer and read back transcripts."""

from importlib import metadata
from importlib import import_module
from pathlib import Path
import tomllib
from typing import TYPE_CHECKING


def _get_version() -> str:
    try:
        return metadata.version("speech-bridge")
    except Exception:
        pass

    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return str(data["project"]["version"])
    except Exception:
        return "unknown"


__version__ = _get_version()

if TYPE_CHECKING:
    from .audio import chunk_audio, encode_samples
    from .core.config import ConfigLoader, get_config
    from .transcription import (
        RecognitionConfig,
        SessionState,
        SpeechBridgeError,
        StreamingSession,
        normalize_alternatives,
    )

_LAZY_EXPORTS = {
    "StreamingSession": (".transcription", "StreamingSession"),
    "RecognitionConfig": (".transcription", "RecognitionConfig"),
    "SessionState": (".transcription", "SessionState"),
    "SpeechBridgeError": (".transcription", "SpeechBridgeError"),
    "normalize_alternatives": (".transcription", "normalize_alternatives"),
    "chunk_audio": (".audio", "chunk_audio"),
    "encode_samples": (".audio", "encode_samples"),
    "ConfigLoader": (".core.config", "ConfigLoader"),
    "get_config": (".core.config", "get_config"),
}


def __getattr__(name):
    if name in {"audio", "core", "transcription"}:
        module = import_module(f".{name}", __name__)
        globals()[name] = module
        return module

    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


__all__ = [
    "StreamingSession",
    "RecognitionConfig",
    "SessionState",
    "SpeechBridgeError",
    "normalize_alternatives",
    "chunk_audio",
    "encode_samples",
    "ConfigLoader",
    "get_config",
]
