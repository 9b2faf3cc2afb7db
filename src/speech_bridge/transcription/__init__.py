"""Streaming recognition against a remote speech service.

Public API:
- StreamingSession: Owns one recognition stream and its locks
- RecognitionConfig: Options sent in the configuration message
- normalize_alternatives / normalize_response: Display-string normalization
- bridge: Boolean-result boundary functions over a session

The Google transport is imported lazily so the rest of the package can be
used with any RecognitionClient implementation.
"""

from importlib import import_module
from typing import TYPE_CHECKING

from .exceptions import (
    ConfigurationError,
    ReceptionError,
    SpeechBridgeError,
    StateError,
    StreamCancelledError,
    TransmissionError,
)
from .normalizer import normalize_alternatives, normalize_response
from .session import StreamingSession
from .types import (
    RecognitionAlternative,
    RecognitionConfig,
    RecognitionResponse,
    RecognitionResult,
    SessionState,
    SessionStats,
)

if TYPE_CHECKING:
    from .transport import GoogleRecognitionStream, GoogleSpeechClient, RecognitionClient, RecognitionStream

_LAZY_EXPORTS = {
    "GoogleSpeechClient": (".transport", "GoogleSpeechClient"),
    "GoogleRecognitionStream": (".transport", "GoogleRecognitionStream"),
    "RecognitionClient": (".transport", "RecognitionClient"),
    "RecognitionStream": (".transport", "RecognitionStream"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name, __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


__all__ = [
    # Main API
    "StreamingSession",
    "RecognitionConfig",
    "SessionState",
    "SessionStats",
    # Responses
    "RecognitionAlternative",
    "RecognitionResult",
    "RecognitionResponse",
    "normalize_alternatives",
    "normalize_response",
    # Errors
    "SpeechBridgeError",
    "StateError",
    "ConfigurationError",
    "TransmissionError",
    "ReceptionError",
    "StreamCancelledError",
    # Transport
    "GoogleSpeechClient",
    "GoogleRecognitionStream",
    "RecognitionClient",
    "RecognitionStream",
]
