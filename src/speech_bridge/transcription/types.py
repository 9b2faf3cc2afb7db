"""Type definitions for streaming recognition sessions.

Provides:
- SessionState: Lifecycle state of a session
- RecognitionConfig: Options carried by the configuration message
- RecognitionAlternative / RecognitionResult / RecognitionResponse:
  transport-neutral view of what the service sends back
- SessionStats: Traffic counters for a session
"""

import time
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ConfigurationError

RECOGNITION_MODELS = frozenset({"video", "phone_call", "command_and_search", "default"})
MAX_ALTERNATIVES_LIMIT = 30


class SessionState(Enum):
    """State of a streaming session."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(frozen=True)
class RecognitionConfig:
    """Options sent once, in the first message of a stream.

    Audio is always LINEAR16; the other fields are chosen by the caller.
    """

    language: str = "en-US"  # BCP-47 tag
    sample_rate: int = 16000
    model: str = "default"
    max_alternatives: int = 1
    interim_results: bool = False

    @classmethod
    def from_config(cls, **overrides: object) -> "RecognitionConfig":
        """Build a config from the configuration file, applying non-None overrides."""
        from ..core.config import get_config

        loader = get_config()
        values: dict[str, object] = {
            "language": loader.language,
            "sample_rate": loader.sample_rate,
            "model": loader.recognition_model,
            "max_alternatives": loader.max_alternatives,
            "interim_results": loader.interim_results,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]

    def validate(self) -> None:
        """Raise ConfigurationError if any field is out of range."""
        if not isinstance(self.language, str) or not self.language.strip():
            raise ConfigurationError("Language tag must be a non-empty BCP-47 string")
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, int) or self.sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be a positive integer, got {self.sample_rate!r}")
        if self.model not in RECOGNITION_MODELS:
            allowed = ", ".join(sorted(RECOGNITION_MODELS))
            raise ConfigurationError(f"Unknown recognition model {self.model!r} (expected one of: {allowed})")
        if (
            isinstance(self.max_alternatives, bool)
            or not isinstance(self.max_alternatives, int)
            or not 0 <= self.max_alternatives <= MAX_ALTERNATIVES_LIMIT
        ):
            raise ConfigurationError(
                f"Max alternatives must be an integer in 0..{MAX_ALTERNATIVES_LIMIT}, got {self.max_alternatives!r}"
            )
        if not isinstance(self.interim_results, bool):
            raise ConfigurationError(f"Interim results flag must be a boolean, got {self.interim_results!r}")

    @property
    def effective_max_alternatives(self) -> int:
        """Number of alternatives the service will return at most (0 means 1)."""
        return max(1, self.max_alternatives)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "encoding": "LINEAR16",
            "sample_rate_hertz": self.sample_rate,
            "language_code": self.language,
            "model": self.model,
            "max_alternatives": self.max_alternatives,
            "interim_results": self.interim_results,
        }


@dataclass
class RecognitionAlternative:
    """One candidate transcript. Confidence is carried but not used for display."""

    transcript: str
    confidence: float = 0.0


@dataclass
class RecognitionResult:
    """A recognized segment with its ranked alternatives."""

    alternatives: list[RecognitionAlternative] = field(default_factory=list)
    is_final: bool = False
    stability: float = 0.0


@dataclass
class RecognitionResponse:
    """One message received from the stream."""

    results: list[RecognitionResult] = field(default_factory=list)
    error_code: int = 0
    error_message: str = ""

    @property
    def has_error(self) -> bool:
        return self.error_code != 0

    @classmethod
    def from_transcripts(cls, *groups: list[str]) -> "RecognitionResponse":
        """Build a response with one result per group of transcript strings."""
        return cls(
            results=[
                RecognitionResult(alternatives=[RecognitionAlternative(transcript=text) for text in group])
                for group in groups
            ]
        )


@dataclass
class SessionStats:
    """Counters for a single streaming session.

    Used for monitoring and debugging.
    """

    chunks_sent: int = 0
    bytes_sent: int = 0
    responses_received: int = 0
    session_start_time: float | None = None

    def start(self) -> None:
        self.chunks_sent = 0
        self.bytes_sent = 0
        self.responses_received = 0
        self.session_start_time = time.time()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "chunks_sent": self.chunks_sent,
            "bytes_sent": self.bytes_sent,
            "responses_received": self.responses_received,
            "session_start_time": self.session_start_time,
        }
