#!/usr/bin/env python3
"""Boolean-result boundary API over StreamingSession.

These functions are the surface handed to callers that cannot deal with
exceptions (foreign-call wrappers, simple scripts). None of them raise a
SpeechBridgeError; a False result means the reason is available from
get_log() until the next failure overwrites it.
"""

from typing import TYPE_CHECKING, Any

from .exceptions import SpeechBridgeError
from .session import StreamingSession

if TYPE_CHECKING:
    from .transport import ClientFactory


def create_session(client_factory: "ClientFactory | None" = None) -> StreamingSession:
    """Create a new, uninitialized session handle."""
    return StreamingSession(client_factory=client_factory)


def initialize_stream(
    session: StreamingSession,
    language_tag: str,
    sample_rate_hz: int,
    model: str = "default",
    max_alternatives: int = 1,
    interim_results: bool = False,
) -> bool:
    """Open the session's stream; True on success."""
    try:
        session.initialize(
            language=language_tag,
            sample_rate=sample_rate_hz,
            model=model,
            max_alternatives=max_alternatives,
            interim_results=interim_results,
        )
    except SpeechBridgeError:
        return False
    return True


def send_audio(session: StreamingSession, samples: Any, sample_count: int | None = None) -> bool:
    """Send sample_count samples (all of them by default); True on success."""
    try:
        session.send_audio(samples, sample_count)
    except SpeechBridgeError:
        return False
    return True


def receive_transcript(session: StreamingSession) -> tuple[bool, str]:
    """Receive one response.

    Returns:
        (success, transcript); the transcript is empty on failure and may be
        empty on success

    """
    try:
        return True, session.receive_transcript()
    except SpeechBridgeError:
        return False, ""


def get_log(session: StreamingSession) -> str:
    return session.get_log()


def close_stream(session: StreamingSession) -> None:
    session.close()


def is_initialized(session: StreamingSession) -> bool:
    return session.is_initialized()
