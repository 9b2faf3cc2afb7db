#!/usr/bin/env python3
"""Custom exceptions for streaming recognition sessions.

Every error raised by a session has already been recorded as the session's
last error text when the caller sees it.
"""


class SpeechBridgeError(Exception):
    """Base exception for speech bridge errors."""


class StateError(SpeechBridgeError):
    """Raised when an operation needs an active session and there is none."""


class ConfigurationError(SpeechBridgeError):
    """Raised when the client, the stream or the configuration message fails during setup."""


class TransmissionError(SpeechBridgeError):
    """Raised when an audio chunk cannot be written for a reason other than cancellation."""


class ReceptionError(SpeechBridgeError):
    """Raised when the stream ends, a receive fails, or the service reports a recognition error."""


class StreamCancelledError(SpeechBridgeError):
    """Raised by a transport when a call was aborted because the stream was cancelled."""
