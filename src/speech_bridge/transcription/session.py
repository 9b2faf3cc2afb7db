"""Streaming recognition session.

StreamingSession owns one bidirectional stream to the recognition service:
- initialize() opens the stream and sends the configuration message
- send_audio() encodes samples and writes them as ordered chunks
- receive_transcript() reads one response and normalizes its alternatives
- close() cancels the stream and releases it

Sending and receiving are guarded by two independent locks so audio upload
and transcript polling can run on separate threads. close() is the only
operation that takes both. A send or receive aborted because close() ran is
reported as a successful no-op, not as an error.

initialize() is not guarded: callers must not run it concurrently with any
other operation on the same session.
"""

import logging
import threading
import uuid
from typing import TYPE_CHECKING, Any

from ..audio.chunker import encode_samples, iter_chunks
from ..core.config import get_logger
from .exceptions import (
    ConfigurationError,
    ReceptionError,
    SpeechBridgeError,
    StateError,
    StreamCancelledError,
    TransmissionError,
)
from .normalizer import normalize_response
from .types import RecognitionConfig, SessionState, SessionStats

if TYPE_CHECKING:
    from .transport import ClientFactory, RecognitionClient, RecognitionStream

logger = get_logger(__name__)

NOT_INITIALIZED = "Stream is not initialized"


def _default_client_factory() -> "RecognitionClient":
    from .transport import GoogleSpeechClient

    return GoogleSpeechClient.from_config()


class StreamingSession:
    """Manages the lifecycle of a single recognition stream.

    Example:
        session = StreamingSession()
        session.initialize(language="en-US", sample_rate=16000)

        # sender thread
        session.send_audio(samples)

        # receiver thread
        text = session.receive_transcript()

        session.close()

    """

    def __init__(self, client_factory: "ClientFactory | None" = None, session_id: str | None = None):
        """Initialize an unopened session.

        Args:
            client_factory: Callable returning a RecognitionClient; defaults to the
                Google Cloud Speech client built from the configuration file
            session_id: Identifier used in log lines (auto-generated if not provided)

        """
        self.session_id = session_id or f"session_{uuid.uuid4().hex[:8]}"
        self._client_factory = client_factory or _default_client_factory

        self._state = SessionState.UNINITIALIZED
        self._config: RecognitionConfig | None = None
        self._client: RecognitionClient | None = None
        self._stream: RecognitionStream | None = None
        self._cancelled: threading.Event | None = None
        self._last_error = ""

        self._send_lock = threading.Lock()
        self._receive_lock = threading.Lock()

        self._stats = SessionStats()

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def config(self) -> RecognitionConfig | None:
        """Configuration of the current (or most recent) stream."""
        return self._config

    @property
    def stats(self) -> SessionStats:
        return self._stats

    @property
    def last_error(self) -> str:
        return self._last_error

    def is_initialized(self) -> bool:
        """Whether the session is active. Lock-free; may be stale by the time it is used."""
        return self._state is SessionState.ACTIVE

    def get_log(self) -> str:
        """Most recent error text, or an empty string if nothing failed yet."""
        return self._last_error

    def _record_error(
        self, error_cls: type[SpeechBridgeError], message: str, level: int = logging.ERROR
    ) -> SpeechBridgeError:
        self._last_error = message
        logger.log(level, f"[{self.session_id}] {message}")
        return error_cls(message)

    def initialize(
        self,
        language: str | None = None,
        sample_rate: int | None = None,
        model: str | None = None,
        max_alternatives: int | None = None,
        interim_results: bool | None = None,
    ) -> None:
        """Open a new stream and send its configuration message.

        Arguments left as None fall back to the configuration file. An active
        stream is closed first.

        Raises:
            ConfigurationError: If the configuration is invalid or the client,
                the stream or the configuration message fails

        """
        if self._state is SessionState.ACTIVE:
            logger.info(f"[{self.session_id}] Re-initializing, closing current stream")
            self.close()

        try:
            config = RecognitionConfig.from_config(
                language=language,
                sample_rate=sample_rate,
                model=model,
                max_alternatives=max_alternatives,
                interim_results=interim_results,
            )
            config.validate()
        except ConfigurationError as e:
            self._state = SessionState.UNINITIALIZED
            raise self._record_error(ConfigurationError, str(e)) from e
        except (OSError, ValueError, TypeError) as e:
            self._state = SessionState.UNINITIALIZED
            raise self._record_error(ConfigurationError, f"Could not load configuration: {e}") from e

        client: RecognitionClient | None = None
        stream: RecognitionStream | None = None
        try:
            client = self._client_factory()
            stream = client.open_stream()
            stream.send_config(config)
        except Exception as e:
            self._release(client, stream)
            self._state = SessionState.UNINITIALIZED
            raise self._record_error(ConfigurationError, f"Could not initialize stream: {e}") from e

        self._config = config
        self._client = client
        self._stream = stream
        self._cancelled = threading.Event()
        self._stats.start()
        self._state = SessionState.ACTIVE

        logger.info(
            f"[{self.session_id}] Stream initialized: language={config.language} "
            f"sample_rate={config.sample_rate} model={config.model} "
            f"max_alternatives={config.max_alternatives} interim_results={config.interim_results}"
        )

    def send_audio(self, samples: Any, sample_count: int | None = None) -> int:
        """Encode samples and write them to the stream in order.

        The send lock is held for the whole call, so chunks from concurrent
        callers never interleave. If close() runs while chunks remain, the
        rest are dropped and the call still succeeds.

        Args:
            samples: 16-bit signed samples (sequence, numpy array or raw buffer)
            sample_count: Number of samples to send (defaults to all of them)

        Returns:
            Number of chunks written

        Raises:
            StateError: If the session is not active
            TransmissionError: If the samples cannot be encoded or a chunk write fails

        """
        with self._send_lock:
            if self._state is not SessionState.ACTIVE:
                raise self._record_error(StateError, NOT_INITIALIZED, logging.WARNING)
            stream = self._stream
            cancelled = self._cancelled
            assert stream is not None and cancelled is not None

            try:
                data = encode_samples(samples, sample_count)
            except ValueError as e:
                raise self._record_error(TransmissionError, f"Could not encode audio: {e}") from e

            sent = 0
            for chunk in iter_chunks(data):
                if cancelled.is_set():
                    logger.info(f"[{self.session_id}] Stream closed during send after {sent} chunk(s)")
                    return sent
                try:
                    stream.send_audio(chunk)
                except Exception as e:
                    if isinstance(e, StreamCancelledError) or cancelled.is_set():
                        logger.info(f"[{self.session_id}] Send cancelled after {sent} chunk(s)")
                        return sent
                    raise self._record_error(TransmissionError, f"Could not send audio: {e}") from e

                sent += 1
                self._stats.chunks_sent += 1
                self._stats.bytes_sent += len(chunk)

            logger.debug(f"[{self.session_id}] Sent {len(data)} bytes in {sent} chunk(s)")
            return sent

    def receive_transcript(self) -> str:
        """Block for the next response and return its normalized transcript.

        Returns an empty string if the response carries no alternatives, or if
        the receive was aborted because close() ran.

        Raises:
            StateError: If the session is not active
            ReceptionError: If the stream ended, the receive failed, or the
                service reported a recognition error

        """
        with self._receive_lock:
            if self._state is not SessionState.ACTIVE:
                raise self._record_error(StateError, NOT_INITIALIZED, logging.WARNING)
            stream = self._stream
            cancelled = self._cancelled
            assert stream is not None and cancelled is not None

            try:
                response = stream.recv()
            except Exception as e:
                if isinstance(e, StreamCancelledError) or cancelled.is_set():
                    logger.info(f"[{self.session_id}] Receive cancelled")
                    return ""
                raise self._record_error(ReceptionError, f"Cannot stream results: {e}") from e

            if response is not None:
                self._stats.responses_received += 1

        # The response is processed outside the receive lock
        if response is None:
            if cancelled.is_set():
                return ""
            raise self._record_error(ReceptionError, "Cannot stream results: stream ended")

        if response.has_error:
            raise self._record_error(ReceptionError, f"Could not recognize: {response.error_message}")

        transcript = normalize_response(response)
        logger.debug(f"[{self.session_id}] Received transcript: '{transcript[:80]}'")
        return transcript

    def close(self) -> None:
        """Cancel the stream and release it. Safe to call repeatedly.

        Cancellation happens before the locks are taken so that a receive
        blocked on the stream returns and gives up the receive lock.
        """
        cancelled = self._cancelled
        stream = self._stream
        if cancelled is not None:
            cancelled.set()
        if stream is not None:
            try:
                stream.cancel()
            except Exception as e:
                logger.warning(f"[{self.session_id}] Error cancelling stream: {e}")

        with self._send_lock, self._receive_lock:
            client = self._client
            was_active = self._state is SessionState.ACTIVE
            self._stream = None
            self._client = None
            self._cancelled = None
            self._state = SessionState.CLOSED
            self._release(client, None)

        if was_active:
            logger.info(
                f"[{self.session_id}] Stream closed: {self._stats.chunks_sent} chunk(s), "
                f"{self._stats.bytes_sent} bytes sent, {self._stats.responses_received} response(s)"
            )

    def _release(self, client: "RecognitionClient | None", stream: "RecognitionStream | None") -> None:
        if stream is not None:
            try:
                stream.cancel()
            except Exception as e:
                logger.warning(f"[{self.session_id}] Error cancelling stream: {e}")
        if client is not None:
            try:
                client.close()
            except Exception as e:
                logger.warning(f"[{self.session_id}] Error closing client: {e}")

    def __enter__(self) -> "StreamingSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
