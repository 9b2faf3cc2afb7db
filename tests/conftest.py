"""
Shared pytest configuration.

Logs go to a throwaway directory and the user's config file is never read.
Recognition streams are replaced by an in-process fake so tests never talk to
the network.
"""

import os
import queue
import tempfile
import threading
import time

import pytest

os.environ["SPEECH_BRIDGE_LOG_DIR"] = tempfile.mkdtemp(prefix="speech-bridge-logs-")
os.environ["SPEECH_BRIDGE_CONFIG"] = os.path.join(tempfile.gettempdir(), "speech-bridge-missing-config.toml")

from speech_bridge.core.config import reset_config  # noqa: E402
from speech_bridge.transcription.exceptions import StreamCancelledError  # noqa: E402
from speech_bridge.transcription.types import RecognitionResponse  # noqa: E402

_END_OF_STREAM = object()


class FakeRecognitionStream:
    """Instrumented in-memory RecognitionStream.

    recv() blocks until a response is queued, the stream is finished or it is
    cancelled. send_audio() records chunks and tracks how many sends overlap.
    """

    def __init__(self, send_delay: float = 0.0):
        self.configs = []
        self.chunks = []
        self.cancel_calls = 0
        self.send_delay = send_delay
        self.fail_send_after: int | None = None
        self.recv_error: Exception | None = None
        self.config_error: Exception | None = None

        self._responses: queue.Queue = queue.Queue()
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._active_sends = 0
        self.max_concurrent_sends = 0
        self.recv_started = threading.Event()
        self.send_started = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def push(self, response: RecognitionResponse) -> None:
        self._responses.put(response)

    def push_transcripts(self, *groups: list[str]) -> None:
        self.push(RecognitionResponse.from_transcripts(*groups))

    def finish(self) -> None:
        self._responses.put(_END_OF_STREAM)

    def send_config(self, config) -> None:
        if self.config_error is not None:
            raise self.config_error
        self.configs.append(config)

    def send_audio(self, chunk: bytes) -> None:
        with self._lock:
            self._active_sends += 1
            self.max_concurrent_sends = max(self.max_concurrent_sends, self._active_sends)
        self.send_started.set()
        try:
            if self.send_delay:
                time.sleep(self.send_delay)
            if self._cancelled.is_set():
                raise StreamCancelledError("cancelled")
            if self.fail_send_after is not None and len(self.chunks) >= self.fail_send_after:
                raise ConnectionError("connection reset")
            self.chunks.append(bytes(chunk))
        finally:
            with self._lock:
                self._active_sends -= 1

    def recv(self):
        self.recv_started.set()
        if self.recv_error is not None:
            raise self.recv_error
        while True:
            if self._cancelled.is_set():
                raise StreamCancelledError("cancelled")
            try:
                item = self._responses.get(timeout=0.01)
            except queue.Empty:
                continue
            if item is _END_OF_STREAM:
                return None
            return item

    def cancel(self) -> None:
        self.cancel_calls += 1
        self._cancelled.set()


class FakeClient:
    """RecognitionClient handing out pre-built fake streams."""

    def __init__(self, *streams: FakeRecognitionStream):
        self.streams = list(streams)
        self.opened: list[FakeRecognitionStream] = []
        self.closed = 0

    def open_stream(self) -> FakeRecognitionStream:
        stream = self.streams.pop(0) if self.streams else FakeRecognitionStream()
        self.opened.append(stream)
        return stream

    def close(self) -> None:
        self.closed += 1


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Drop cached config and recognition env overrides around every test."""
    for name in ("SPEECH_BRIDGE_LANGUAGE", "SPEECH_BRIDGE_SAMPLE_RATE", "SPEECH_BRIDGE_MODEL"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def stream_cls():
    return FakeRecognitionStream


@pytest.fixture
def client_cls():
    return FakeClient


@pytest.fixture
def fake_stream():
    return FakeRecognitionStream()


@pytest.fixture
def fake_client(fake_stream):
    return FakeClient(fake_stream)


@pytest.fixture
def session(fake_client):
    from speech_bridge.transcription.session import StreamingSession

    session = StreamingSession(client_factory=lambda: fake_client, session_id="test")
    yield session
    session.close()


@pytest.fixture
def active_session(session):
    session.initialize(language="en-US", sample_rate=16000, model="default", max_alternatives=1)
    return session
