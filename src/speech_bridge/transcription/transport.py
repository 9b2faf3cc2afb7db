#!/usr/bin/env python3
"""Bidirectional stream transport for the remote recognition service.

This module defines the stream contract the session relies on and provides
the Google Cloud Speech-to-Text v1 implementation of it.

The client library exposes streaming recognition as "request iterator in,
response iterator out". GoogleRecognitionStream turns that into explicit
send/recv calls: requests go through a queue drained by the request
iterator, and the RPC is started on a background thread because the library
waits for the first response before returning the response iterator.
"""

import queue
import threading
from collections.abc import Callable, Iterator
from typing import Any, Protocol

from google.api_core import exceptions as api_exceptions
from google.api_core.client_options import ClientOptions
from google.cloud import speech_v1
from google.cloud.speech_v1.services.speech import SpeechClient as GapicSpeechClient

from ..core.config import get_logger
from .exceptions import StreamCancelledError
from .types import RecognitionAlternative, RecognitionConfig, RecognitionResponse, RecognitionResult

logger = get_logger(__name__)

_END_OF_REQUESTS = object()


class RecognitionStream(Protocol):
    """One open bidirectional recognition stream."""

    def send_config(self, config: RecognitionConfig) -> None: ...

    def send_audio(self, chunk: bytes) -> None: ...

    def recv(self) -> RecognitionResponse | None:
        """Block for the next response; None once the service has finished the stream."""
        ...

    def cancel(self) -> None:
        """Abort the stream, unblocking any pending send or recv."""
        ...


class RecognitionClient(Protocol):
    """Factory for recognition streams holding the service connection."""

    def open_stream(self) -> RecognitionStream: ...

    def close(self) -> None: ...


ClientFactory = Callable[[], RecognitionClient]


def build_config_request(config: RecognitionConfig) -> speech_v1.StreamingRecognizeRequest:
    """Build the configuration message that opens every stream."""
    return speech_v1.StreamingRecognizeRequest(
        streaming_config=speech_v1.StreamingRecognitionConfig(
            config=speech_v1.RecognitionConfig(
                encoding=speech_v1.RecognitionConfig.AudioEncoding.LINEAR16,
                sample_rate_hertz=config.sample_rate,
                language_code=config.language,
                model=config.model,
                max_alternatives=config.max_alternatives,
            ),
            interim_results=config.interim_results,
        )
    )


def build_audio_request(chunk: bytes) -> speech_v1.StreamingRecognizeRequest:
    return speech_v1.StreamingRecognizeRequest(audio_content=chunk)


def to_recognition_response(message: Any) -> RecognitionResponse:
    """Convert a StreamingRecognizeResponse into the transport-neutral model."""
    results = [
        RecognitionResult(
            alternatives=[
                RecognitionAlternative(transcript=alternative.transcript, confidence=alternative.confidence)
                for alternative in result.alternatives
            ],
            is_final=bool(result.is_final),
            stability=float(result.stability),
        )
        for result in message.results
    ]
    error = message.error
    return RecognitionResponse(
        results=results,
        error_code=int(error.code) if error is not None else 0,
        error_message=str(error.message) if error is not None else "",
    )


class GoogleRecognitionStream:
    """RecognitionStream backed by Speech.StreamingRecognize."""

    def __init__(self, client: GapicSpeechClient):
        self._client = client
        self._requests: queue.SimpleQueue = queue.SimpleQueue()
        self._responses: Any = None
        self._start_error: Exception | None = None
        self._ready = threading.Event()
        self._cancelled = threading.Event()

        self._call_thread = threading.Thread(target=self._start_call, name="speech-bridge-rpc", daemon=True)
        self._call_thread.start()

    def _request_iterator(self) -> Iterator[speech_v1.StreamingRecognizeRequest]:
        while True:
            request = self._requests.get()
            if request is _END_OF_REQUESTS:
                return
            yield request

    def _start_call(self) -> None:
        try:
            self._responses = self._client.streaming_recognize(requests=self._request_iterator())
        except Exception as e:
            logger.error(f"Failed to start streaming recognition: {e}")
            self._start_error = e
        finally:
            self._ready.set()

        # cancel() may have run while the call was starting
        if self._cancelled.is_set() and self._responses is not None:
            self._responses.cancel()

    def _check_usable(self) -> None:
        if self._cancelled.is_set():
            raise StreamCancelledError("Stream was cancelled")
        if self._start_error is not None:
            raise self._start_error

    def send_config(self, config: RecognitionConfig) -> None:
        self._check_usable()
        self._requests.put(build_config_request(config))

    def send_audio(self, chunk: bytes) -> None:
        self._check_usable()
        self._requests.put(build_audio_request(chunk))

    def recv(self) -> RecognitionResponse | None:
        self._ready.wait()
        self._check_usable()
        try:
            message = next(self._responses)
        except StopIteration:
            return None
        except api_exceptions.Cancelled as e:
            raise StreamCancelledError(str(e)) from e
        return to_recognition_response(message)

    def cancel(self) -> None:
        self._cancelled.set()
        self._requests.put(_END_OF_REQUESTS)
        responses = self._responses
        if responses is not None:
            responses.cancel()
        self._ready.set()


class GoogleSpeechClient:
    """RecognitionClient for Google Cloud Speech-to-Text v1.

    Credentials come from credentials_file when given, otherwise from
    application default credentials (GOOGLE_APPLICATION_CREDENTIALS).
    """

    def __init__(self, credentials_file: str = "", api_endpoint: str = ""):
        client_options = ClientOptions(api_endpoint=api_endpoint) if api_endpoint else None
        if credentials_file:
            self._client = GapicSpeechClient.from_service_account_file(
                credentials_file, client_options=client_options
            )
        else:
            self._client = GapicSpeechClient(client_options=client_options)

    @classmethod
    def from_config(cls) -> "GoogleSpeechClient":
        from ..core.config import get_config

        config = get_config()
        return cls(credentials_file=config.credentials_file, api_endpoint=config.api_endpoint)

    def open_stream(self) -> GoogleRecognitionStream:
        return GoogleRecognitionStream(self._client)

    def close(self) -> None:
        self._client.transport.close()
