"""End-to-end session scenarios over the in-process fake stream."""

import struct
import threading

import numpy as np

from speech_bridge.transcription import bridge


def test_single_utterance(fake_client, fake_stream):
    session = bridge.create_session(lambda: fake_client)

    assert bridge.initialize_stream(session, "en-US", 16000, "default", 1, False)
    assert bridge.send_audio(session, [100, -100, 0, 32000], 4)
    assert fake_stream.chunks == [struct.pack("<4h", 100, -100, 0, 32000)]

    fake_stream.push_transcripts(["test"])
    assert bridge.receive_transcript(session) == (True, "test")

    bridge.close_stream(session)
    assert not bridge.is_initialized(session)
    assert bridge.get_log(session) == ""


def test_concurrent_sender_and_receiver(fake_client, fake_stream):
    """Audio is sent on one thread while transcripts are read on another until close."""
    session = bridge.create_session(lambda: fake_client)
    assert bridge.initialize_stream(session, "en-US", 16000)

    transcripts = []
    receiver_done = threading.Event()

    def receive_loop():
        while True:
            ok, text = bridge.receive_transcript(session)
            if not ok:
                break
            if text:
                transcripts.append(text)
            elif not bridge.is_initialized(session):
                break
        receiver_done.set()

    receiver = threading.Thread(target=receive_loop, daemon=True)
    receiver.start()

    for value in range(5):
        assert bridge.send_audio(session, np.full(1600, value, dtype=np.int16))
        fake_stream.push_transcripts([f"block {value}"])

    # Wait until every transcript has been consumed before closing
    for _ in range(500):
        if len(transcripts) == 5:
            break
        receiver_done.wait(0.01)

    bridge.close_stream(session)
    receiver.join(5.0)

    assert receiver_done.is_set()
    assert transcripts == [f"block {value}" for value in range(5)]
    assert len(b"".join(fake_stream.chunks)) == 5 * 3200
    assert fake_stream.max_concurrent_sends == 1


def test_reuse_after_close(client_cls, stream_cls):
    first, second = stream_cls(), stream_cls()
    client = client_cls(first, second)
    session = bridge.create_session(lambda: client)

    assert bridge.initialize_stream(session, "en-US", 16000)
    bridge.close_stream(session)
    assert not bridge.send_audio(session, [1])

    assert bridge.initialize_stream(session, "en-US", 16000)
    assert bridge.send_audio(session, [1])
    assert second.chunks == [struct.pack("<h", 1)]
    assert first.chunks == []
    bridge.close_stream(session)
