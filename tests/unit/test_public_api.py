import speech_bridge
from speech_bridge import audio, transcription


def test_audio_public_api_is_explicit():
    expected = {"CHUNK_SIZE_BYTES", "SAMPLE_WIDTH_BYTES", "chunk_audio", "encode_samples", "iter_chunks"}

    assert set(audio.__all__) == expected
    for name in expected:
        assert hasattr(audio, name)


def test_top_level_lazy_exports():
    for name in speech_bridge.__all__:
        assert getattr(speech_bridge, name) is not None

    assert speech_bridge.StreamingSession is transcription.StreamingSession


def test_transport_is_lazily_importable():
    from speech_bridge.transcription.transport import GoogleSpeechClient

    assert transcription.GoogleSpeechClient is GoogleSpeechClient


def test_unknown_attribute():
    try:
        speech_bridge.does_not_exist
    except AttributeError as e:
        assert "does_not_exist" in str(e)
    else:
        raise AssertionError("expected AttributeError")
