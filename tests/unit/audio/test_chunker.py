"""Unit tests for audio encoding and chunking."""

import math
import struct

import numpy as np
import pytest

from speech_bridge.audio.chunker import (
    CHUNK_SIZE_BYTES,
    chunk_audio,
    encode_samples,
    iter_chunks,
)


class TestEncodeSamples:
    """Test little-endian int16 encoding."""

    def test_little_endian_layout(self):
        """Each sample becomes two bytes, low byte first."""
        data = encode_samples([100, -100, 0, 32000])
        assert data == struct.pack("<4h", 100, -100, 0, 32000)
        assert data[:2] == b"\x64\x00"

    def test_sample_count_limits_output(self):
        """Only the first sample_count samples are encoded."""
        data = encode_samples([1, 2, 3, 4], sample_count=2)
        assert data == struct.pack("<2h", 1, 2)

    def test_zero_samples(self):
        assert encode_samples([1, 2, 3], sample_count=0) == b""
        assert encode_samples([]) == b""

    def test_numpy_int16_input(self):
        samples = np.array([-32768, 32767], dtype=np.int16)
        assert encode_samples(samples) == struct.pack("<2h", -32768, 32767)

    def test_big_endian_array_is_converted(self):
        samples = np.array([258, -2], dtype=">i2")
        assert encode_samples(samples) == struct.pack("<2h", 258, -2)

    def test_raw_buffer_input(self):
        """Raw buffers are read as native-endian int16."""
        raw = np.array([5, -5], dtype=np.int16).tobytes()
        assert encode_samples(raw) == struct.pack("<2h", 5, -5)

    def test_output_is_a_copy(self):
        """Mutating the caller's buffer afterwards does not change the encoded bytes."""
        samples = np.array([1, 2, 3], dtype=np.int16)
        data = encode_samples(samples)
        samples[0] = 99
        assert data == struct.pack("<3h", 1, 2, 3)

    def test_count_exceeding_buffer(self):
        with pytest.raises(ValueError, match="exceeds buffer length"):
            encode_samples([1, 2], sample_count=3)

    def test_negative_count(self):
        with pytest.raises(ValueError, match="must not be negative"):
            encode_samples([1, 2], sample_count=-1)

    def test_out_of_range_values(self):
        with pytest.raises(ValueError, match="16-bit range"):
            encode_samples([40000])

    def test_float_samples_rejected(self):
        with pytest.raises(ValueError, match="integer PCM"):
            encode_samples(np.array([0.5, 0.25]))

    def test_odd_raw_buffer(self):
        with pytest.raises(ValueError, match="odd length"):
            encode_samples(b"\x00\x01\x02")

    def test_two_dimensional_rejected(self):
        with pytest.raises(ValueError, match="one-dimensional"):
            encode_samples(np.zeros((2, 2), dtype=np.int16))


class TestChunking:
    """Test splitting encoded audio into transmission chunks."""

    @pytest.mark.parametrize("sample_count", [1, 511, 512, 513, 1024, 1500])
    def test_chunk_count_and_sizes(self, sample_count):
        """2N bytes are split into ceil(2N / 1024) chunks, all full except the last."""
        samples = np.arange(sample_count, dtype=np.int16)
        chunks = chunk_audio(samples)

        assert len(chunks) == math.ceil(2 * sample_count / CHUNK_SIZE_BYTES)
        assert all(len(chunk) == CHUNK_SIZE_BYTES for chunk in chunks[:-1])
        assert 0 < len(chunks[-1]) <= CHUNK_SIZE_BYTES
        assert b"".join(chunks) == samples.astype("<i2").tobytes()

    def test_empty_input_yields_no_chunks(self):
        assert chunk_audio([]) == []
        assert list(iter_chunks(b"")) == []

    def test_chunk_may_split_a_sample(self):
        """Chunk boundaries are byte offsets, not sample boundaries."""
        chunks = list(iter_chunks(struct.pack("<3h", 1, 2, 3), chunk_size=3))
        assert [len(chunk) for chunk in chunks] == [3, 3]
        assert chunks[0][2:] + chunks[1][:1] == struct.pack("<h", 2)

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError, match="Chunk size must be positive"):
            list(iter_chunks(b"abcd", chunk_size=0))
