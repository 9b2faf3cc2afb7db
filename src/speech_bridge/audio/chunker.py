"""Audio chunking for the recognition stream.

Samples are encoded as little-endian 16-bit PCM and split into byte chunks of
at most CHUNK_SIZE_BYTES. Chunk boundaries fall on byte offsets, so a chunk
may end in the middle of a sample.
"""

from collections.abc import Iterator
from typing import Any

import numpy as np

CHUNK_SIZE_BYTES = 1024
SAMPLE_WIDTH_BYTES = 2

_INT16_MIN = np.iinfo(np.int16).min
_INT16_MAX = np.iinfo(np.int16).max


def _as_sample_array(samples: Any) -> np.ndarray:
    if isinstance(samples, (bytes, bytearray, memoryview)):
        raw = memoryview(samples).cast("B")
        if len(raw) % SAMPLE_WIDTH_BYTES:
            raise ValueError(f"Raw sample buffer has odd length {len(raw)}")
        # Raw buffers carry native-endian int16, as produced by a C caller
        return np.frombuffer(raw, dtype=np.int16)

    array = np.asarray(samples)
    if array.ndim != 1:
        raise ValueError(f"Expected a one-dimensional sample buffer, got shape {array.shape}")
    if array.size == 0:
        return array.astype(np.int16)
    if not np.issubdtype(array.dtype, np.integer):
        raise ValueError(f"Expected integer PCM samples, got dtype {array.dtype}")
    if array.dtype != np.int16 and (array.min() < _INT16_MIN or array.max() > _INT16_MAX):
        raise ValueError("Sample values exceed the signed 16-bit range")
    return array


def encode_samples(samples: Any, sample_count: int | None = None) -> bytes:
    """Encode the first sample_count samples as little-endian int16 bytes.

    The result is always an owned copy; the caller's buffer is only read for
    the duration of the call.

    Args:
        samples: Sequence, numpy array or raw buffer of 16-bit signed samples
        sample_count: Number of samples to take (defaults to the whole buffer)

    Returns:
        Exactly 2 * sample_count bytes

    Raises:
        ValueError: If the buffer is malformed or shorter than sample_count

    """
    array = _as_sample_array(samples)
    if sample_count is None:
        sample_count = int(array.size)
    if sample_count < 0:
        raise ValueError(f"Sample count must not be negative, got {sample_count}")
    if sample_count > array.size:
        raise ValueError(f"Sample count {sample_count} exceeds buffer length {array.size}")

    return array[:sample_count].astype("<i2", copy=True).tobytes()


def iter_chunks(data: bytes, chunk_size: int = CHUNK_SIZE_BYTES) -> Iterator[bytes]:
    """Yield consecutive slices of data, each at most chunk_size bytes.

    Empty input yields nothing; a zero-length tail is never produced.
    """
    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")
    for offset in range(0, len(data), chunk_size):
        yield data[offset : offset + chunk_size]


def chunk_audio(samples: Any, sample_count: int | None = None, chunk_size: int = CHUNK_SIZE_BYTES) -> list[bytes]:
    """Encode samples and split them into ordered transmission chunks."""
    return list(iter_chunks(encode_samples(samples, sample_count), chunk_size))
