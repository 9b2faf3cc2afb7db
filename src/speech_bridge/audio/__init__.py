#!/usr/bin/env python3
"""Audio APIs for Speech Bridge.

Public surface is kept explicit to reduce accidental coupling to internals.
"""

from .chunker import CHUNK_SIZE_BYTES, SAMPLE_WIDTH_BYTES, chunk_audio, encode_samples, iter_chunks

__all__ = [
    "CHUNK_SIZE_BYTES",
    "SAMPLE_WIDTH_BYTES",
    "chunk_audio",
    "encode_samples",
    "iter_chunks",
]
