"""Transcript normalization.

Turns every alternative of every result in a response into one display
string: a single leading space is dropped from each alternative, the
alternatives are joined with ";" in received order, and at most one ";" is
then stripped from each end of the joined string.
"""

from collections.abc import Iterable

from .types import RecognitionResponse

SEPARATOR = ";"


def normalize_alternatives(alternatives: Iterable[str]) -> str:
    """Join alternative transcripts into one display string.

    >>> normalize_alternatives(["hello", " world"])
    'hello;world'
    """
    segments = [text[1:] if text.startswith(" ") else text for text in alternatives]
    joined = SEPARATOR.join(segments)
    if joined.startswith(SEPARATOR):
        joined = joined[1:]
    if joined.endswith(SEPARATOR):
        joined = joined[:-1]
    return joined


def normalize_response(response: RecognitionResponse) -> str:
    """Normalize all alternatives in a response; empty if there are none."""
    return normalize_alternatives(
        alternative.transcript for result in response.results for alternative in result.alternatives
    )
