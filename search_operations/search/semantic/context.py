"""
Context Stitching

Chunks are indexed with up to 100 characters of overlap between neighbours.
When a semantic hit is expanded with its adjacent chunks, the overlap is
removed so the stitched passage reads as continuous text.
"""

from typing import Sequence

from ...core.models import AdjacentChunk

MAX_OVERLAP = 100
MIN_OVERLAP = 20


def stitch_chunks(chunks: Sequence[AdjacentChunk]) -> str:
    """
    Join ordered chunks into one passage, removing boundary overlap.

    For each boundary the longest suffix of the text so far that equals a
    prefix of the next chunk is dropped, searching lengths from
    ``MAX_OVERLAP`` down to ``MIN_OVERLAP + 1``. Shorter matches are treated
    as coincidence and the chunks are joined with a single space.

    Args:
        chunks: Adjacent chunks in chunk-index order

    Returns:
        Stitched passage ("" for no chunks)
    """
    if not chunks:
        return ""

    result = chunks[0].content
    for chunk in chunks[1:]:
        current = chunk.content
        overlap = 0
        for length in range(min(MAX_OVERLAP, len(result), len(current)), MIN_OVERLAP, -1):
            if result[-length:] == current[:length]:
                overlap = length
                break

        if overlap:
            result += current[overlap:]
        else:
            result += " " + current

    return result
