"""
Split input records into fixed-size blocks for the enrichment service
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_BLOCK_SIZE = 50


def split_into_blocks(records: Sequence[T], block_size: int = DEFAULT_BLOCK_SIZE) -> List[List[T]]:
    """
    Split records into contiguous blocks, preserving order.

    Every block except possibly the last has exactly `block_size` items and
    concatenating the blocks gives back the input.
    """
    if block_size < 1:
        raise ValueError(f"block_size must be positive, got {block_size}")

    return [
        list(records[i:i + block_size])
        for i in range(0, len(records), block_size)
    ]
