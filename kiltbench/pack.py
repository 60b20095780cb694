"""Packing variable-length sequences into fixed-size slots.

Samples are ``(item, length)`` pairs. Packs are built greedily from the
longest sequences down, each new sequence filling the slot whose remaining
space fits it most closely.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")

_Entry = tuple[int, list[int]]
_Lookup = dict[int, list[_Entry]]


def histify(
    samples: Iterable[tuple[T, int]], max_seq_len: int
) -> list[list[tuple[T, int]]]:
    """Group samples by length; bucket ``n`` holds the samples of length ``n + 1``."""
    histogram: list[list[tuple[T, int]]] = [[] for _ in range(max_seq_len)]
    for sample in samples:
        length = sample[1]
        if not 1 <= length <= max_seq_len:
            raise ValueError(
                f"sequence length {length} is outside 1..{max_seq_len}"
            )
        histogram[length - 1].append(sample)
    return histogram


def _add_pack(
    lengths: list[int],
    count: int,
    pending: _Lookup,
    complete: _Lookup,
    limit: int,
    remaining: int,
) -> None:
    target = complete if len(lengths) == limit or remaining == 0 else pending
    target.setdefault(remaining, []).append((count, lengths))


def _plan(histogram: list[list[tuple[T, int]]], max_seq_len: int, limit: int) -> _Lookup:
    complete: _Lookup = {}
    pending: _Lookup = {}

    for i in range(max_seq_len):
        to_bin = len(histogram[max_seq_len - 1 - i])
        length = max_seq_len - i
        offset = i + 1
        while to_bin > 0:
            key = length + offset
            if key in pending:
                to_pack, lengths = pending[key].pop()
                new_lengths = [*lengths, length]
                count = min(to_pack, to_bin)
                if to_pack > to_bin:
                    pending[key].append((to_pack - to_bin, lengths))
                    to_bin = 0
                else:
                    to_bin -= to_pack
                _add_pack(new_lengths, count, pending, complete, limit, offset)
                if not pending[key]:
                    del pending[key]
            else:
                offset -= 1

            if offset < 0:
                _add_pack([length], to_bin, pending, complete, limit, i)
                to_bin = 0

    for key in sorted(pending):
        complete.setdefault(key, []).extend(pending[key])
    return complete


def pack(
    samples: Sequence[tuple[T, int]], max_seq_len: int, max_seq_per_pack: int
) -> list[list[tuple[T, int]]]:
    """Pack samples so that each pack's total length fits ``max_seq_len``.

    No pack holds more than ``max_seq_per_pack`` samples, and every sample
    ends up in exactly one pack.
    """
    histogram = histify(samples, max_seq_len)
    strategies = _plan(histogram, max_seq_len, max_seq_per_pack)

    packed: list[list[tuple[T, int]]] = []
    for key in sorted(strategies):
        for count, lengths in strategies[key]:
            for _ in range(count):
                packed.append([histogram[length - 1].pop() for length in lengths])
    return packed