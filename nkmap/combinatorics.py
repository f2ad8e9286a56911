"""Lazy permutation and combination generators."""

from __future__ import annotations

import itertools
from typing import Iterator, Sequence, Tuple, TypeVar

T = TypeVar("T")


def permute(items: Sequence[T]) -> Iterator[Tuple[T, ...]]:
    """Yield every ordering of ``items``, leading item varied slowest."""
    if len(items) <= 1:
        yield tuple(items)
        return

    for i, item in enumerate(items):
        rest = tuple(items[:i]) + tuple(items[i + 1 :])
        for subperm in permute(rest):
            yield (item,) + subperm


def combine_boolean(n_total: int, n_trues: int) -> Iterator[Tuple[bool, ...]]:
    """Yield boolean tuples of length ``n_total`` with exactly ``n_trues`` ``True``s.

    Tuples with a leading ``False`` come first.
    """
    if n_trues > n_total:
        raise ValueError(f"Cannot place {n_trues} trues in {n_total} slots.")

    if n_total == 0:
        yield ()
        return

    if n_trues <= n_total - 1:
        for subcombo in combine_boolean(n_total - 1, n_trues):
            yield (False,) + subcombo

    if n_trues > 0:
        for subcombo in combine_boolean(n_total - 1, n_trues - 1):
            yield (True,) + subcombo


def any_combine_boolean(n_total: int) -> Iterator[Tuple[bool, ...]]:
    """Yield all ``2**n_total`` boolean tuples, fewest ``True``s first."""
    for n_trues in range(n_total + 1):
        yield from combine_boolean(n_total, n_trues)


def combine_n(n_total: int, n_selected: int, offset: int = 0) -> Iterator[Tuple[int, ...]]:
    """Yield sorted index tuples choosing ``n_selected`` of ``range(offset, offset + n_total)``."""
    if n_selected > n_total:
        raise ValueError(f"Cannot select {n_selected} of {n_total} indices.")
    for combo in itertools.combinations(range(offset, offset + n_total), n_selected):
        yield combo


def combine(items: Sequence[T], n_selected: int) -> Iterator[Tuple[T, ...]]:
    """Yield every ``n_selected``-subset of ``items`` in input order."""
    for indices in combine_n(len(items), n_selected):
        yield tuple(items[i] for i in indices)


def any_combine(items: Sequence[T]) -> Iterator[Tuple[T, ...]]:
    """Yield every subset of ``items``, smallest first, starting with the empty one."""
    for n_selected in range(len(items) + 1):
        yield from combine(items, n_selected)


__all__ = [
    "permute",
    "combine_boolean",
    "any_combine_boolean",
    "combine_n",
    "combine",
    "any_combine",
]
