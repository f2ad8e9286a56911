"""Karnaugh map indexing, prefix sums and group discovery for any number of inputs."""

from __future__ import annotations

import functools
import itertools
import logging
from typing import Iterator, List, Sequence, Set, Tuple

import numpy as np

from .combinatorics import combine_boolean
from .groups import AXIS_WIDTH, Group, remove_redundant_groups

log = logging.getLogger(__name__)

# Gray-code ordering along an axis; bit 0 is the earlier input of the pair
GRAY_ORDER: Sequence[int] = (0b00, 0b01, 0b11, 0b10)

# One slot past the map on every axis holds the wrapped-around first cell
PREFIX_WIDTH = 5

INVALID_INDEX = -1

Coords = Tuple[int, ...]


class CubeMat:
    """Flat array addressed as a cube with ``width`` units along every axis."""

    def __init__(self, array, width: int = AXIS_WIDTH, n_dimensions: int = 0) -> None:
        self.array = np.asarray(array)
        self.width = width
        self.n_dimensions = n_dimensions

    def __len__(self) -> int:
        return len(self.array)

    def coords_to_index(self, coords: Sequence[int]) -> int:
        """Return the flat index for ``coords`` or ``INVALID_INDEX`` if any is out of range."""
        index = 0
        for axis, coord in enumerate(coords):
            if coord < 0 or coord >= self.width:
                return INVALID_INDEX
            index += coord * self.width**axis
        return index

    def coords_to_index_wrapping(self, coords: Sequence[int]) -> int:
        """Return the flat index for ``coords`` taken modulo the width on every axis."""
        return sum((coord % self.width) * self.width**axis for axis, coord in enumerate(coords))

    def index_to_coords(self, index: int) -> Coords:
        return tuple(index // self.width**axis % self.width for axis in range(self.n_dimensions))

    def get(self, coords: Sequence[int], default=None):
        """Return the value at ``coords``, or ``default`` when it lies outside the array."""
        index = self.coords_to_index(coords)
        if index == INVALID_INDEX or index >= len(self.array):
            return default
        return self.array[index].item()

    def get_wrapping(self, coords: Sequence[int], default=None):
        index = self.coords_to_index_wrapping(coords)
        if index >= len(self.array):
            return default
        return self.array[index].item()

    def set(self, value, coords: Sequence[int]) -> "CubeMat":
        index = self.coords_to_index(coords)
        if index == INVALID_INDEX or index >= len(self.array):
            raise IndexError(f"Coordinates {tuple(coords)} are outside the grid.")
        self.array[index] = value
        return self

    def items(self) -> Iterator[Tuple[Coords, object]]:
        """Yield ``(coords, value)`` pairs in flat index order."""
        for index in range(len(self.array)):
            yield self.index_to_coords(index), self.array[index].item()


def input_bits_for(length: int) -> int:
    """Return log2(length), failing when the truth table size is not a power of two."""
    if length <= 0 or length & (length - 1):
        raise ValueError(f"Truth table size must be a power of 2, got {length}.")
    return length.bit_length() - 1


class KarnaughMap(CubeMat):
    """Boolean cube of width 4; the last axis only spans 2 cells for odd input counts."""

    def __init__(self, array) -> None:
        cells = np.asarray(array, dtype=bool)
        self.n_input_bits = input_bits_for(len(cells))
        # False when the last axis carries a single variable
        self.is_even = self.n_input_bits % 2 == 0
        super().__init__(cells, AXIS_WIDTH, (self.n_input_bits + 1) // 2)

    def axis_has_two_variables(self, axis: int) -> bool:
        return self.is_even or axis < self.n_dimensions - 1

    @property
    def axis_widths(self) -> Tuple[int, ...]:
        return tuple(
            AXIS_WIDTH if self.axis_has_two_variables(axis) else 2
            for axis in range(self.n_dimensions)
        )

    def truth_table_index(self, coords: Sequence[int]) -> int:
        """Return the truth table row represented by the map cell at ``coords``."""
        index = 0
        bit = 0
        for axis, coord in enumerate(coords):
            gray = GRAY_ORDER[coord]
            index |= (gray & 1) << bit
            bit += 1
            if self.axis_has_two_variables(axis):
                index |= (gray >> 1 & 1) << bit
                bit += 1
        return index


def build_map(truth_table: Sequence[bool]) -> KarnaughMap:
    """Lay a truth table out on a Gray-ordered Karnaugh map."""
    table = [bool(value) for value in truth_table]
    kmap = KarnaughMap(np.zeros(len(table), dtype=bool))
    for index in range(len(kmap)):
        kmap.array[index] = table[kmap.truth_table_index(kmap.index_to_coords(index))]
    kmap.array.flags.writeable = False
    return kmap


@functools.lru_cache(maxsize=None)
def _shifted_axis_sets(n_dimensions: int) -> Tuple[Tuple[int, Tuple[bool, ...]], ...]:
    """Every non-empty axis subset as ``(subset size, mask)``, smallest subsets first."""
    return tuple(
        (n_shifted, combo)
        for n_shifted in range(1, n_dimensions + 1)
        for combo in combine_boolean(n_dimensions, n_shifted)
    )


def build_prefix_sum(kmap: KarnaughMap) -> CubeMat:
    """Build the wrapping N-dimensional summed-area table of ``kmap``."""
    n_dimensions = kmap.n_dimensions
    if n_dimensions == 0:
        length = 1
    else:
        last_width = PREFIX_WIDTH if kmap.is_even else 2
        length = PREFIX_WIDTH ** (n_dimensions - 1) * last_width

    prefix = CubeMat(np.zeros(length, dtype=np.int64), PREFIX_WIDTH, n_dimensions)
    shifted_sets = _shifted_axis_sets(n_dimensions)

    # Neighbours shifted back along an odd number of axes are added, even are subtracted
    for index in range(length):
        coords = prefix.index_to_coords(index)
        total = int(kmap.get_wrapping(coords, False))
        for n_shifted, combo in shifted_sets:
            sign = 1 if n_shifted % 2 else -1
            target = tuple(coord - 1 if shifted else coord for coord, shifted in zip(coords, combo))
            total += sign * prefix.get(target, 0)
        prefix.array[index] = total

    prefix.array.flags.writeable = False
    return prefix


def sample_prefix(prefix: CubeMat, coords: Sequence[int], far_coords: Sequence[int]) -> int:
    """Count true cells in the inclusive box spanned by ``coords`` and ``far_coords``.

    In 2-D with a map of all ones, the box [1, 1]..[2, 2] gives
    P[2, 2] - P[0, 2] - P[2, 0] + P[0, 0] = 9 - 3 - 3 + 1 = 4.
    """
    total = prefix.get(far_coords, 0)
    for n_shifted, combo in _shifted_axis_sets(len(coords)):
        sign = -1 if n_shifted % 2 else 1
        target = tuple(
            coord - 1 if shifted else far
            for coord, far, shifted in zip(coords, far_coords, combo)
        )
        total += sign * prefix.get(target, 0)
    return total


def group_fits(prefix: CubeMat, coords: Sequence[int], sizes: Sequence[int]) -> bool:
    """Return True if every cell of the group at ``coords`` with log2 ``sizes`` is true."""
    far_coords = tuple(coord + 2**size - 1 for coord, size in zip(coords, sizes))
    return sample_prefix(prefix, coords, far_coords) == 2 ** sum(sizes)


def _step(coords: Sequence[int], axis: int, distance: int) -> Coords:
    stepped = list(coords)
    stepped[axis] = (stepped[axis] + distance) % AXIS_WIDTH
    return tuple(stepped)


def single_dimension_distances(kmap: KarnaughMap, coords: Sequence[int]) -> List[int]:
    """Upper bound on the log2 group size along each axis for a group anchored at ``coords``."""
    distances = [0] * kmap.n_dimensions
    for axis in range(kmap.n_dimensions):
        two_variables = kmap.axis_has_two_variables(axis)

        # Single-variable axes never wrap, so groups there start at 0
        if not two_variables and coords[axis] != 0:
            continue

        if not kmap.get(_step(coords, axis, 1)):
            continue
        distances[axis] = 1

        # A group spanning the whole axis is only anchored at 0
        if not two_variables or coords[axis] != 0:
            continue

        if kmap.get(_step(coords, axis, 2)) and kmap.get(_step(coords, axis, 3)):
            distances[axis] = 2

    return distances


def _groups_at(prefix: CubeMat, coords: Coords, bounds: Sequence[int]) -> Iterator[Group]:
    if not bounds:
        if group_fits(prefix, coords, ()):
            yield Group((), ())
        return

    *leading, last = bounds
    for leading_sizes in itertools.product(*(range(bound + 1) for bound in leading)):
        best = None
        for distance in range(last + 1):
            sizes = leading_sizes + (distance,)
            if not group_fits(prefix, coords, sizes):
                break
            best = sizes
        if best is not None:
            yield Group(coords, best)


def discover_groups(kmap: KarnaughMap, prefix: CubeMat) -> Set[Group]:
    """Find every group of true cells that cannot grow along its last axis.

    One group is kept per true cell and per combination of sizes on the
    other axes, so the result still holds groups contained in others.
    """
    groups: Set[Group] = set()
    for coords, value in kmap.items():
        if not value:
            continue
        bounds = single_dimension_distances(kmap, coords)
        log.debug("anchor %s: distance bounds %s", coords, bounds)
        groups.update(_groups_at(prefix, coords, bounds))

    log.debug("discovered %d candidate groups", len(groups))
    return groups


def find_groups(truth_table: Sequence[bool]) -> Set[Group]:
    """Return a reduced set of groups covering exactly the true rows of ``truth_table``."""
    kmap = build_map(truth_table)
    prefix = build_prefix_sum(kmap)
    groups = discover_groups(kmap, prefix)
    return remove_redundant_groups(groups, kmap)


__all__ = [
    "GRAY_ORDER",
    "PREFIX_WIDTH",
    "INVALID_INDEX",
    "CubeMat",
    "KarnaughMap",
    "input_bits_for",
    "build_map",
    "build_prefix_sum",
    "sample_prefix",
    "group_fits",
    "single_dimension_distances",
    "discover_groups",
    "find_groups",
]
