"""Group and cuboid geometry, and reduction of a group set to a small cover."""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    DefaultDict,
    Dict,
    FrozenSet,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from .combinatorics import any_combine, any_combine_boolean

if TYPE_CHECKING:
    from .kmap_engine import KarnaughMap

log = logging.getLogger(__name__)

# Cells along a two-variable axis
AXIS_WIDTH = 4

# log2(AXIS_WIDTH): a group of this size covers its whole axis
FULL_SIZE = 2


@dataclass(frozen=True, order=True)
class Group:
    """Block of ``2**volume`` map cells anchored at ``offset``, possibly wrapping."""

    offset: Tuple[int, ...]
    # log2 of the side length along each axis
    size: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", tuple(self.offset))
        object.__setattr__(self, "size", tuple(self.size))

    @property
    def n_dimensions(self) -> int:
        return len(self.offset)

    @property
    def volume(self) -> int:
        """log2 of the number of cells in the group."""
        return sum(self.size)

    @property
    def length(self) -> Tuple[int, ...]:
        return tuple(2**size for size in self.size)

    @property
    def end_corner(self) -> Tuple[int, ...]:
        return tuple(coord + length for coord, length in zip(self.offset, self.length))

    def wrapped_dimensions(self) -> List[int]:
        """Axes along which the group runs past the map edge and continues at 0."""
        return [axis for axis, end in enumerate(self.end_corner) if end > AXIS_WIDTH]

    def cells(self) -> FrozenSet[Tuple[int, ...]]:
        """Return the map coordinates covered by the group, wrapping included."""
        spans = [
            [(coord + step) % AXIS_WIDTH for step in range(length)]
            for coord, length in zip(self.offset, self.length)
        ]
        return frozenset(itertools.product(*spans))

    def partial_contains(self, target: "Group") -> bool:
        """Containment test that ignores this group's own wrapping."""
        end_corner = self.end_corner
        return all(
            coord >= self.offset[axis]
            and (end <= end_corner[axis] or self.size[axis] == FULL_SIZE)
            for axis, (coord, end) in enumerate(zip(target.offset, target.end_corner))
        )

    def contains(self, target: "Group") -> bool:
        """Return True if every cell of ``target`` is in this group and they differ."""
        if target == self:
            return False

        # Shifting a wrapping axis back by a full turn exposes the part past the edge
        wrapped = self.wrapped_dimensions()
        for combo in any_combine_boolean(len(wrapped)):
            offset = list(self.offset)
            for axis, shifted in zip(wrapped, combo):
                if shifted:
                    offset[axis] -= AXIS_WIDTH
            if Group(tuple(offset), self.size).partial_contains(target):
                return True
        return False


class SubtractResult(NamedTuple):
    changed: bool
    subcuboids: Tuple["Cuboid", ...]


@dataclass(frozen=True)
class Cuboid:
    """Axis-aligned box that never wraps; ``length`` holds true side lengths."""

    offset: Tuple[int, ...]
    length: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "offset", tuple(self.offset))
        object.__setattr__(self, "length", tuple(self.length))

    @property
    def n_dimensions(self) -> int:
        return len(self.offset)

    @property
    def end_corner(self) -> Tuple[int, ...]:
        return tuple(coord + length for coord, length in zip(self.offset, self.length))

    @classmethod
    def that_covers(cls, kmap: "KarnaughMap") -> "Cuboid":
        """Cuboid spanning the whole map."""
        return cls((0,) * kmap.n_dimensions, kmap.axis_widths)

    @classmethod
    def for_group(cls, group: Group) -> List["Cuboid"]:
        """Split ``group`` into disjoint cuboids, two pieces per wrapped axis."""
        wrapped = group.wrapped_dimensions()
        cuboids: List[Cuboid] = []
        for combo in any_combine_boolean(len(wrapped)):
            offset = list(group.offset)
            length = list(group.length)
            for axis, head in zip(wrapped, combo):
                head_length = AXIS_WIDTH - group.offset[axis]
                if head:
                    length[axis] = head_length
                else:
                    offset[axis] = 0
                    length[axis] = group.length[axis] - head_length
            cuboids.append(cls(tuple(offset), tuple(length)))
        return cuboids

    @staticmethod
    def total_volume(cuboids: Iterable["Cuboid"]) -> int:
        return sum(cuboid.volume() for cuboid in cuboids)

    def cells(self) -> FrozenSet[Tuple[int, ...]]:
        spans = [range(coord, end) for coord, end in zip(self.offset, self.end_corner)]
        return frozenset(itertools.product(*spans))

    def volume(self) -> int:
        volume = 1
        for length in self.length:
            volume *= length
        return volume

    def _slab(self, target: "Cuboid", axis: int, start: int, end: int) -> "Cuboid":
        # Axes before ``axis`` are clipped to the overlap, later ones keep this cuboid's range
        own_end = self.end_corner
        target_end = target.end_corner
        offset: List[int] = []
        length: List[int] = []
        for i in range(self.n_dimensions):
            if i < axis:
                low = max(self.offset[i], target.offset[i])
                high = min(own_end[i], target_end[i])
            elif i == axis:
                low, high = start, end
            else:
                low, high = self.offset[i], own_end[i]
            offset.append(low)
            length.append(high - low)
        return Cuboid(tuple(offset), tuple(length))

    def subtract(self, target: "Cuboid") -> SubtractResult:
        """Express ``self`` minus ``target`` as disjoint cuboids."""
        own_end = self.end_corner
        target_end = target.end_corner
        pieces: List[Cuboid] = []
        for axis in range(self.n_dimensions):
            if target_end[axis] <= self.offset[axis] or own_end[axis] <= target.offset[axis]:
                return SubtractResult(False, (self,))

            if self.offset[axis] < target.offset[axis]:
                pieces.append(self._slab(target, axis, self.offset[axis], target.offset[axis]))
            if target_end[axis] < own_end[axis]:
                pieces.append(self._slab(target, axis, target_end[axis], own_end[axis]))

        return SubtractResult(True, tuple(pieces))


def _cut(uncovered: Set[Cuboid], piece: Cuboid) -> Tuple[bool, Set[Cuboid]]:
    changed = False
    remaining: Set[Cuboid] = set()
    for cuboid in uncovered:
        result = cuboid.subtract(piece)
        changed = changed or result.changed
        remaining.update(result.subcuboids)
    return changed, remaining


def _apply_groups(
    uncovered: Set[Cuboid],
    groups: Sequence[Group],
    cuboids_for: Dict[Group, List[Cuboid]],
    require_effect: bool = False,
) -> Optional[Set[Cuboid]]:
    """Cut ``groups`` out of ``uncovered`` in order.

    With ``require_effect``, returns None as soon as a group overlaps
    nothing that is still uncovered.
    """
    for group in groups:
        group_changed = False
        for piece in cuboids_for[group]:
            changed, uncovered = _cut(uncovered, piece)
            group_changed = group_changed or changed
        if require_effect and not group_changed:
            return None
    return uncovered


def _cells_of(cuboids: Iterable[Cuboid]) -> Set[Tuple[int, ...]]:
    cells: Set[Tuple[int, ...]] = set()
    for cuboid in cuboids:
        cells |= cuboid.cells()
    return cells


def _each_adds_cells(
    combo: Sequence[Group],
    reach: Dict[Group, FrozenSet[Tuple[int, ...]]],
    target: Set[Tuple[int, ...]],
) -> bool:
    covered: Set[Tuple[int, ...]] = set()
    for group in combo:
        if reach[group] <= covered:
            return False
        covered |= reach[group]
    return covered == target


def _smallest_subset(
    uncovered: Set[Cuboid],
    bucket: Sequence[Group],
    cuboids_for: Dict[Group, List[Cuboid]],
    reference: Set[Cuboid],
) -> Tuple[Tuple[Group, ...], Set[Cuboid]]:
    """Find the first subset of ``bucket``, smallest first, that leaves ``reference`` uncovered.

    Every group of the subset must cut something still uncovered when it
    is applied. A group that alone covers some cell is part of every such
    subset, and a group reaching only cells those already cover is part of
    no smallest one, so only the remaining groups are enumerated.
    """
    target = _cells_of(uncovered) - _cells_of(reference)
    reach = {group: group.cells() & target for group in bucket}

    owners: DefaultDict[Tuple[int, ...], List[Group]] = defaultdict(list)
    for group in bucket:
        for cell in reach[group]:
            owners[cell].append(group)
    required = {found[0] for found in owners.values() if len(found) == 1}
    left = target.difference(*(reach[group] for group in required))
    optional = [group for group in bucket if group not in required and reach[group] & left]

    optimal_volume = Cuboid.total_volume(reference)
    for extra in any_combine(optional):
        combo = tuple(sorted(required.union(extra)))
        if not _each_adds_cells(combo, reach, target):
            continue
        remaining = _apply_groups(uncovered, combo, cuboids_for, require_effect=True)
        if remaining is not None and Cuboid.total_volume(remaining) == optimal_volume:
            return combo, remaining
    return tuple(bucket), reference


def remove_redundant_groups(groups: Set[Group], kmap: "KarnaughMap") -> Set[Group]:
    """Delete groups from ``groups`` without changing the cells they cover together.

    Groups inside a single other group go first. The rest are handled one
    volume at a time, largest first: within a volume, the smallest subset
    that uncovers as little of the map as the whole volume does is kept.
    Ties across volumes are settled greedily, so the result is small but
    not guaranteed minimal.
    """
    n_before = len(groups)

    # A removed group no longer removes others, so one of two equal footprints stays
    for group in sorted(groups):
        if any(container.contains(group) for container in groups):
            groups.discard(group)

    if len(groups) <= 2:
        log.info("reduced %d groups to %d", n_before, len(groups))
        return groups

    buckets: DefaultDict[int, List[Group]] = defaultdict(list)
    for group in groups:
        buckets[group.volume].append(group)

    uncovered = {Cuboid.that_covers(kmap)}
    for volume in sorted(buckets, reverse=True):
        bucket = sorted(buckets[volume])
        cuboids_for = {group: Cuboid.for_group(group) for group in bucket}

        reference = _apply_groups(uncovered, bucket, cuboids_for)
        kept, kept_uncovered = _smallest_subset(uncovered, bucket, cuboids_for, reference)

        log.debug("volume %d: kept %d of %d groups", volume, len(kept), len(bucket))
        groups.difference_update(set(bucket) - set(kept))
        uncovered = kept_uncovered

    log.info("reduced %d groups to %d", n_before, len(groups))
    return groups


__all__ = [
    "AXIS_WIDTH",
    "FULL_SIZE",
    "Group",
    "Cuboid",
    "SubtractResult",
    "remove_redundant_groups",
]
