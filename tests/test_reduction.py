import numpy as np
import pytest

from nkmap.groups import Group, remove_redundant_groups
from nkmap.kmap_engine import build_map, build_prefix_sum, discover_groups, find_groups


def test_single_group_is_kept():
    group = Group((1, 1, 1, 1), (1, 1, 1, 1))
    groups = {group}
    remove_redundant_groups(groups, build_map([False] * 4**4))
    assert groups == {group}


def test_reduction_mutates_and_returns_the_same_set():
    groups = {Group((1, 1), (1, 1)), Group((1, 2), (0, 0))}
    result = remove_redundant_groups(groups, build_map([False] * 16))
    assert result is groups


def test_nested_group_reduces_to_container():
    container = Group((1, 1), (1, 1))
    groups = {container, Group((1, 2), (0, 0))}
    assert remove_redundant_groups(groups, build_map([False] * 16)) == {container}


def test_wrapping_container_removes_inner_groups():
    container = Group((3, 3), (1, 1))
    groups = {container, Group((0, 3), (0, 1)), Group((0, 0), (0, 0))}
    assert remove_redundant_groups(groups, build_map([False] * 16)) == {container}


def test_union_of_two_groups_drops_third():
    # {0, 1} and {2, 3} cover everything {1, 2} does
    groups = {Group((0,), (1,)), Group((1,), (1,)), Group((2,), (1,))}
    reduced = remove_redundant_groups(groups, build_map([False] * 4))
    assert reduced == {Group((0,), (1,)), Group((2,), (1,))}


def test_union_across_axes_drops_middle_group():
    # Three vertical pairs in a 4x4 map; the middle one is covered by its neighbours
    left = Group((0, 0), (0, 1))
    middle = Group((0, 1), (0, 1))
    right = Group((0, 2), (0, 1))
    reduced = remove_redundant_groups({left, middle, right}, build_map([False] * 16))
    assert reduced == {left, right}


def test_smaller_group_inside_larger_union_is_dropped():
    # A pair straddling two quads, plus the quads themselves
    top = Group((0, 0), (1, 1))
    bottom = Group((2, 0), (1, 1))
    straddling = Group((1, 0), (1, 0))
    reduced = remove_redundant_groups({top, bottom, straddling}, build_map([False] * 16))
    assert reduced == {top, bottom}


def test_same_volume_groups_needed_together_are_kept():
    groups = {Group((0,), (0,)), Group((1,), (0,)), Group((2,), (0,))}
    assert remove_redundant_groups(set(groups), build_map([False] * 4)) == groups


def test_reduction_keeps_covered_cells():
    rng = np.random.default_rng(11)
    for _ in range(40):
        kmap = build_map(rng.random(16) < 0.6)
        raw = discover_groups(kmap, build_prefix_sum(kmap))
        expected = set().union(*(g.cells() for g in raw)) if raw else set()
        reduced = remove_redundant_groups(set(raw), kmap)
        covered = set().union(*(g.cells() for g in reduced)) if reduced else set()
        assert covered == expected
        assert reduced <= raw


@pytest.mark.parametrize("seed", range(5))
def test_reduction_is_idempotent(seed):
    rng = np.random.default_rng(seed)
    for n_inputs in (3, 4, 5):
        table = rng.random(2**n_inputs) < 0.5
        groups = find_groups(table)
        again = remove_redundant_groups(set(groups), build_map(table))
        assert again == groups


def test_groups_with_equal_footprints_keep_one():
    # Both span the whole 1-D map, so each contains the other
    groups = {Group((0,), (2,)), Group((1,), (2,))}
    reduced = remove_redundant_groups(groups, build_map([True] * 4))
    assert len(reduced) == 1
    (survivor,) = reduced
    assert survivor.cells() == {(0,), (1,), (2,), (3,)}


def test_groups_only_cover_of_a_cell_is_always_kept():
    # Each pair is the only cover of one end cell; the middle pair goes
    groups = {Group((0, 0), (1, 0)), Group((1, 0), (1, 0)), Group((2, 0), (1, 0))}
    reduced = remove_redundant_groups(groups, build_map([False] * 16))
    assert reduced == {Group((0, 0), (1, 0)), Group((2, 0), (1, 0))}
