"""Soundness and completeness of ``find_groups`` over many truth tables."""

import itertools
import time

import numpy as np
import pytest

from nkmap.kmap_engine import build_map, find_groups


def check_cover(table):
    kmap = build_map(table)
    true_cells = {coords for coords, value in kmap.items() if value}
    groups = find_groups(table)

    covered = set()
    for group in groups:
        cells = group.cells()
        assert cells <= true_cells, f"{group} covers a false cell"
        covered |= cells
    assert covered == true_cells
    return groups


def test_every_three_input_table():
    for table in itertools.product([False, True], repeat=8):
        check_cover(list(table))


def test_every_two_input_table():
    for table in itertools.product([False, True], repeat=4):
        check_cover(list(table))


@pytest.mark.parametrize("density", [0.3, 0.5, 0.8])
def test_random_four_input_tables(density):
    rng = np.random.default_rng(int(density * 10))
    for _ in range(60):
        check_cover(rng.random(16) < density)


def test_random_five_input_tables():
    rng = np.random.default_rng(5)
    for _ in range(20):
        check_cover(rng.random(32) < 0.5)


def test_no_group_contains_another():
    rng = np.random.default_rng(3)
    for _ in range(30):
        groups = check_cover(rng.random(16) < 0.6)
        for container, target in itertools.permutations(groups, 2):
            assert not container.contains(target)


def test_six_input_tables_finish_quickly():
    rng = np.random.default_rng(1)
    start = time.perf_counter()
    for _ in range(5):
        check_cover(rng.random(64) < 0.5)
    check_cover([bin(i).count("1") % 2 == 1 for i in range(64)])
    assert time.perf_counter() - start < 60


def test_five_input_parity_table():
    table = [bin(i).count("1") % 2 == 1 for i in range(32)]
    groups = check_cover(table)
    assert len(groups) == 16
