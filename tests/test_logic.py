import numpy as np
import pytest
from sympy import false, true

from nkmap.groups import Group
from nkmap.kmap_engine import find_groups
from nkmap.logic import (
    generate_expression,
    get_variables,
    group_literals,
    groups_to_sympy,
    minterms_to_truth_table,
    reference_expression,
    render_literal,
    truth_table_of,
    validate_minterm_range,
)

CONSENSUS_TABLE = [False, False, False, True, True, False, True, True]


def terms(expression):
    return sorted(expression.split(" + "))


def test_or_function():
    assert generate_expression(find_groups([False, True, True, True]), 2) == "A + B"


def test_constant_functions():
    assert generate_expression(find_groups([True] * 4), 2) == "1"
    assert generate_expression(find_groups([False] * 4), 2) == "0"
    assert generate_expression(find_groups([True]), 0) == "1"
    assert generate_expression(find_groups([False]), 0) == "0"
    assert generate_expression(set(), 5) == "0"


def test_consensus_term_is_left_out():
    assert generate_expression(find_groups(CONSENSUS_TABLE), 3) == "AB + A′C"


def test_custom_prime_mark():
    assert generate_expression(find_groups(CONSENSUS_TABLE), 3, prime="'") == "AB + A'C"


def test_xor_needs_full_minterms():
    table = [False, True, True, False]
    assert terms(generate_expression(find_groups(table), 2)) == sorted(["A′B", "AB′"])


def test_four_input_checkerboard_parity():
    table = [bin(i).count("1") % 2 == 1 for i in range(16)]
    groups = find_groups(table)
    assert len(groups) == 8
    assert all(group.volume == 0 for group in groups)


@pytest.mark.parametrize(
    "group, n_input_bits, expected",
    [
        (Group((0,), (1,)), 2, [3]),
        (Group((1,), (1,)), 2, [0]),
        (Group((2,), (1,)), 2, [2]),
        (Group((3,), (1,)), 2, [1]),
        (Group((0,), (2,)), 2, []),
        (Group((2, 3), (0, 0)), 4, [0, 2, 5, 6]),
        (Group((0, 1), (0, 0)), 3, [1, 3, 4]),
        (Group((0, 0), (1, 1)), 3, [3]),
        (Group((), ()), 0, []),
    ],
)
def test_group_literals(group, n_input_bits, expected):
    assert group_literals(group, n_input_bits) == expected


def test_render_literal():
    assert render_literal(0) == "A"
    assert render_literal(5) == "C′"
    assert render_literal(7, prime="'") == "D'"


def test_group_rendering_matches_map_cell():
    # Cell (2, 3) of a 4-input map is row 0b1011
    assert generate_expression({Group((2, 3), (0, 0))}, 4) == "ABC′D"


def test_get_variables():
    assert [str(v) for v in get_variables(3)] == ["A", "B", "C"]
    assert len(get_variables(1)) == 1
    assert get_variables(0) == ()
    with pytest.raises(ValueError):
        get_variables(-1)


def test_groups_to_sympy_degenerate_cases():
    assert groups_to_sympy(set(), 3) == false
    assert groups_to_sympy({Group((0,), (2,))}, 2) == true


@pytest.mark.parametrize("n_inputs", [1, 2, 3, 4, 5])
def test_groups_to_sympy_reproduces_truth_table(n_inputs):
    rng = np.random.default_rng(100 + n_inputs)
    for _ in range(5):
        table = [bool(v) for v in rng.random(2**n_inputs) < 0.5]
        expr = groups_to_sympy(find_groups(table), n_inputs)
        assert truth_table_of(expr, get_variables(n_inputs)) == table


def test_reference_expression():
    _, text = reference_expression([False, True, True, True])
    assert text == "A + B"
    _, text = reference_expression(CONSENSUS_TABLE)
    assert text == "A'C + AB"
    assert reference_expression([False] * 4)[1] == "0"
    assert reference_expression([True] * 4)[1] == "1"
    assert reference_expression([True])[1] == "1"


def test_minterms_to_truth_table():
    assert minterms_to_truth_table([1, 3], 2) == [False, True, False, True]
    assert minterms_to_truth_table([], 1) == [False, False]
    with pytest.raises(ValueError):
        minterms_to_truth_table([4], 2)


def test_validate_minterm_range():
    validate_minterm_range([0, 7], 3)
    with pytest.raises(ValueError, match="out of range"):
        validate_minterm_range([-1, 8], 3)
