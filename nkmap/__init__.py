"""Convenience exports for the N-dimensional K-Map engine."""

from .groups import Cuboid, Group, remove_redundant_groups
from .kmap_engine import (
    CubeMat,
    KarnaughMap,
    build_map,
    build_prefix_sum,
    discover_groups,
    find_groups,
    sample_prefix,
)
from .logic import (
    generate_expression,
    get_variables,
    groups_to_sympy,
    minterms_to_truth_table,
    reference_expression,
    truth_table_of,
    validate_minterm_range,
)

__all__ = [
    "CubeMat",
    "Cuboid",
    "Group",
    "KarnaughMap",
    "build_map",
    "build_prefix_sum",
    "discover_groups",
    "find_groups",
    "generate_expression",
    "get_variables",
    "groups_to_sympy",
    "minterms_to_truth_table",
    "reference_expression",
    "remove_redundant_groups",
    "sample_prefix",
    "truth_table_of",
    "validate_minterm_range",
]
