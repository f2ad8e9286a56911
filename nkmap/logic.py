"""Translate groups into sum-of-products text and SymPy expressions."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from sympy import And, Not, Or, Symbol, false, simplify_logic, symbols, true
from sympy.logic.boolalg import SOPform

from .groups import Group
from .kmap_engine import GRAY_ORDER, input_bits_for

PRIME = "′"

# Literal codes within one axis; axis ``i`` adds ``4 * i``
A, NOT_A, B, NOT_B = 0, 1, 2, 3

# Variable left constant by a size-1 group along an axis, indexed by the group's offset
SIZE_ONE_LITERALS: Sequence[int] = (NOT_B, A, B, NOT_A)


def group_literals(group: Group, n_input_bits: int) -> List[int]:
    """Return the literal codes of the product term represented by ``group``."""
    n_dimensions = (n_input_bits + 1) // 2
    is_even = n_input_bits % 2 == 0

    literals: List[int] = []
    for axis, (coord, size) in enumerate(zip(group.offset, group.size)):
        base = 4 * axis
        two_variables = is_even or axis < n_dimensions - 1

        if size == 0:
            gray = GRAY_ORDER[coord]
            literals.append(base + (A if gray & 1 else NOT_A))
            if two_variables:
                literals.append(base + (B if gray >> 1 & 1 else NOT_B))
        elif size == 1 and two_variables:
            literals.append(base + SIZE_ONE_LITERALS[coord])
        # size 1 on a single-variable axis, or a full axis: nothing constrained
    return literals


def render_literal(code: int, prime: str = PRIME) -> str:
    letter = chr(ord("A") + code // 2)
    return f"{letter}{prime}" if code % 2 else letter


def generate_expression(groups: Iterable[Group], n_input_bits: int, prime: str = PRIME) -> str:
    """Render ``groups`` as a sum of products, e.g. ``"AB + A′C"``."""
    terms: List[str] = []
    for group in sorted(groups):
        literals = group_literals(group, n_input_bits)
        terms.append("".join(render_literal(code, prime) for code in literals) or "1")
    return " + ".join(terms) if terms else "0"


def get_variables(n: int) -> Tuple[Symbol, ...]:
    """Return SymPy symbols (A, B, C, ...) for the requested variable count."""
    if n < 0:
        raise ValueError("Number of variables must not be negative.")
    return tuple(symbols(" ".join(chr(65 + i) for i in range(n)), seq=True)) if n else ()


def groups_to_sympy(groups: Iterable[Group], n_input_bits: int):
    """Build the SymPy sum of products covered by ``groups``."""
    variables = get_variables(n_input_bits)
    products = []
    for group in sorted(groups):
        factors = []
        for code in group_literals(group, n_input_bits):
            var = variables[code // 2]
            factors.append(Not(var) if code % 2 else var)
        products.append(And(*factors))
    return Or(*products) if products else false


def truth_table_of(expr, variables: Sequence[Symbol]) -> List[bool]:
    """Evaluate ``expr`` on every row; row bit ``k`` is the value of ``variables[k]``."""
    rows = []
    for index in range(2 ** len(variables)):
        subs = {var: bool(index >> k & 1) for k, var in enumerate(variables)}
        rows.append(bool(expr.xreplace(subs)))
    return rows


def simplify_to_dnf(expr):
    """Simplify expression using SymPy and return a DNF expression."""
    return simplify_logic(expr, form="dnf")


def prime_format(expr, variables: Sequence[Symbol], prime: str = "'") -> str:
    """Format a DNF expression as SOP text with literals in ``variables`` order."""
    if expr == false:
        return "0"
    if expr == true:
        return "1"

    def lit_to_str(lit) -> str:
        if isinstance(lit, Not):
            return f"{lit.args[0]}{prime}"
        return str(lit)

    terms = list(expr.args) if isinstance(expr, Or) else [expr]
    result = []
    for term in terms:
        literals = list(term.args) if isinstance(term, And) else [term]
        ordered = []
        for var in variables:
            for lit in literals:
                if lit == var or (isinstance(lit, Not) and lit.args[0] == var):
                    ordered.append(lit)
                    break
        result.append("".join(lit_to_str(item) for item in ordered) or "1")
    return " + ".join(sorted(result))


def reference_expression(truth_table: Sequence[bool], prime: str = "'") -> Tuple[object, str]:
    """Minimize the same table with SymPy's ``SOPform`` for comparison."""
    n = input_bits_for(len(truth_table))
    variables = get_variables(n)
    if n == 0:
        expr = true if truth_table[0] else false
        return expr, prime_format(expr, variables, prime)

    minterms = [
        [index >> k & 1 for k in range(n)]
        for index, value in enumerate(truth_table)
        if value
    ]
    expr = simplify_to_dnf(SOPform(variables, minterms)) if minterms else false
    return expr, prime_format(expr, variables, prime)


def validate_minterm_range(minterms: Iterable[int], n: int) -> None:
    """Ensure all minterms are within the range for the current variable count."""
    max_valid = (1 << n) - 1
    invalid = [m for m in minterms if m < 0 or m > max_valid]
    if invalid:
        raise ValueError(
            f"Minterms out of range for {n} variables (0-{max_valid}): {sorted(set(invalid))}"
        )


def minterms_to_truth_table(minterms: Iterable[int], n: int) -> List[bool]:
    """Build a truth table of ``2**n`` rows that is true exactly on ``minterms``."""
    mins = set(minterms)
    validate_minterm_range(mins, n)
    return [index in mins for index in range(2**n)]


__all__ = [
    "PRIME",
    "SIZE_ONE_LITERALS",
    "group_literals",
    "render_literal",
    "generate_expression",
    "get_variables",
    "groups_to_sympy",
    "truth_table_of",
    "simplify_to_dnf",
    "prime_format",
    "reference_expression",
    "validate_minterm_range",
    "minterms_to_truth_table",
]
