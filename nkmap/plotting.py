"""Draw a Karnaugh map of any size with its groups as colored outlines."""

from __future__ import annotations

import itertools
from typing import Iterable, List, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .groups import Cuboid, Group
from .kmap_engine import GRAY_ORDER, KarnaughMap
from .logic import PRIME, generate_expression

COLOR_PALETTE = [
    "#e53935", "#1e88e5", "#43a047", "#f39c12",
    "#8e24aa", "#009688", "#6d4c41", "#2e86c1",
]

# Slices per row of subplots once the map has more than two axes
SLICES_PER_ROW = 4


def axis_labels(kmap: KarnaughMap, axis: int) -> List[str]:
    """Return labels such as ``AB=01`` for every cell along ``axis``."""
    first = chr(ord("A") + 2 * axis)
    if not kmap.axis_has_two_variables(axis):
        return [f"{first}={GRAY_ORDER[coord] & 1}" for coord in range(2)]
    second = chr(ord(first) + 1)
    return [
        f"{first}{second}={gray & 1}{gray >> 1 & 1}"
        for gray in GRAY_ORDER
    ]


def _slice_title(kmap: KarnaughMap, slice_coords: Sequence[int]) -> str:
    return ", ".join(
        axis_labels(kmap, axis)[coord]
        for axis, coord in enumerate(slice_coords, start=2)
    )


def _piece_in_slice(piece: Cuboid, slice_coords: Sequence[int]) -> bool:
    return all(
        piece.offset[axis] <= coord < piece.end_corner[axis]
        for axis, coord in enumerate(slice_coords, start=2)
    )


def _piece_rect(piece: Cuboid) -> Tuple[int, int, int, int]:
    """Return ``(x, y, width, height)`` of a cuboid's footprint on the first two axes."""
    x, width = (piece.offset[0], piece.length[0]) if piece.n_dimensions > 0 else (0, 1)
    y, height = (piece.offset[1], piece.length[1]) if piece.n_dimensions > 1 else (0, 1)
    return x, y, width, height


def draw_map(kmap: KarnaughMap, groups: Iterable[Group], prime: str = PRIME):
    """Plot ``kmap`` as 2-D slices and outline every group; returns the figure."""
    widths = kmap.axis_widths
    ncols = widths[0] if widths else 1
    nrows = widths[1] if len(widths) > 1 else 1
    slices = list(itertools.product(*(range(width) for width in widths[2:])))

    per_row = min(len(slices), SLICES_PER_ROW)
    fig_rows = -(-len(slices) // per_row)
    fig, axes = plt.subplots(
        fig_rows, per_row, figsize=(1.1 * ncols * per_row + 1, 1.1 * nrows * fig_rows + 1),
        squeeze=False,
    )
    for ax in axes.flat[len(slices):]:
        ax.axis("off")

    ordered = sorted(groups)
    for ax, slice_coords in zip(axes.flat, slices):
        ax.set_xlim(-0.6, ncols)
        ax.set_ylim(-0.6, nrows)
        ax.set_xticks(np.arange(0, ncols + 1))
        ax.set_yticks(np.arange(0, nrows + 1))
        ax.set_xticklabels([])
        ax.set_yticklabels([])
        ax.grid(True, color="#888", linewidth=1)
        ax.invert_yaxis()
        ax.set_facecolor("#fafafa")
        if slice_coords:
            ax.set_title(_slice_title(kmap, slice_coords), fontsize=10)

        if widths:
            for col, label in enumerate(axis_labels(kmap, 0)):
                ax.text(col + 0.5, -0.25, label, ha="center", va="center", fontsize=8, color="#333")
        if len(widths) > 1:
            for row, label in enumerate(axis_labels(kmap, 1)):
                ax.text(-0.1, row + 0.5, label, ha="right", va="center", fontsize=8, color="#333")

        for col in range(ncols):
            for row in range(nrows):
                coords = (col, row)[: min(2, len(widths))] + slice_coords
                value = kmap.get(coords)
                ax.text(col + 0.5, row + 0.5, "1" if value else "0",
                        color="#1f3c88" if value else "#9aa7b7",
                        fontsize=13, ha="center", va="center", weight="bold")
                ax.text(col + 0.05, row + 0.9, str(kmap.truth_table_index(coords)),
                        color="#777", fontsize=7, alpha=0.7)

        for i, group in enumerate(ordered):
            color = COLOR_PALETTE[i % len(COLOR_PALETTE)]
            # Nested insets keep overlapping outlines apart
            pad = 0.06 + 0.05 * (i % 3)
            labelled = False
            for piece in Cuboid.for_group(group):
                if not _piece_in_slice(piece, slice_coords):
                    continue
                x, y, width, height = _piece_rect(piece)
                ax.add_patch(plt.Rectangle(
                    (x + pad, y + pad), width - 2 * pad, height - 2 * pad,
                    fill=False, color=color, lw=2.5, ls="-",
                ))
                if not labelled:
                    ax.text(x + width / 2, y + height / 2 + 0.25,
                            generate_expression([group], kmap.n_input_bits, prime),
                            color=color, fontsize=9, ha="center", va="center", weight="bold")
                    labelled = True

    fig.tight_layout()
    return fig


__all__ = ["COLOR_PALETTE", "axis_labels", "draw_map"]
