# -*- coding: utf-8 -*-
"""glyphs.py
Row reconstruction for positioned PDF text.

A PDF renderer hands us loose text fragments ("glyphs"), each with an x/y
position and a page number.  Bank statements are tables, so the first job is
to put those fragments back into physical rows:

1.  Sort by page, then top-to-bottom (larger *y* is nearer the top of the
    page), then left-to-right.
2.  Walk the sorted glyphs and keep adding to the current row while the page
    is unchanged and the baseline stays within ``tolerance`` of the row's
    first glyph.
3.  Sort each row by *x* and join the texts with the column separator so the
    statement parser can split columns again.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

logger = logging.getLogger(__name__)

ROW_TOLERANCE = 5
COLUMN_SEPARATOR = "\t"


@dataclass(frozen=True)
class Glyph:
    text: str
    x: float
    y: float
    page: int


def group_rows(glyphs: Iterable[Glyph], tolerance: float = ROW_TOLERANCE) -> List[List[Glyph]]:
    """Cluster glyphs sharing a page and (near) baseline into x-ordered rows."""
    ordered = sorted(
        (g for g in glyphs if g.text and g.text.strip()),
        key=lambda g: (g.page, -g.y, g.x),
    )

    rows: List[List[Glyph]] = []
    current: List[Glyph] = []
    row_y = None
    row_page = None
    for glyph in ordered:
        if current and (glyph.page != row_page or abs(glyph.y - row_y) > tolerance):
            rows.append(current)
            current = []
        if not current:
            row_y = glyph.y
            row_page = glyph.page
        current.append(glyph)
    if current:
        rows.append(current)

    return [sorted(row, key=lambda g: g.x) for row in rows]


def reconstruct_rows(
    glyphs: Iterable[Glyph],
    tolerance: float = ROW_TOLERANCE,
    separator: str = COLUMN_SEPARATOR,
) -> List[str]:
    """Return one string per physical row with columns joined by *separator*."""
    rows = group_rows(glyphs, tolerance)
    lines = [separator.join(g.text.strip() for g in row) for row in rows]
    logger.info(f"Row reconstruction produced {len(lines)} rows")
    return lines
