"""Choosing between competing extractor outputs."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .extractors import ExtractionContext, ExtractorEntry
from .models import ParsedTransaction

logger = logging.getLogger(__name__)

KEEP_THRESHOLD = 70


def arbitrate(candidates: Iterable[ParsedTransaction], threshold: int = KEEP_THRESHOLD) -> List[ParsedTransaction]:
    """Rank pooled candidates by confidence and decide how many survive.

    A runner-up at or above *threshold* means the text really holds several
    transactions, so every candidate at or above it is kept.  Otherwise the
    lower-ranked ones are treated as noise and only the best is returned.
    Ties keep their pooling order.
    """
    ranked = sorted(candidates, key=lambda t: t.confidence, reverse=True)
    if not ranked:
        return []
    if len(ranked) > 1 and ranked[1].confidence >= threshold:
        return [t for t in ranked if t.confidence >= threshold]
    return ranked[:1]


def pool(entries: Sequence[ExtractorEntry], text: str, ctx: ExtractionContext) -> List[ParsedTransaction]:
    """Run every extractor and concatenate their candidates in registry order."""
    candidates: List[ParsedTransaction] = []
    for entry in entries:
        found = entry.extract(text, ctx)
        logger.debug(f"Extractor {entry.name} produced {len(found)} candidates")
        candidates.extend(found)
    return candidates


def first_match(entries: Sequence[ExtractorEntry], text: str, ctx: ExtractionContext) -> List[ParsedTransaction]:
    """Output of the first extractor (in priority order) that finds anything."""
    for entry in entries:
        found = entry.extract(text, ctx)
        if found:
            logger.debug(f"Extractor {entry.name} matched with {len(found)} items")
            return found
    return []
