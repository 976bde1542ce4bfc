"""Optional enhancement of low-confidence text parses.

An *enhancer* is any callable ``(image_payload, api_key) -> EnhancementResult``,
typically a thin client around an OCR or vision model.  The rule-based parse
always runs first; the enhancer is only consulted when that result is weak
(or the caller asks for it) and only replaces it when it is more confident.
Any failure inside the enhancer leaves the rule-based result in place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .categories import validate_category
from .dates import match_date
from .errors import EnhancementError
from .models import EXPENSE, MultiParseResult, ParsedTransaction, SourceType
from .parser import TransactionParser

logger = logging.getLogger(__name__)

ENHANCED_DESCRIPTION = "AI Extracted"


@dataclass
class EnhancementResult:
    amount: Optional[float] = None
    description: Optional[str] = None
    merchant: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    confidence: int = 0
    raw_text: str = ""


@dataclass
class ParseOptions:
    prefer_enhancement: bool = False
    api_key: Optional[str] = None
    image_payload: Any = None


Enhancer = Callable[[Any, Optional[str]], EnhancementResult]


def _should_enhance(rule_based: MultiParseResult, options: ParseOptions, threshold: int) -> bool:
    if not options.api_key or options.image_payload is None:
        return False
    if options.prefer_enhancement:
        return True
    return not rule_based.items or rule_based.confidence < threshold


def _to_result(enhanced: EnhancementResult, text: str, parser: TransactionParser) -> MultiParseResult:
    ctx = parser.context()
    description = enhanced.description or enhanced.merchant or ENHANCED_DESCRIPTION
    if enhanced.category:
        category = validate_category(enhanced.category, EXPENSE, parser.config)
    else:
        category = ctx.classifier.infer(description)
    txn = ParsedTransaction(
        amount=enhanced.amount,
        description=description,
        category=category,
        date=match_date(enhanced.date or "") or ctx.today.isoformat(),
        confidence=max(0, min(100, int(enhanced.confidence))),
        type=EXPENSE,
        raw_text=enhanced.raw_text or text,
        merchant=enhanced.merchant,
    )
    return MultiParseResult([txn], SourceType.SINGLE, text)


def call_enhancer(enhancer: Enhancer, options: ParseOptions) -> EnhancementResult:
    """Run *enhancer*, reporting any failure as an ``EnhancementError``."""
    try:
        return enhancer(options.image_payload, options.api_key)
    except EnhancementError:
        raise
    except Exception as e:
        raise EnhancementError(f"{type(e).__name__}: {e}") from e


def parse_with_enhancement(
    text: str,
    options: Optional[ParseOptions] = None,
    enhancer: Optional[Enhancer] = None,
    parser: Optional[TransactionParser] = None,
) -> MultiParseResult:
    """Rule-based parse, deferring to *enhancer* when that parse is not convincing."""
    options = options or ParseOptions()
    parser = parser or TransactionParser()
    rule_based = parser.parse_transactions(text)

    if enhancer is None or not _should_enhance(rule_based, options, parser.config.enhancement_threshold):
        return rule_based

    try:
        enhanced = call_enhancer(enhancer, options)
    except EnhancementError as e:
        logger.warning(f"Enhancement failed, using rule-based result: {e}")
        return rule_based

    if not enhanced or not enhanced.amount or enhanced.amount <= 0:
        logger.info("Enhancement returned no amount, keeping rule-based result")
        return rule_based
    if enhanced.confidence <= rule_based.confidence:
        logger.info(
            f"Enhancement confidence {enhanced.confidence} not above rule-based {rule_based.confidence:.0f}"
        )
        return rule_based

    try:
        result = _to_result(enhanced, text, parser)
    except (TypeError, ValueError) as e:
        logger.warning(f"Enhancement result rejected, using rule-based result: {e}")
        return rule_based
    logger.info(f"Using enhanced result (confidence {enhanced.confidence})")
    return result
