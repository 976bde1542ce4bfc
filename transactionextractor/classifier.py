"""Source-type detection for free text.

Rules are checked in order and the first one that fires decides which
extractors run.  Empty input is ``unknown``; anything no rule claims is
``single`` and gets the pooled treatment.
"""
from __future__ import annotations

import re
from typing import Callable, List, Tuple

from .config import DEFAULT_CONFIG, ExtractorConfig
from .models import SourceType

# Commas followed by exactly three digits are thousands separators, not breaks.
SEGMENT_SPLIT_RE = re.compile(r"(?:,(?!\d{3}(?!\d))|[\n;])+")
NUMERIC_TOKEN_RE = re.compile(r"\d[\d,.]*[kmb]?", re.IGNORECASE)
SMS_VERB_RE = re.compile(r"debited|credited|transfer|withdraw", re.IGNORECASE)
SMS_TOKEN_RE = re.compile(r"NGN|₦|acct|account", re.IGNORECASE)


def split_segments(text: str) -> List[str]:
    """Split on newlines, semicolons and non-thousands commas; drop blanks."""
    return [s.strip() for s in SEGMENT_SPLIT_RE.split(text or "") if s.strip()]


def has_word(low: str, word: str) -> bool:
    return re.search(rf"(?<![a-z]){re.escape(word)}(?![a-z])", low) is not None


def _named_receipt(text: str, config: ExtractorConfig) -> bool:
    low = text.lower()
    return any(k in low for p in config.receipt_providers for k in p.keywords)


def _itemized_receipt(text: str, config: ExtractorConfig) -> bool:
    low = text.lower()
    if any(has_word(low, key) for key, _name in config.retail_merchants):
        return True
    return "receipt" in low and "total" in low


def _bank_sms(text: str, config: ExtractorConfig) -> bool:
    return bool(SMS_VERB_RE.search(text) and SMS_TOKEN_RE.search(text))


def _list(text: str, config: ExtractorConfig) -> bool:
    numeric = [s for s in split_segments(text) if NUMERIC_TOKEN_RE.search(s)]
    return len(numeric) >= 2


SOURCE_RULES: Tuple[Tuple[SourceType, Callable[[str, ExtractorConfig], bool]], ...] = (
    (SourceType.NAMED_RECEIPT, _named_receipt),
    (SourceType.ITEMIZED_RECEIPT, _itemized_receipt),
    (SourceType.BANK_SMS, _bank_sms),
    (SourceType.LIST, _list),
)


def classify_source(text: str, config: ExtractorConfig = DEFAULT_CONFIG) -> SourceType:
    if not text or not text.strip():
        return SourceType.UNKNOWN
    for source_type, rule in SOURCE_RULES:
        if rule(text, config):
            return source_type
    return SourceType.SINGLE
