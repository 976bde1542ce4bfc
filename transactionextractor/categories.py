from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .config import DEFAULT_CONFIG, ExtractorConfig
from .models import INCOME

logger = logging.getLogger(__name__)

KEYWORD_CONFIDENCE = 85
SALARY_CONFIDENCE = 90
INFLOW_CONFIDENCE = 60
DEFAULT_CONFIDENCE = 40

OTHER = "Other"
TRANSFER_IN = "Transfer In"

# "1,000.00 CR", a lone CR column, or a trailing CR
CR_MARKER_RE = re.compile(r"\d\s*CR\b|(?:^|\t)CR\.?(?:\t|$)|\bCR\.?\s*$", re.IGNORECASE)


def is_income_text(text: str, config: ExtractorConfig = DEFAULT_CONFIG) -> bool:
    """True when *text* reads as money coming in, as on a statement credit row."""
    text = (text or "").strip()
    if CR_MARKER_RE.search(text):
        return True
    low = text.lower()
    if "credit" in low or "deposit" in low:
        return True
    return any(marker in low for marker in config.income_markers)


@dataclass(frozen=True)
class CategoryMatch:
    category: str
    confidence: int

    @property
    def matched(self) -> bool:
        return self.category != OTHER


class CategoryClassifier:
    """Keyword-table lookup into the configured category taxonomy."""

    def __init__(self, config: ExtractorConfig = DEFAULT_CONFIG):
        self.config = config

    def classify(self, text: str, txn_type: str = "expense") -> CategoryMatch:
        low = (text or "").lower()
        if txn_type == INCOME:
            return self._classify_income(low)
        return self._classify_expense(low)

    def infer(self, text: str, txn_type: str = "expense") -> str:
        return self.classify(text, txn_type).category

    def _classify_income(self, low: str) -> CategoryMatch:
        if "salary" in low or "payroll" in low:
            return CategoryMatch("Salary", SALARY_CONFIDENCE)
        if "refund" in low or "reversal" in low:
            return CategoryMatch("Refund", KEYWORD_CONFIDENCE)
        if "interest" in low or "dividend" in low:
            return CategoryMatch("Investment", KEYWORD_CONFIDENCE)
        for category, keywords in self.config.income_keywords:
            if any(k in low for k in keywords):
                return CategoryMatch(self.validate(category, INCOME), KEYWORD_CONFIDENCE)
        return CategoryMatch(self.validate(TRANSFER_IN, INCOME), INFLOW_CONFIDENCE)

    def _classify_expense(self, low: str) -> CategoryMatch:
        for category, keywords in self.config.expense_keywords:
            if any(k in low for k in keywords):
                return CategoryMatch(self.validate(category), KEYWORD_CONFIDENCE)
        for category, confidence, keywords in self.config.expense_fallback_rules:
            if any(k in low for k in keywords):
                return CategoryMatch(self.validate(category), confidence)
        return CategoryMatch(OTHER, DEFAULT_CONFIDENCE)

    def validate(self, category: str, txn_type: str = "expense") -> str:
        """Coerce *category* to a member of the taxonomy for *txn_type*.

        Exact (case-insensitive) matches win, then containment in either
        direction; anything else becomes ``Other``.
        """
        valid = self.config.categories_for(txn_type)
        if not category:
            return OTHER
        if category in valid:
            return category

        low = category.strip().lower()
        if not low:
            return OTHER
        for candidate in valid:
            if candidate.lower() == low:
                return candidate
        for candidate in valid:
            cand = candidate.lower()
            if cand in low or low in cand:
                return candidate

        logger.debug(f"Category '{category}' not in {txn_type} taxonomy, using {OTHER}")
        return OTHER


def validate_category(category: str, txn_type: str = "expense", config: ExtractorConfig = DEFAULT_CONFIG) -> str:
    return CategoryClassifier(config).validate(category, txn_type)
