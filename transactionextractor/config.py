"""Configuration data for the extraction engine.

Keyword tables, taxonomies and bank patterns are plain immutable data held
by :class:`ExtractorConfig`.  Every component takes a config at construction
time so callers can swap in their own tables (custom categories, a different
bank list, test fixtures) without touching module state.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

KeywordTable = Tuple[Tuple[str, Tuple[str, ...]], ...]

# ---------------------------------------------------------------------------
# Taxonomies
# ---------------------------------------------------------------------------
EXPENSE_CATEGORIES: Tuple[str, ...] = (
    "Food & Dining",
    "Groceries",
    "Transportation",
    "Car Repairs",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Airtime & Data",
    "Healthcare",
    "Education",
    "Travel",
    "Housing",
    "House Repairs",
    "Bank Charges",
    "Betting & Gambling",
    "Gift",
    "Contribution",
    "Recharge Card",
    "Transfer Out",
    "Cash Withdrawal",
    "Other",
)

INCOME_CATEGORIES: Tuple[str, ...] = (
    "Salary",
    "Freelance",
    "Investment",
    "Business",
    "Gift",
    "Refund",
    "Transfer In",
    "Other",
)

# ---------------------------------------------------------------------------
# Keyword tables (order matters: first category with a hit wins)
# ---------------------------------------------------------------------------
EXPENSE_KEYWORDS: KeywordTable = (
    ("Food & Dining", (
        "restaurant", "cafe", "coffee", "lunch", "dinner", "breakfast", "food", "eat", "dine",
        "mcdonald", "kfc", "domino", "pizza", "burger", "chicken republic", "mr biggs",
        "tantalizers", "kilimanjaro", "sweet sensation", "bukka", "eatery",
        "suya", "shawarma", "chicken", "amala", "pounded yam", "jollof",
        "starbucks", "subway", "nandos",
        "coke", "drink", "snack", "juice", "soda", "fanta", "sprite", "beer", "wine",
    )),
    ("Groceries", (
        "grocery", "groceries", "supermarket", "shoprite", "spar", "market",
        "foodco", "justrite", "hubmart", "next cash", "provision", "foodstuff",
        "walmart", "tesco", "aldi", "costco",
        "bread", "apple", "fruit", "vegetable", "sardine", "fish", "meat", "egg",
        "rice", "beans", "garri", "yam", "tomato", "pepper", "onion", "milk",
    )),
    ("Transportation", (
        "uber", "bolt", "taxi", "cab", "bus", "brt", "transport", "fare", "ride",
        "gokada", "opay ride", "lyft", "grab",
        "fuel", "petrol", "gas", "diesel", "filling", "nnpc", "mobil", "oando", "conoil",
        "toll", "parking", "metro", "train",
    )),
    ("Bills & Utilities", (
        "light", "electric", "power", "nepa", "phcn", "ikedc", "ekedc", "aedc",
        "water bill", "internet", "wifi", "broadband",
        "dstv", "gotv", "cable", "netflix", "spotify", "amazon prime", "showmax", "startimes",
        "utility", "waste", "sewage",
    )),
    ("Recharge Card", ("recharge card", "scratch card")),
    ("Airtime & Data", (
        "airtime", "recharge", "data", "mtn", "glo", "airtel", "9mobile", "etisalat",
        "vtu", "topup", "mobile data", "data bundle",
    )),
    ("Shopping", (
        "shop", "store", "mall", "amazon", "jumia", "konga", "alibaba", "ebay",
        "clothing", "fashion", "clothes", "shoes", "bag", "watch",
        "nike", "adidas", "zara", "h&m",
        "slot", "pointek", "phone", "laptop", "computer", "electronics", "gadget",
    )),
    ("Healthcare", (
        "hospital", "clinic", "pharmacy", "drug", "medicine", "doctor", "medical",
        "health", "dental", "dentist", "lab", "medplus", "healthplus",
        "prescription", "therapy", "treatment",
    )),
    ("Bank Charges", (
        "charge", "commission", "vat", "stamp duty", "sms alert",
        "account maintenance", "card maintenance", "transfer fee", "bank charge", "e-levy",
    )),
    ("Betting & Gambling", (
        "betting", "bet9ja", "sportybet", "nairabet", "betking", "1xbet", "betway", "merrybet",
    )),
    ("Entertainment", (
        "cinema", "movie", "film", "game", "gaming", "concert", "show", "ticket",
        "club", "bar", "lounge", "filmhouse", "genesis", "silverbird", "playstation", "xbox",
    )),
    ("Education", (
        "school", "tuition", "book", "course", "training", "exam", "waec", "jamb",
        "university", "college", "lesson", "tutorial", "udemy", "coursera",
    )),
    ("Travel", (
        "hotel", "flight", "airline", "airbnb", "booking", "travel", "trip", "vacation",
        "arik", "air peace", "ibom air", "emirates", "british airways",
    )),
    ("Gift", ("gift", "present", "birthday", "wedding", "celebration", "party")),
    ("House Repairs", (
        "plumb", "electrician", "repair", "carpenter", "paint", "renovation", "artisan",
    )),
    ("Housing", ("rent", "apartment", "house", "accommodation", "caution fee", "mortgage", "lease")),
    ("Car Repairs", (
        "mechanic", "car repair", "garage", "tire", "tyre", "panel beater",
        "car wash", "oil change", "spare parts",
    )),
    ("Contribution", (
        "contribution", "ajo", "esusu", "cooperative", "thrift", "donation", "tithe", "offering",
    )),
)

INCOME_KEYWORDS: KeywordTable = (
    ("Salary", ("salary", "wage", "payroll", "monthly pay")),
    ("Refund", ("refund", "reversal", "cashback")),
    ("Investment", ("dividend", "interest", "investment return", "capital gain", "roi")),
    ("Freelance", ("freelance", "contract", "gig", "project payment", "consulting")),
    ("Business", ("business", "sales", "revenue", "profit", "income")),
    ("Gift", ("gift", "cash gift", "birthday money")),
    ("Transfer In", ("transfer", "inflow", "credit", "received from")),
)

# (category, confidence, keywords) applied after the expense table misses
EXPENSE_FALLBACK_RULES: Tuple[Tuple[str, int, Tuple[str, ...]], ...] = (
    ("Shopping", 60, ("pos", "purchase")),
    ("Transfer Out", 60, ("transfer", "trf", "nip")),
    ("Cash Withdrawal", 70, ("withdraw", "atm")),
)

# Words that mark a statement row or SMS as money coming in
INCOME_MARKERS: Tuple[str, ...] = (
    "salary", "wage", "payroll", "transfer from", "trf frm", "inflow", "received",
    "refund", "reversal", "cashback", "dividend", "interest", "commission earned",
    "payment received",
)

STATEMENT_SKIP_PHRASES: Tuple[str, ...] = (
    "total", "opening balance", "closing balance", "balance b/f", "balance c/f",
    "brought forward", "carried forward", "trans date", "transaction date",
    "value date", "account no", "account number", "print date", "statement period",
    "available balance", "page ",
)

BANK_PATTERNS: Tuple[Tuple[str, str], ...] = (
    (r"gtbank|guaranty\s*trust|\bgtb\b", "GTBank"),
    (r"access\s*bank", "Access Bank"),
    (r"first\s*bank|\bfbn\b", "First Bank"),
    (r"\buba\b|united\s*bank\s*for\s*africa", "UBA"),
    (r"zenith", "Zenith Bank"),
    (r"stanbic", "Stanbic IBTC"),
    (r"fidelity", "Fidelity Bank"),
    (r"\bfcmb\b", "FCMB"),
    (r"union\s*bank", "Union Bank"),
    (r"sterling", "Sterling Bank"),
    (r"ecobank", "Ecobank"),
    (r"keystone", "Keystone Bank"),
    (r"polaris", "Polaris Bank"),
    (r"\bwema\b", "Wema Bank"),
    (r"heritage", "Heritage Bank"),
    (r"providus", "Providus Bank"),
    (r"\bopay\b", "OPay"),
    (r"palmpay", "PalmPay"),
    (r"\bkuda\b", "Kuda Bank"),
    (r"moniepoint", "Moniepoint"),
)


@dataclass(frozen=True)
class ReceiptProvider:
    """A payment provider whose receipts get a dedicated extractor."""

    name: str
    keywords: Tuple[str, ...]
    default_merchant: str
    default_description: Optional[str] = None
    detects_direction: bool = False


RECEIPT_PROVIDERS: Tuple[ReceiptProvider, ...] = (
    ReceiptProvider("OPay", ("opay", "o'pay"), "OPay Payment"),
    ReceiptProvider("Moniepoint", ("moniepoint",), "Moniepoint POS"),
    ReceiptProvider(
        "GTBank",
        ("gtbank", "guaranty trust", "gtb"),
        "GTBank",
        default_description="GTBank Transaction",
        detects_direction=True,
    ),
)

RETAIL_MERCHANTS: Tuple[Tuple[str, str], ...] = (
    ("foodco", "Foodco"),
    ("shoprite", "Shoprite"),
    ("spar", "Spar"),
    ("justrite", "Justrite"),
    ("hubmart", "Hubmart"),
)


@dataclass(frozen=True)
class ExtractorConfig:
    """Immutable bundle of every table the engine consults."""

    expense_categories: Tuple[str, ...] = EXPENSE_CATEGORIES
    income_categories: Tuple[str, ...] = INCOME_CATEGORIES
    expense_keywords: KeywordTable = EXPENSE_KEYWORDS
    income_keywords: KeywordTable = INCOME_KEYWORDS
    expense_fallback_rules: Tuple[Tuple[str, int, Tuple[str, ...]], ...] = EXPENSE_FALLBACK_RULES
    income_markers: Tuple[str, ...] = INCOME_MARKERS
    statement_skip_phrases: Tuple[str, ...] = STATEMENT_SKIP_PHRASES
    bank_patterns: Tuple[Tuple[str, str], ...] = BANK_PATTERNS
    receipt_providers: Tuple[ReceiptProvider, ...] = RECEIPT_PROVIDERS
    retail_merchants: Tuple[Tuple[str, str], ...] = RETAIL_MERCHANTS
    row_tolerance: float = 5
    column_separator: str = "\t"
    enhancement_threshold: int = 75
    arbiter_threshold: int = 70

    def categories_for(self, txn_type: str) -> Tuple[str, ...]:
        if txn_type == "income":
            return self.income_categories
        return self.expense_categories

    def with_custom_categories(
        self,
        expense: Iterable[str] = (),
        income: Iterable[str] = (),
    ) -> "ExtractorConfig":
        """Return a copy whose taxonomies also contain the given custom labels."""
        def _merge(base: Tuple[str, ...], custom: Iterable[str]) -> Tuple[str, ...]:
            merged = list(base)
            for label in custom:
                label = label.strip()
                if label and label not in merged:
                    merged.append(label)
            return tuple(merged)

        return replace(
            self,
            expense_categories=_merge(self.expense_categories, expense),
            income_categories=_merge(self.income_categories, income),
        )


DEFAULT_CONFIG = ExtractorConfig()


def _as_table(raw: Dict[str, Iterable[str]]) -> KeywordTable:
    return tuple((category, tuple(words)) for category, words in raw.items())


def load_config(path: str, base: ExtractorConfig = DEFAULT_CONFIG) -> ExtractorConfig:
    """Load JSON overrides on top of *base*.

    Recognised keys: ``expense_categories``, ``income_categories`` (lists that
    are appended as custom categories), ``expense_keywords`` and
    ``income_keywords`` (objects mapping category -> keyword list, replacing the
    built-in tables), ``bank_patterns`` (list of ``[regex, name]`` pairs) and
    the numeric settings ``row_tolerance``, ``enhancement_threshold`` and
    ``arbiter_threshold``.
    """
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)

    config = base.with_custom_categories(
        data.get("expense_categories", ()),
        data.get("income_categories", ()),
    )
    overrides = {}
    if "expense_keywords" in data:
        overrides["expense_keywords"] = _as_table(data["expense_keywords"])
    if "income_keywords" in data:
        overrides["income_keywords"] = _as_table(data["income_keywords"])
    if "bank_patterns" in data:
        overrides["bank_patterns"] = tuple((p, n) for p, n in data["bank_patterns"])
    for key in ("row_tolerance", "enhancement_threshold", "arbiter_threshold"):
        if key in data:
            overrides[key] = data[key]

    logger.info(f"Loaded extractor config from {path} ({len(overrides)} overrides)")
    return replace(config, **overrides)
