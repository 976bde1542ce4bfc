"""Amount parsing.

``parse_amount`` handles a single token ("60k", "₦1,500.00", "1.5m").
``extract_amount`` scans free text (SMS, receipts) using an ordered list of
labelled patterns and returns the first plausible hit.  ``find_amounts``
collects every two-decimal figure on a statement row.  ``score_amounts``
ranks the candidate totals on a receipt.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

# Upper bound for the generic (unlabelled-ish) patterns so phone numbers and
# reference codes are not read as money.
GENERIC_AMOUNT_LIMIT = 100_000_000
STATEMENT_AMOUNT_LIMIT = 1_000_000_000

_MULTIPLIERS = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}

_CURRENCY_RE = re.compile(r"(?i:ngn|usd|gbp|eur)|[₦$£€N]|\s")
_SUFFIX_RE = re.compile(r"^(\d[\d,]*(?:\.\d+)?)([kmb])$", re.IGNORECASE)
_PLAIN_RE = re.compile(r"^\d+(?:\.\d+)?$")

_NUM = r"(\d[\d,]*(?:\.\d+)?)"
_NAIRA = r"(?:(?i:ngn)|₦|\bN)"
_ANY_CURRENCY = r"(?:(?i:ngn|usd)|₦|\$|£|€|\bN)"


@dataclass(frozen=True)
class AmountPattern:
    name: str
    regex: re.Pattern
    bounded: bool = False


AMOUNT_PATTERNS = (
    AmountPattern("currency", re.compile(_NAIRA + r"\s*" + _NUM)),
    AmountPattern("amount_label", re.compile(r"(?i:amt|amount)[:\s]*" + _NAIRA + r"?\s*" + _NUM)),
    AmountPattern("debit_credit", re.compile(r"(?i:debit|credit|\bdr|\bcr)[:\s]*" + _NAIRA + r"?\s*" + _NUM)),
    AmountPattern("txn_label", re.compile(r"(?i:txn|transaction)[:\s]*" + _NAIRA + r"?\s*" + _NUM)),
    AmountPattern("intl_currency", re.compile(r"(?:(?i:usd)|[$£€])\s*" + _NUM), bounded=True),
    AmountPattern(
        "currency_word",
        re.compile(_NUM + r"\s*(?i:usd|dollars?|naira|pounds?|euros?)\b"),
        bounded=True,
    ),
    AmountPattern(
        "spend_label",
        re.compile(
            r"(?i:amount|total|sum|paid|spent|cost|price)[:\s]*(?i:is\s+)?"
            + _ANY_CURRENCY + r"?\s*" + _NUM
        ),
        bounded=True,
    ),
    AmountPattern(
        "total_label",
        re.compile(r"(?i:grand\s*total|subtotal|total)[:\s]*" + _ANY_CURRENCY + r"?\s*" + _NUM),
        bounded=True,
    ),
)

# Statement rows: money always carries two decimals
_STATEMENT_AMOUNT_RE = re.compile(
    r"(?:(?i:ngn)|₦|\bN)?\s*(?<![\d.,])(\d[\d,]*\.\d{2})(?!\d|\.\d)\s*(?i:dr|cr)?"
)


def _to_number(raw: str) -> Optional[float]:
    raw = raw.replace(",", "")
    if not _PLAIN_RE.match(raw):
        return None
    return float(raw)


def parse_amount(text: str) -> Optional[float]:
    """Parse a single amount token; ``None`` when it is not a positive number."""
    if not text:
        return None

    cleaned = _CURRENCY_RE.sub("", text.strip())
    if not cleaned:
        return None

    m = _SUFFIX_RE.match(cleaned)
    if m:
        value = _to_number(m.group(1))
        if value is None:
            return None
        value *= _MULTIPLIERS[m.group(2).lower()]
    else:
        value = _to_number(cleaned)

    if value is None or value <= 0:
        return None
    return round(value, 2)


def extract_amount(text: str) -> Optional[float]:
    """Return the first labelled amount found in *text*."""
    if not text:
        return None
    for pattern in AMOUNT_PATTERNS:
        for m in pattern.regex.finditer(text):
            value = _to_number(m.group(1).rstrip(",."))
            if value is None or value <= 0:
                continue
            if pattern.bounded and value >= GENERIC_AMOUNT_LIMIT:
                continue
            return round(value, 2)
    return None


def find_amounts(text: str) -> List[float]:
    """Every distinct two-decimal amount on a statement row, in order."""
    amounts: List[float] = []
    for m in _STATEMENT_AMOUNT_RE.finditer(text):
        value = _to_number(m.group(1))
        if value is None or not 0 < value < STATEMENT_AMOUNT_LIMIT:
            continue
        if value not in amounts:
            amounts.append(value)
    return amounts


def is_amount_token(text: str) -> bool:
    """True when *text* is nothing but a statement amount (currency/DR/CR allowed)."""
    return bool(_STATEMENT_AMOUNT_RE.fullmatch(text.strip()))


# ---------------------------------------------------------------------------
# Receipt amount candidates
# ---------------------------------------------------------------------------
# OCR'd receipts are full of numbers that are not money: phone numbers,
# session/reference IDs and account numbers.  Those are filtered out before
# the remaining amounts are ranked.

TOTAL = "total"
SUBTOTAL = "subtotal"
ITEM = "item"
FEE = "fee"
UNKNOWN = "unknown"

_KIND_PRIORITY = {TOTAL: 0, SUBTOTAL: 1, ITEM: 2, FEE: 3, UNKNOWN: 4}

_RECEIPT_NUM = r"([\d,]+(?:\.\d+)?)"
_RECEIPT_CURRENCY = r"(?:(?i:ngn)|₦)?\s*"

# (kind, confidence, regex); the number is always group 1
RECEIPT_AMOUNT_PATTERNS = (
    (TOTAL, 100, re.compile(r"(?i:\b(?<!sub[\s-])(?:grand\s+)?total\b)[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (TOTAL, 98, re.compile(r"(?i:\b(?:final|net)\s+(?:amount|total))[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (TOTAL, 95, re.compile(r"(?i:\b(?:amount\s+)?(?:due|paid|payable))[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (TOTAL, 95, re.compile(r"(?i:\b(?:trans(?:action)?|txn)\s+(?:amount|amt))[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (TOTAL, 95, re.compile(r"(?i:\bamount\s+transferred)[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (TOTAL, 90, re.compile(r"(?i:\b(?:debit(?:ed)?|dr|credit(?:ed)?|cr)\b)[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (SUBTOTAL, 85, re.compile(r"(?i:\bsub[\s-]?total\b)[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
    (UNKNOWN, 80, re.compile(r"(?:(?i:ngn)|₦)\s*" + _RECEIPT_NUM)),
    (ITEM, 75, re.compile(r"(?i:\b(?:cost|price|charge|fee))[:\s]*" + _RECEIPT_CURRENCY + _RECEIPT_NUM)),
)
_LINE_END_AMOUNT_RE = re.compile(r"^(.+?)\s+" + _RECEIPT_NUM + r"$")
_LABEL_LINE_RE = re.compile(
    r"^(?:tel|phone|ref|transaction|session|account|acct|receipt|invoice|terminal|date|time)", re.IGNORECASE
)
MIN_LINE_AMOUNT = 10

_PHONE_LABEL_RE = re.compile(r"\b(?:tel|phone|mobile|cell|call|contact)\b\.?[\s:#-]*$", re.IGNORECASE)
_MOBILE_RE = re.compile(r"(?:234|0)[789][01]\d{8}")
_REFERENCE_LABEL_RE = re.compile(
    r"\b(?:ref(?:erence)?(?:[\s_-]*(?:no|number|id))?"
    r"|(?:trans(?:action)?|txn)[\s_-]*(?:id|ref|no|number)"
    r"|session(?:[\s_-]*id)?|order(?:[\s_-]*(?:id|no|number))?"
    r"|invoice(?:[\s_-]*(?:no|number))?|receipt[\s_-]*(?:no|number)"
    r"|terminal(?:[\s_-]*id)?|approval(?:[\s_-]*code)?|rrn|stan|ticket"
    r"|qty|quantity|units|bal(?:ance)?)\b\.?[\s:#-]*$",
    re.IGNORECASE,
)
_ACCOUNT_LABEL_RE = re.compile(r"\b(?:acct?|account|a/c)(?:[\s_-]*(?:no|number))?\.?[\s:#-]*$", re.IGNORECASE)
_MASK_RE = re.compile(r"(?:\*{3,}|[xX]{4,})$")
_TRAILING_CURRENCY_RE = re.compile(r"(?:(?i:ngn)|₦)?\s*$")


@dataclass(frozen=True)
class AmountCandidate:
    value: float
    kind: str
    confidence: int
    context: str


def _digits(number: str) -> str:
    return re.sub(r"[,\s]", "", number)


def _label(before: str) -> str:
    return _TRAILING_CURRENCY_RE.sub("", before)


def is_phone_number(number: str, before: str = "") -> bool:
    """A phone label right before *number*, or a Nigerian mobile number with no currency nearby."""
    if _PHONE_LABEL_RE.search(_label(before)):
        return True
    if _MOBILE_RE.fullmatch(_digits(number)):
        return not re.search(r"₦|ngn", before[-20:], re.IGNORECASE)
    return False


def is_reference_number(number: str, before: str = "") -> bool:
    """Reference, session, order, terminal, quantity or balance labels right before *number*."""
    return bool(_REFERENCE_LABEL_RE.search(_label(before)))


def is_account_number(number: str, before: str = "") -> bool:
    label = _label(before)
    if _MASK_RE.search(label):
        return True
    return bool(re.fullmatch(r"\d{10}", _digits(number)) and _ACCOUNT_LABEL_RE.search(label))


def is_noise_number(number: str, before: str = "") -> bool:
    return (
        is_phone_number(number, before)
        or is_reference_number(number, before)
        or is_account_number(number, before)
    )


def _line_before(text: str, index: int) -> str:
    return text[text.rfind("\n", 0, index) + 1:index]


def _line_kind(description: str):
    low = description.lower()
    if re.search(r"sub[\s-]?total", low):
        return SUBTOTAL, 55
    if "total" in low:
        return TOTAL, 65
    if re.search(r"fee|charge|vat|tax", low):
        return FEE, 40
    return ITEM, 35


def score_amounts(text: str) -> List[AmountCandidate]:
    """Every plausible money amount in receipt *text*, best first.

    Labelled and currency-prefixed amounts are collected first, then numbers
    ending a line.  Phone numbers, reference IDs and account numbers are
    dropped.  Each value is kept once, with its best score.
    """
    found = {}

    def _add(candidate: AmountCandidate):
        current = found.get(candidate.value)
        if current is None or candidate.confidence > current.confidence:
            found[candidate.value] = candidate

    for kind, confidence, regex in RECEIPT_AMOUNT_PATTERNS:
        for m in regex.finditer(text or ""):
            number = m.group(1)
            value = _to_number(number.rstrip(",."))
            if value is None or not 0 < value < GENERIC_AMOUNT_LIMIT:
                continue
            if is_noise_number(number, _line_before(text, m.start(1))):
                continue
            context = text[max(0, m.start() - 30):m.end() + 30].strip()
            _add(AmountCandidate(round(value, 2), kind, confidence, context))

    for raw_line in (text or "").split("\n"):
        line = raw_line.strip()
        if len(line) < 3 or len(line) > 100 or _LABEL_LINE_RE.match(line):
            continue
        m = _LINE_END_AMOUNT_RE.match(line)
        if not m:
            continue
        description, number = m.group(1).strip(), m.group(2)
        value = _to_number(number.rstrip(",."))
        if value is None or not MIN_LINE_AMOUNT <= value < GENERIC_AMOUNT_LIMIT:
            continue
        if round(value, 2) in found or is_noise_number(number, description + " "):
            continue
        kind, confidence = _line_kind(description)
        _add(AmountCandidate(round(value, 2), kind, confidence, line))

    return sorted(found.values(), key=lambda c: (-c.confidence, _KIND_PRIORITY[c.kind]))


def best_receipt_amount(text: str) -> Optional[AmountCandidate]:
    """The highest-ranked total when there is one, else the best candidate."""
    candidates = score_amounts(text)
    for candidate in candidates:
        if candidate.kind == TOTAL:
            return candidate
    return candidates[0] if candidates else None
