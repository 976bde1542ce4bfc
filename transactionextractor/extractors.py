"""Format-specific transaction extractors for free text.

Each extractor takes the raw text plus an :class:`ExtractionContext` and
returns a (possibly empty) list of candidates scored with a fixed
confidence.  The registry keeps them in priority order: named receipts,
bank SMS, list-style, itemized receipts.
"""
import re
import logging
from dataclasses import dataclass
from datetime import date
from functools import partial
from typing import Callable, List, Optional, Tuple

from .amounts import best_receipt_amount, extract_amount, is_noise_number, parse_amount
from .categories import CategoryClassifier, is_income_text
from .classifier import has_word, split_segments
from .config import DEFAULT_CONFIG, ExtractorConfig, ReceiptProvider
from .dates import parse_date
from .models import EXPENSE, INCOME, ParsedTransaction, SourceType

logger = logging.getLogger(__name__)

LIST_CONFIDENCE = 75
NAMED_RECEIPT_CONFIDENCE = 85
BANK_SMS_CONFIDENCE = 80
ITEM_CONFIDENCE = 75
RECEIPT_TOTAL_CONFIDENCE = 70

MIN_ITEM_AMOUNT = 10
MAX_ITEM_AMOUNT = 10_000_000


@dataclass(frozen=True)
class ExtractionContext:
  config: ExtractorConfig
  classifier: CategoryClassifier
  today: date

  @classmethod
  def create(cls, config: ExtractorConfig = DEFAULT_CONFIG, today: Optional[date] = None):
    return cls(config, CategoryClassifier(config), today or date.today())


Extractor = Callable[[str, ExtractionContext], List[ParsedTransaction]]


@dataclass(frozen=True)
class ExtractorEntry:
  source_type: SourceType
  name: str
  extract: Extractor


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------
MERCHANT_PATTERNS = (
  re.compile(r"(?:\bat|\bfrom|\bto|@)\s+([A-Za-z][A-Za-z0-9\s&'.-]{2,30}?)(?:\s+on\b|\s+for\b|\s*$|\s*\n)", re.IGNORECASE),
  re.compile(r"\b(?:merchant|vendor|store|shop|restaurant)[:\s]+([A-Za-z][A-Za-z0-9\s&'.-]{2,30})", re.IGNORECASE),
  re.compile(r"\b(?:paid|payment)\s+(?:to\s+)?([A-Za-z][A-Za-z0-9\s&'.-]{2,30})", re.IGNORECASE),
  re.compile(r"\b(?:terminal|pos)[:\s]+([A-Za-z][A-Za-z0-9\s&'.-]+?)(?:\s*\n|$)", re.IGNORECASE),
)

def extract_merchant(text):
  """Return a merchant name from labelled or "at/to/from X" phrasing, else None."""
  for pattern in MERCHANT_PATTERNS:
    m = pattern.search(text or '')
    if m:
      merchant = m.group(1).strip()
      if 2 <= len(merchant) <= 50:
        return merchant
  return None


def detect_transaction_type(text, config: ExtractorConfig = DEFAULT_CONFIG):
  """Income when the text reads like a credit, by the same rule as statement rows."""
  return INCOME if is_income_text(text, config) else EXPENSE


# ---------------------------------------------------------------------------
# Named receipts (OPay, Moniepoint, GTBank)
# ---------------------------------------------------------------------------
RECEIPT_DESCRIPTION_RE = re.compile(r"\b(?:narration|remark|description|desc|for)[:\s]+(.+?)(?:\n|$)", re.IGNORECASE)
RECEIPT_MERCHANT_PATTERNS = (
  re.compile(r"\b(?:paid to|to|merchant|terminal)[ \t]*[:\t ][ \t]*([A-Za-z][A-Za-z0-9 &'.-]+?)[ \t]*(?:\n|$)", re.IGNORECASE),
  re.compile(r"([A-Z][A-Z ]+(?:CLUB|STORE|SHOP|RESTAURANT|CAFE|MARKET))"),
)


def _receipt_merchant_name(text):
  for pattern in RECEIPT_MERCHANT_PATTERNS:
    m = pattern.search(text)
    if m:
      return m.group(1).strip()
  return extract_merchant(text)


def extract_named_receipt(provider: ReceiptProvider, text: str, ctx: ExtractionContext) -> List[ParsedTransaction]:
  low = text.lower()
  if not any(k in low for k in provider.keywords):
    return []

  best = best_receipt_amount(text)
  amount = best.value if best else extract_amount(text)
  if not amount:
    logger.debug(f"{provider.name} receipt without an amount")
    return []

  merchant = _receipt_merchant_name(text) or provider.default_merchant
  m = RECEIPT_DESCRIPTION_RE.search(text)
  if m and m.group(1).strip():
    description = m.group(1).strip()
  else:
    description = provider.default_description or merchant

  txn_type = detect_transaction_type(text, ctx.config) if provider.detects_direction else EXPENSE
  if txn_type == INCOME:
    category = ctx.classifier.classify(description, INCOME).category
  else:
    category = ctx.classifier.infer(f'{description} {merchant}')

  return [ParsedTransaction(
    amount=amount,
    description=description,
    category=category,
    date=parse_date(text, ctx.today),
    confidence=NAMED_RECEIPT_CONFIDENCE,
    type=txn_type,
    raw_text=text,
    merchant=merchant,
  )]


# ---------------------------------------------------------------------------
# Bank SMS
# ---------------------------------------------------------------------------
_NAIRA = r"(?:NGN|₦|\bN)"
SMS_GATE_VERB_RE = re.compile(r"debit|credit|\bdr\b|\bcr\b|transfer|withdr|spent|paid|received|inflow", re.IGNORECASE)
SMS_GATE_TOKEN_RE = re.compile(r"NGN|₦|\bN\s?\d|acct|account", re.IGNORECASE)
SMS_AMOUNT_PATTERNS = (
  re.compile(_NAIRA + r"\s*([\d,]+\.?\d*)\s*(?:has been|was)\s*(?:debited|withdrawn)", re.IGNORECASE),
  re.compile(r"(?:debit|\bdr)[:\s]*" + _NAIRA + r"?\s*([\d,]+\.?\d*)", re.IGNORECASE),
  re.compile(r"(?:spent|paid|transfer(?:red)?)[:\s]*" + _NAIRA + r"?\s*([\d,]+\.?\d*)", re.IGNORECASE),
  re.compile(_NAIRA + r"\s*([\d,]+\.?\d*)\s*(?:has been|was)\s*credited", re.IGNORECASE),
  re.compile(r"(?:credit|\bcr)[:\s]*" + _NAIRA + r"?\s*([\d,]+\.?\d*)", re.IGNORECASE),
  re.compile(r"(?:received|inflow)[:\s]*" + _NAIRA + r"?\s*([\d,]+\.?\d*)", re.IGNORECASE),
)
SMS_DESCRIPTION_PATTERNS = (
  re.compile(r"\b(?:desc|narration|remark|ref)[:\s]+(.+?)(?:\n|$)", re.IGNORECASE),
  re.compile(r"(?:\bat|\bto|\bfrom)\s+([A-Za-z][A-Za-z0-9\s&'.-]+?)(?:\s+on\b|\s*\n|$)", re.IGNORECASE),
)


def extract_bank_sms(text: str, ctx: ExtractionContext) -> List[ParsedTransaction]:
  if not (SMS_GATE_VERB_RE.search(text) and SMS_GATE_TOKEN_RE.search(text)):
    return []

  amount = None
  for pattern in SMS_AMOUNT_PATTERNS:
    m = pattern.search(text)
    if m:
      amount = parse_amount(m.group(1).rstrip(',.'))
      if amount:
        break
  if not amount:
    amount = extract_amount(text)
  if not amount:
    return []

  txn_type = detect_transaction_type(text, ctx.config)
  description = None
  for pattern in SMS_DESCRIPTION_PATTERNS:
    m = pattern.search(text)
    if m and m.group(1).strip():
      description = m.group(1).strip()
      break
  # Unlabelled alerts are categorised on the whole message
  category = ctx.classifier.classify(description or text, txn_type).category
  if not description:
    description = 'Bank Credit' if txn_type == INCOME else 'Bank Debit'

  return [ParsedTransaction(
    amount=amount,
    description=description,
    category=category,
    date=parse_date(text, ctx.today),
    confidence=BANK_SMS_CONFIDENCE,
    type=txn_type,
    raw_text=text,
  )]


# ---------------------------------------------------------------------------
# List-style ("Food 60k, Fuel 40k")
# ---------------------------------------------------------------------------
_AMOUNT_TOKEN = r"(?:NGN\s?|₦\s?)?\d[\d,.]*[kmb]?"
AMOUNT_TOKEN_RE = re.compile(_AMOUNT_TOKEN, re.IGNORECASE)
LIST_SHAPES = (
  ('description amount', re.compile(r"^(.+?[^\s:\-])\s+(" + _AMOUNT_TOKEN + r")$", re.IGNORECASE)),
  ('description - amount', re.compile(r"^(.+?)\s*[-:]\s*(" + _AMOUNT_TOKEN + r")$", re.IGNORECASE)),
  ('amount description', re.compile(r"^(" + _AMOUNT_TOKEN + r")\s+(?!for\s)(.+)$", re.IGNORECASE)),
  ('amount for description', re.compile(r"^(" + _AMOUNT_TOKEN + r")\s+for\s+(.+)$", re.IGNORECASE)),
)
SUMMARY_SEGMENT_RE = re.compile(r"^(?:sub-?total|grand\s*total|total|balance|change)\b", re.IGNORECASE)


def _split_shape(match):
  """Return (description, amount text), whichever group holds the number."""
  first, second = match.group(1).strip(), match.group(2).strip()
  if AMOUNT_TOKEN_RE.fullmatch(first):
    return second, first
  return first, second


def extract_list(text: str, ctx: ExtractionContext) -> List[ParsedTransaction]:
  items = []
  for segment in split_segments(text):
    if SUMMARY_SEGMENT_RE.match(segment):
      continue
    for name, shape in LIST_SHAPES:
      m = shape.match(segment)
      if not m:
        continue
      description, amount_text = _split_shape(m)
      amount = parse_amount(amount_text)
      if not amount or not re.search(r"[A-Za-z]", description):
        continue
      match = ctx.classifier.classify(description, EXPENSE)
      items.append(ParsedTransaction(
        amount=amount,
        description=description,
        category=match.category,
        date=ctx.today.isoformat(),
        confidence=LIST_CONFIDENCE,
        type=EXPENSE,
        raw_text=segment,
      ))
      logger.debug(f"List segment '{segment}' matched '{name}'")
      break
  return items


# ---------------------------------------------------------------------------
# Itemized receipts (supermarkets)
# ---------------------------------------------------------------------------
GROCERIES = 'Groceries'
_ITEM_NAME = r"[A-Za-z][A-Za-z0-9\s&'./-]"
_PRICE = r"([\d,]+\.?\d*)"
ITEM_SHAPES = (
  ('wide spacing', re.compile(r"^(" + _ITEM_NAME + r"+?)\s{2,}" + _PRICE + r"$")),
  ('dot leader', re.compile(r"^(" + _ITEM_NAME + r"+?)\.{2,}\s*" + _PRICE + r"$")),
  ('qty x price = total', re.compile(r"^(" + _ITEM_NAME + r"+?)\s+\d+\s*[@x]\s*[\d,.]+\s*=?\s*" + _PRICE + r"$", re.IGNORECASE)),
  ('name qty price', re.compile(r"^(" + _ITEM_NAME + r"+?)\s+\d+\s+" + _PRICE + r"$")),
  ('price name', re.compile(r"^" + _PRICE + r"\s+(" + _ITEM_NAME + r"+)$")),
)
RECEIPT_SKIP_RE = re.compile(
  r"^(?:total|subtotal|sub-total|grand|change|cash|card|vat|discount|item|description|qty|quantity|"
  r"receipt|invoice|tel|phone|address|thank|welcome|date|time|terminal|pos|ref|transaction)\b",
  re.IGNORECASE,
)
SEPARATOR_LINE_RE = re.compile(r"^[-=_*#]+$")
# A line that starts with a total label
TOTAL_LINE_RE = re.compile(r"^\s*(?:grand\s*total|sub-?total|total)\b", re.IGNORECASE | re.MULTILINE)


def _looks_itemized(low, ctx):
  if any(has_word(low, key) for key, _name in ctx.config.retail_merchants):
    return True
  if 'receipt' in low or ('item' in low and 'qty' in low):
    return True
  return bool(TOTAL_LINE_RE.search(low))


def _receipt_merchant(low, ctx):
  for key, name in ctx.config.retail_merchants:
    if has_word(low, key):
      return name
  return 'Supermarket'


def _parse_item_line(line):
  for name, shape in ITEM_SHAPES:
    m = shape.match(line)
    if not m:
      continue
    first, second = m.group(1), m.group(2)
    if re.fullmatch(r"[\d,]+\.?\d*", first):
      amount_text, item, label = first, second, ''
    else:
      item, amount_text = first, second
      label = item + ' '
    if is_noise_number(amount_text, label):
      continue
    amount = parse_amount(amount_text)
    item = re.sub(r"\s+", ' ', item).strip()
    if amount and MIN_ITEM_AMOUNT <= amount < MAX_ITEM_AMOUNT and re.search(r"[A-Za-z]{2,}", item):
      return item, amount
  return None


def extract_itemized_receipt(text: str, ctx: ExtractionContext) -> List[ParsedTransaction]:
  low = text.lower()
  if not _looks_itemized(low, ctx):
    return []

  receipt_date = parse_date(text, ctx.today)
  merchant = _receipt_merchant(low, ctx)
  items = []
  for raw_line in text.split('\n'):
    line = raw_line.strip()
    if len(line) < 3 or RECEIPT_SKIP_RE.match(line) or SEPARATOR_LINE_RE.match(line):
      continue
    parsed = _parse_item_line(line)
    if not parsed:
      continue
    item, amount = parsed
    match = ctx.classifier.classify(item, EXPENSE)
    category = match.category if match.matched else ctx.classifier.validate(GROCERIES)
    items.append(ParsedTransaction(
      amount=amount,
      description=item,
      category=category,
      date=receipt_date,
      confidence=ITEM_CONFIDENCE,
      type=EXPENSE,
      raw_text=line,
      merchant=merchant,
    ))

  if items:
    return items

  # No line items resolved: fall back to one aggregate purchase from the total.
  best = best_receipt_amount(text)
  if not best:
    return []
  logger.debug(f"Receipt fell back to {best.kind} {best.value}")
  return [ParsedTransaction(
    amount=best.value,
    description=f'{merchant} Purchase',
    category=ctx.classifier.validate(GROCERIES),
    date=receipt_date,
    confidence=RECEIPT_TOTAL_CONFIDENCE,
    type=EXPENSE,
    raw_text=text,
    merchant=merchant,
  )]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
def build_registry(config: ExtractorConfig = DEFAULT_CONFIG) -> Tuple[ExtractorEntry, ...]:
  """Every extractor in priority order, one named-receipt entry per provider."""
  entries = [
    ExtractorEntry(SourceType.NAMED_RECEIPT, provider.name, partial(extract_named_receipt, provider))
    for provider in config.receipt_providers
  ]
  entries.extend([
    ExtractorEntry(SourceType.BANK_SMS, 'bank_sms', extract_bank_sms),
    ExtractorEntry(SourceType.LIST, 'list', extract_list),
    ExtractorEntry(SourceType.ITEMIZED_RECEIPT, 'itemized_receipt', extract_itemized_receipt),
  ])
  return tuple(entries)


def extractors_for(registry, source_type: SourceType) -> List[ExtractorEntry]:
  return [entry for entry in registry if entry.source_type == source_type]
