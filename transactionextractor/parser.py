"""Free-text transaction parsing.

Pasted SMS alerts, receipts, expense lists and voice transcripts all go
through :class:`TransactionParser`.  The text is classified into a source
type, the matching extractors run, and the arbiter settles what is kept.
"""
import re
import logging
from datetime import date
from typing import Optional

from .amounts import extract_amount, parse_amount
from .arbiter import arbitrate, first_match, pool
from .classifier import classify_source
from .config import DEFAULT_CONFIG, ExtractorConfig
from .dates import parse_date
from .extractors import ExtractionContext, build_registry, extract_merchant, extractors_for
from .models import EXPENSE, MultiParseResult, ParsedTransaction, SourceType

logger = logging.getLogger(__name__)

QUICK_CONFIDENCE = 70
QUICK_DESCRIPTION = 'Quick expense'

VOICE_AMOUNT_PATTERNS = (
  re.compile(r"(\d[\d,]*(?:\.\d{2})?)\s*(?:dollars?|naira|pounds?|euros?|bucks?)\b", re.IGNORECASE),
  re.compile(r"(?:spent|paid|cost)\s*(?:NGN|₦|\$)?\s*(\d[\d,]*(?:\.\d{2})?)", re.IGNORECASE),
  re.compile(r"(\d[\d,]*(?:\.\d{2})?)\s*(?:at|for|on)\b", re.IGNORECASE),
)
VOICE_BASE_CONFIDENCE = 15
VOICE_AMOUNT_BONUS = 40
VOICE_MERCHANT_BONUS = 25
VOICE_CATEGORY_BONUS = 20


class TransactionParser:
  def __init__(self, config: ExtractorConfig = DEFAULT_CONFIG, today: Optional[date] = None):
    self.config = config
    self.today = today
    self.registry = build_registry(config)

  def context(self):
    return ExtractionContext.create(self.config, self.today)

  def parse_transactions(self, text: str) -> MultiParseResult:
    """Parse *text* into zero or more transactions."""
    raw = text or ''
    stripped = raw.strip()
    if not stripped:
      return MultiParseResult([], SourceType.UNKNOWN, raw)

    ctx = self.context()
    source_type = classify_source(stripped, self.config)
    logger.info(f"Detected source type: {source_type.value}")

    if source_type == SourceType.SINGLE:
      items = self._pooled(stripped, ctx)
    else:
      items = first_match(extractors_for(self.registry, source_type), stripped, ctx)
      if not items:
        logger.info(f"No {source_type.value} extractor matched, pooling all extractors")
        source_type = SourceType.SINGLE
        items = self._pooled(stripped, ctx)

    if not items:
      source_type = SourceType.UNKNOWN
    logger.info(f"Parsed {len(items)} transactions ({source_type.value})")
    return MultiParseResult(items, source_type, raw)

  def _pooled(self, text, ctx):
    return arbitrate(pool(self.registry, text, ctx), self.config.arbiter_threshold)

  def parse_quick_transaction(self, text: str) -> Optional[ParsedTransaction]:
    """Parse short input like "uber 50": one amount token, the rest is the description."""
    stripped = (text or '').strip()
    if not stripped:
      return None

    amount = None
    words = []
    for token in stripped.split():
      value = parse_amount(token)
      if value is not None:
        amount = value
      else:
        words.append(token)
    if amount is None:
      return None

    description = ' '.join(words)
    ctx = self.context()
    return ParsedTransaction(
      amount=amount,
      description=description or QUICK_DESCRIPTION,
      category=ctx.classifier.infer(description),
      date=ctx.today.isoformat(),
      confidence=QUICK_CONFIDENCE,
      type=EXPENSE,
      raw_text=text,
    )

  def parse_voice_input(self, text: str) -> Optional[ParsedTransaction]:
    """Parse a spoken sentence such as "spent 50 dollars at starbucks yesterday".

    Confidence is built up from what could be found: a base for voice
    input, then the amount, a merchant and a recognised category.
    """
    stripped = (text or '').strip()
    if not stripped:
      return None

    amount = None
    for pattern in VOICE_AMOUNT_PATTERNS:
      m = pattern.search(stripped)
      if m:
        amount = parse_amount(m.group(1))
        if amount:
          break
    if not amount:
      amount = extract_amount(stripped)
    if not amount:
      logger.debug(f"No amount in voice input: {stripped}")
      return None

    ctx = self.context()
    merchant = extract_merchant(stripped)
    match = ctx.classifier.classify(stripped, EXPENSE)

    confidence = VOICE_BASE_CONFIDENCE + VOICE_AMOUNT_BONUS
    if merchant:
      confidence += VOICE_MERCHANT_BONUS
    if match.matched:
      confidence += VOICE_CATEGORY_BONUS

    return ParsedTransaction(
      amount=amount,
      description=merchant or stripped,
      category=match.category,
      date=parse_date(stripped, ctx.today),
      confidence=confidence,
      type=EXPENSE,
      raw_text=text,
      merchant=merchant,
    )


def parse_transactions(text, config=DEFAULT_CONFIG, today=None):
  return TransactionParser(config, today).parse_transactions(text)


def parse_quick_transaction(text, config=DEFAULT_CONFIG, today=None):
  return TransactionParser(config, today).parse_quick_transaction(text)


def parse_voice_input(text, config=DEFAULT_CONFIG, today=None):
  return TransactionParser(config, today).parse_voice_input(text)
