"""Bank statement parsing from positioned PDF text.

Rows rebuilt by the glyph reconstructor are scanned one at a time: a row is a
transaction when one of its columns is a date and it carries at least one
amount.  Everything else (headers, footers, wrapped narration) is skipped.
"""

import re
import logging
import threading
from typing import Callable, List, Optional, Tuple

from .amounts import find_amounts, is_amount_token
from .categories import CategoryClassifier, is_income_text
from .config import DEFAULT_CONFIG, ExtractorConfig
from .dates import is_date_token, match_date
from .dedup import deduplicate
from .errors import DocumentReadError, ParseCancelled
from .glyphs import reconstruct_rows
from .models import EXPENSE, INCOME, BankStatementResult, ParsedTransaction
from .pdf_source import open_glyph_source

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

DR_CR_RE = re.compile(r'^(?:DR|CR)\.?$', re.IGNORECASE)
EMBEDDED_AMOUNT_RE = re.compile(r'(?:NGN|₦|\bN)?\s*[\d,]+\.\d{2}', re.IGNORECASE)
ACCOUNT_RE = re.compile(r'account\s*(?:no|number|#)?[.:\s]*(\d{10})(?!\d)', re.IGNORECASE)
PERIOD_RE = re.compile(r'(?:period|from)\b[^\d]*?(.+?)\s+(?:to|-|–)\s+(.+)', re.IGNORECASE)

DEFAULT_DESCRIPTION = 'Transaction'
RAW_TEXT_ROWS = 30


def _notify(callback: Optional[ProgressCallback], status: str, percent: float):
  """Report progress without letting a broken callback stop the parse."""
  if callback is None:
    return
  try:
    callback(status, percent)
  except Exception as e:
    logger.warning(f"Progress callback failed at '{status}': {e}")


class StatementTableParser:
  def __init__(self, config: ExtractorConfig = DEFAULT_CONFIG):
    self.config = config
    self.classifier = CategoryClassifier(config)
    self.bank_patterns = [(re.compile(p, re.IGNORECASE), name) for p, name in config.bank_patterns]

  def parse_document(self, glyph_source, progress_callback: Optional[ProgressCallback] = None,
                     cancel_event: Optional[threading.Event] = None) -> BankStatementResult:
    """Read every page from *glyph_source* and turn the rows into transactions."""
    try:
      _notify(progress_callback, 'Loading PDF...', 10)
      self._check_cancelled(cancel_event)

      glyphs = []
      for page in glyph_source.iter_pages():
        self._check_cancelled(cancel_event)
        glyphs.extend(page.glyphs)
        _notify(progress_callback, f'Reading page {page.number} of {page.total}...',
                10 + 30 * page.number / page.total)

      _notify(progress_callback, 'Parsing transactions...', 50)
      rows = reconstruct_rows(glyphs, self.config.row_tolerance, self.config.column_separator)
      for i, row in enumerate(rows[:10]):
        logger.debug(f"Row {i + 1}: {row}")

      _notify(progress_callback, 'Identifying transactions...', 70)
      transactions, skipped = self.parse_rows(rows)

      _notify(progress_callback, 'Finalizing...', 90)
      full_text = ' '.join(rows).lower()
      unique = deduplicate(transactions)
      unique.sort(key=lambda t: t.date, reverse=True)

      result = BankStatementResult(
        transactions=unique,
        bank_name=self.detect_bank(full_text),
        account_number=self.detect_account_number(full_text),
        period=self.detect_period(rows),
        success=True,
        rows_scanned=len(rows),
        rows_skipped=skipped,
        raw_text=self._debug_text(rows, unique),
      )
      _notify(progress_callback, 'Complete', 100)
      logger.info(f"Parser result: {len(unique)} transactions from {len(rows)} rows ({skipped} skipped)")
      return result

    except ParseCancelled as e:
      logger.info(str(e))
      return BankStatementResult.failure(str(e))
    except DocumentReadError as e:
      logger.error(f"Bank statement could not be read: {e}")
      return BankStatementResult.failure(str(e))
    except Exception as e:
      logger.exception("Bank statement parsing error")
      return BankStatementResult.failure(f'Failed to parse bank statement: {e}')

  def _check_cancelled(self, cancel_event: Optional[threading.Event]):
    if cancel_event is not None and cancel_event.is_set():
      raise ParseCancelled('Statement parsing was cancelled')

  def parse_rows(self, rows: List[str]) -> Tuple[List[ParsedTransaction], int]:
    """Parse reconstructed rows; returns the transactions and the skip count."""
    transactions = []
    skipped = 0
    for row in rows:
      txn = self.parse_row(row)
      if txn is None:
        skipped += 1
      else:
        transactions.append(txn)
    return transactions, skipped

  def parse_row(self, row: str) -> Optional[ParsedTransaction]:
    sep = self.config.column_separator
    columns = [c.strip() for c in row.split(sep) if c.strip()]
    if not columns:
      return None

    date = None
    date_index = -1
    for i, col in enumerate(columns):
      date = match_date(col)
      if date:
        date_index = i
        break
    if not date:
      return None

    row_text = sep.join(columns)
    amounts = find_amounts(' '.join(columns))
    if not amounts:
      logger.debug(f"No amount on dated row, skipping: {row_text}")
      return None

    description = self._pick_description(columns, date_index)
    low_desc = description.lower()
    if any(phrase in low_desc for phrase in self.config.statement_skip_phrases):
      logger.debug(f"Skipping header/footer row: {description}")
      return None

    txn_type = INCOME if self.is_income_transaction(row_text) else EXPENSE

    # With debit/credit/balance columns the running balance is usually the
    # largest figure on the row, so take the smallest meaningful one.
    amount = amounts[0]
    if len(amounts) >= 2:
      amount = next((a for a in sorted(amounts) if a > 1), amounts[0])

    match = self.classifier.classify(description, txn_type)
    logger.debug(f"Parsed transaction: {date} | {description} | {amount} | {txn_type} | {match.category}")

    return ParsedTransaction(
      amount=amount,
      description=description,
      category=match.category,
      date=date,
      confidence=match.confidence,
      type=txn_type,
      raw_text=row_text.replace(sep, ' | '),
    )

  def _is_filler(self, col: str) -> bool:
    return is_amount_token(col) or bool(DR_CR_RE.match(col)) or is_date_token(col)

  def _pick_description(self, columns: List[str], date_index: int) -> str:
    for i, col in enumerate(columns):
      if i == date_index or self._is_filler(col):
        continue
      if len(col) > 2:
        return col

    leftovers = [
      col for i, col in enumerate(columns)
      if i != date_index and not self._is_filler(col) and len(col) > 1
    ]
    description = EMBEDDED_AMOUNT_RE.sub('', ' '.join(leftovers))
    description = re.sub(r'\s+', ' ', description).strip()
    if len(description) < 3:
      return DEFAULT_DESCRIPTION
    return description

  def is_income_transaction(self, text: str) -> bool:
    return is_income_text(text, self.config)

  def detect_bank(self, text: str) -> Optional[str]:
    low = text.lower()
    for pattern, name in self.bank_patterns:
      if pattern.search(low):
        return name
    return None

  def detect_account_number(self, text: str) -> Optional[str]:
    m = ACCOUNT_RE.search(text)
    return m.group(1) if m else None

  def detect_period(self, rows: List[str]) -> Optional[str]:
    for row in rows:
      m = PERIOD_RE.search(row.replace(self.config.column_separator, ' '))
      if not m:
        continue
      start, end = match_date(m.group(1)), match_date(m.group(2))
      if start and end:
        return f'{start} to {end}'
    return None

  def _debug_text(self, rows: List[str], transactions: List[ParsedTransaction]) -> str:
    head = '\n'.join(rows[:RAW_TEXT_ROWS])
    return f'Found {len(transactions)} transactions from {len(rows)} rows\n\nFirst {RAW_TEXT_ROWS} rows:\n{head}'


def parse_bank_statement(source, progress_callback: Optional[ProgressCallback] = None,
                         cancel_event: Optional[threading.Event] = None, backend: str = 'pdfplumber',
                         config: ExtractorConfig = DEFAULT_CONFIG) -> BankStatementResult:
  """Parse a PDF statement (path, file object or bytes for PyMuPDF)."""
  glyph_source = open_glyph_source(source, backend)
  parser = StatementTableParser(config)
  return parser.parse_document(glyph_source, progress_callback, cancel_event)
