"""
Transaction Extractor Package

Pulls structured transactions out of PDF bank statements, bank SMS alerts,
receipts, expense lists and voice transcripts.
"""

from .config import DEFAULT_CONFIG, ExtractorConfig, load_config
from .models import BankStatementResult, MultiParseResult, ParsedTransaction, SourceType
from .errors import (
    DocumentReadError,
    EnhancementError,
    ExtractionError,
    ParseCancelled,
    ProtectedDocumentError,
)
from .amounts import best_receipt_amount, extract_amount, parse_amount, score_amounts
from .dates import parse_date
from .categories import CategoryClassifier, validate_category
from .statement import StatementTableParser, parse_bank_statement
from .parser import (
    TransactionParser,
    parse_quick_transaction,
    parse_transactions,
    parse_voice_input,
)
from .extractors import detect_transaction_type, extract_merchant
from .enhancement import EnhancementResult, ParseOptions, call_enhancer, parse_with_enhancement

__version__ = "1.0.0"
__author__ = "Transaction Extractor Team"

__all__ = [
    "DEFAULT_CONFIG",
    "ExtractorConfig",
    "load_config",
    "BankStatementResult",
    "MultiParseResult",
    "ParsedTransaction",
    "SourceType",
    "ExtractionError",
    "DocumentReadError",
    "ProtectedDocumentError",
    "ParseCancelled",
    "EnhancementError",
    "parse_amount",
    "extract_amount",
    "score_amounts",
    "best_receipt_amount",
    "parse_date",
    "CategoryClassifier",
    "validate_category",
    "StatementTableParser",
    "parse_bank_statement",
    "TransactionParser",
    "parse_transactions",
    "parse_quick_transaction",
    "parse_voice_input",
    "extract_merchant",
    "detect_transaction_type",
    "EnhancementResult",
    "ParseOptions",
    "call_enhancer",
    "parse_with_enhancement",
]
