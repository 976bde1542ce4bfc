"""Result containers shared by the statement and text parsers."""
from __future__ import annotations

import re
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

EXPENSE = "expense"
INCOME = "income"
TRANSACTION_TYPES = (EXPENSE, INCOME)

DESCRIPTION_LIMIT = 100
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SourceType(Enum):
    LIST = "list"
    NAMED_RECEIPT = "named_receipt"
    BANK_SMS = "bank_sms"
    ITEMIZED_RECEIPT = "itemized_receipt"
    SINGLE = "single"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ParsedTransaction:
    """A single extracted transaction.

    Instances are immutable; the engine only ever filters them.  Construction
    enforces the amount, confidence, type and date invariants and truncates
    the description.
    """

    amount: float
    description: str
    category: str
    date: str
    confidence: int
    type: str = EXPENSE
    raw_text: str = ""
    merchant: Optional[str] = None
    payment_method: Optional[str] = None

    def __post_init__(self):
        if not self.amount or self.amount <= 0:
            raise ValueError(f"amount must be positive, got {self.amount!r}")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence out of range: {self.confidence!r}")
        if self.type not in TRANSACTION_TYPES:
            raise ValueError(f"unknown transaction type: {self.type!r}")
        if not _ISO_DATE_RE.match(self.date or ""):
            raise ValueError(f"date must be YYYY-MM-DD, got {self.date!r}")
        datetime.strptime(self.date, "%Y-%m-%d")
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "confidence", int(self.confidence))
        object.__setattr__(self, "description", (self.description or "").strip()[:DESCRIPTION_LIMIT])

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "date": self.date,
            "confidence": self.confidence,
            "type": self.type,
            "rawText": self.raw_text,
        }
        if self.merchant:
            data["merchant"] = self.merchant
        if self.payment_method:
            data["paymentMethod"] = self.payment_method
        return data


def _frame(transactions: List[ParsedTransaction]) -> pd.DataFrame:
    columns = ["date", "description", "amount", "type", "category", "merchant", "confidence"]
    rows = [
        {
            "date": t.date,
            "description": t.description,
            "amount": t.amount,
            "type": t.type,
            "category": t.category,
            "merchant": t.merchant or "",
            "confidence": t.confidence,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=columns)


@dataclass
class MultiParseResult:
    items: List[ParsedTransaction]
    source_type: SourceType
    raw_text: str

    @property
    def total_amount(self) -> float:
        """Sum of expense items only."""
        return round(sum(t.amount for t in self.items if t.type == EXPENSE), 2)

    @property
    def confidence(self) -> float:
        if not self.items:
            return 0
        return sum(t.confidence for t in self.items) / len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [t.to_dict() for t in self.items],
            "totalAmount": self.total_amount,
            "sourceType": self.source_type.value,
            "confidence": self.confidence,
            "rawText": self.raw_text,
        }

    def to_dataframe(self) -> pd.DataFrame:
        return _frame(self.items)


@dataclass
class BankStatementResult:
    transactions: List[ParsedTransaction] = field(default_factory=list)
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    period: Optional[str] = None
    success: bool = True
    error: Optional[str] = None
    rows_scanned: int = 0
    rows_skipped: int = 0
    raw_text: str = ""

    @classmethod
    def failure(cls, message: str) -> "BankStatementResult":
        return cls(success=False, error=message)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "transactions": [t.to_dict() for t in self.transactions],
            "bankName": self.bank_name,
            "accountNumber": self.account_number,
            "period": self.period,
            "success": self.success,
        }
        if self.error:
            data["error"] = self.error
        return data

    def to_dataframe(self) -> pd.DataFrame:
        return _frame(self.transactions)
