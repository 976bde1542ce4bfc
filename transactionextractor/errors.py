"""Exceptions raised inside the engine.

Document-level failures are raised by the glyph sources and turned into a
``BankStatementResult(success=False)`` by :func:`parse_bank_statement`; they
never escape to the caller of the public parse functions.
"""


class ExtractionError(Exception):
  """Base class for every engine error."""


class DocumentReadError(ExtractionError):
  """The document could not be opened or rendered."""


class ProtectedDocumentError(DocumentReadError):
  """The document is password protected."""


class ParseCancelled(ExtractionError):
  """The caller cancelled a statement parse between pages."""


class EnhancementError(ExtractionError):
  """An external enhancement collaborator failed or timed out."""
