"""Domain exceptions for the ledger and taxonomy store."""


class LedgerError(Exception):
    """Base class for every error raised by the store."""


class ValidationError(LedgerError, ValueError):
    """Raised when a category or transaction does not meet input requirements."""


class DuplicateCategoryError(ValidationError):
    """Raised when a category with the same (kind, 관, 항, 목) already exists."""


class ImportFormatError(LedgerError, ValueError):
    """Raised when an import file cannot be used at all."""


class PersistenceError(LedgerError, IOError):
    """Raised when the snapshot storage cannot be read or written."""
