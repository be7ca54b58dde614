"""Exception types raised by the taxcredit package.

Recognition misses never raise: extractors return ``None`` or ``0`` for a
field they cannot find. Only conditions that make a whole file unusable are
surfaced as exceptions, and the batch driver records them per file.
"""


class TaxCreditError(Exception):
    """Base class for taxcredit errors."""


class DocumentReadError(TaxCreditError):
    """A source document could not be opened or parsed at all."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")
