"""
Domain errors.
None of them is fatal: callers keep the last good state and carry on.
"""


class ConverterError(Exception):
    """Base class for converter domain errors."""


class ParseError(ConverterError, ValueError):
    """Calculator buffer does not hold a number. Absorbed by the calculator."""


class FetchError(ConverterError):
    """A rate provider could not deliver rates."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class RateStoreError(ConverterError):
    """The rate store failed to save or load a snapshot."""


class CannotRemoveLastCurrency(ConverterError):
    """A session must always track at least one currency."""

    def __init__(self, code: str):
        super().__init__(f"Cannot remove {code}: it is the last tracked currency")
        self.code = code
