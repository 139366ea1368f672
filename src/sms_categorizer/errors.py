class SmsCategorizerError(Exception):
    """Base class for all errors raised by the categorizer core."""


class InvalidTemplateError(SmsCategorizerError):
    """A template definition or one of its regexes could not be loaded."""


class NoTemplateMatchError(SmsCategorizerError):
    """No active template extracted both an amount and a direction."""


class AmbiguousDirectionError(SmsCategorizerError):
    """Direction text fell outside the debit/credit vocabulary."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Unrecognized direction text: {text!r}")
        self.text = text


class StoreUnavailableError(SmsCategorizerError):
    """A merchant, keyword or category store could not be read or written."""


class LearningPersistenceError(StoreUnavailableError):
    """
    A learning event could not be persisted.

    Callers should retry: a dropped correction silently degrades
    future categorization.
    """

    def __init__(self, merchant: str, cause: Exception | None = None) -> None:
        super().__init__(f"Failed to persist learning for merchant {merchant!r}")
        self.merchant = merchant
        self.cause = cause
