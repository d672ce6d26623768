"""Custom exception classes."""


class RecipeImportException(Exception):
    """Base exception for the recipe import service."""

    pass


class ExtractionFailed(RecipeImportException):
    """Raised when no usable recipe content could be extracted from a source."""

    pass


class NoStructuredData(RecipeImportException):
    """Raised when a page carries no usable JSON-LD recipe markup."""

    pass


class NoScrapedContent(RecipeImportException):
    """Raised when HTML heuristics find neither ingredients nor instructions."""

    pass


class UnparsableNumeric(RecipeImportException):
    """Raised when a servings or time value has no readable number."""

    pass


class ValidationError(RecipeImportException):
    """Raised when input validation fails."""

    pass


class FetchError(RecipeImportException):
    """Raised when a source document cannot be fetched."""

    pass
