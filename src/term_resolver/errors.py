"""Error types for term-resolver.

Matching itself never raises on odd input: empty or malformed strings
produce empty results. Errors come from the edges of the library:
- reading catalog and configuration files
- parsing category names and catalog rows
- calling the injected candidate source
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # Bad input - caller must fix
    CONFIGURATION = "configuration"  # Bad config - caller must fix
    RESOURCE = "resource"  # Missing file/resource
    EXTERNAL = "external"  # Candidate source failed - may retry
    INTERNAL = "internal"  # Bug in code


class TermResolverError(Exception):
    """Base exception for term-resolver errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        recoverable: Whether retrying the operation may succeed
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ValidationError(TermResolverError):
    """Input validation error.

    Examples: unknown category name, catalog row without a name.
    """

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, context, recoverable=False)


class ConfigurationError(TermResolverError):
    """Configuration error.

    Examples: unreadable config file, threshold outside [0, 1].
    """

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, context, recoverable=False)


class ResourceError(TermResolverError):
    """Resource not found or unreadable.

    Examples: missing catalog file, missing override table.
    """

    category = ErrorCategory.RESOURCE

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, context, recoverable=False)


class CatalogSourceError(TermResolverError):
    """The injected candidate source failed while loading a category."""

    category = ErrorCategory.EXTERNAL

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message, context, recoverable=recoverable)


def wrap_source_error(error: Exception, category: str, scope: str) -> TermResolverError:
    """Wrap an exception raised by a candidate source.

    Errors that are already ours pass through untouched so their category
    survives.

    Args:
        error: Original error
        category: Category being loaded
        scope: Faction scope key being loaded

    Returns:
        A TermResolverError describing the failure
    """
    if isinstance(error, TermResolverError):
        return error

    return CatalogSourceError(
        f"Candidate source failed loading {category}: {error}",
        context={"category": category, "scope": scope, "error_type": type(error).__name__},
    )


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, TermResolverError):
        category = error.category.value
        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {error.message} ({context_str})"
        return f"[{category}] {error.message}"

    return f"[error] {type(error).__name__}: {error}"
