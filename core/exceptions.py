"""
Custom exceptions for the import pipeline with structured error context.

This module provides the exception hierarchy used throughout the
collective-agreement import pipeline. Each exception carries context
information for debugging and for the import run's error details.

Exception Hierarchy:
    ImportPipelineError (base)
    ├── ConfigurationError
    ├── ImportRunError
    ├── EnrichmentError
    │   ├── EnrichmentAPIError
    │   ├── EnrichmentResponseError
    │   └── EnrichmentParseError
    ├── PersistenceError
    │   └── EntityWriteError
    └── SpreadsheetReadError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ImportPipelineError(Exception):
    """
    Base exception for all import-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (file, block, table, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Run-level Errors
# ============================================================================

class ConfigurationError(ImportPipelineError):
    """
    Raised when a run cannot start because configuration is missing,
    e.g. AI mode was requested but no Gemini API key is configured.
    """
    pass


class ImportRunError(ImportPipelineError):
    """
    Raised when the import run record cannot be found or updated.

    Context should include:
        - import_id: ID of the historico_importacao row
        - operation: Transition being attempted
    """
    pass


# ============================================================================
# Enrichment Errors
# ============================================================================

class EnrichmentError(ImportPipelineError):
    """Base exception for failures while enriching a block with Gemini."""
    pass


class EnrichmentAPIError(EnrichmentError):
    """
    Raised when the text-generation endpoint answers with a non-2xx status
    or cannot be reached.

    Context should include:
        - status_code: HTTP status code (if a response was received)
        - model: Model name used for the request
        - response_body: Response body (truncated)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        if status_code is not None:
            self.context["status_code"] = status_code


class EnrichmentResponseError(EnrichmentError):
    """Raised when the response body lacks the expected candidate text."""
    pass


class EnrichmentParseError(EnrichmentError):
    """
    Raised when no JSON array can be located in the generated text.

    Context should include:
        - response_excerpt: First characters of the generated text
    """
    pass


# ============================================================================
# Persistence Errors
# ============================================================================

class PersistenceError(ImportPipelineError):
    """Base exception for relational store failures."""
    pass


class EntityWriteError(PersistenceError):
    """
    Raised when persisting one record's entities fails. The unit of work
    for that record has been rolled back when this is raised.

    Context should include:
        - union_name: SINDICATO value of the record
        - stage: Entity being written when the failure happened
    """
    pass


# ============================================================================
# Input Errors
# ============================================================================

class SpreadsheetReadError(ImportPipelineError):
    """
    Raised when an uploaded spreadsheet cannot be read.

    Context should include:
        - file_name: Name of the file
    """
    pass
