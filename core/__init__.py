"""
Core utilities and configuration for the agreement import system.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application settings and the per-run ImportConfig value object
    database: Database connection and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and the system_logs sink

Usage:
    from core.config import settings, ImportConfig
    from core.database import get_session
    from core.exceptions import EnrichmentParseError, EntityWriteError
    from core.logging import setup_logging, SystemLogger

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with async_session_maker() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "ImportConfig",
    "get_session",
    "setup_logging",
    "SystemLogger",
    # Exceptions
    "ImportPipelineError",
    "ConfigurationError",
    "ImportRunError",
    "EnrichmentError",
    "EnrichmentAPIError",
    "EnrichmentResponseError",
    "EnrichmentParseError",
    "PersistenceError",
    "EntityWriteError",
    "SpreadsheetReadError",
]
