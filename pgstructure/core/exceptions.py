"""Exceptions raised by pgstructure."""


class StructureExportError(Exception):
    """Base class for application-specific errors."""


class InvalidConnectionStringError(StructureExportError, ValueError):
    """The connection string is not a usable PostgreSQL URL."""


class ExtractionError(StructureExportError):
    """The current database could not be determined."""
