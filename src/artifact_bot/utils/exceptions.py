"""Exceptions for file store operations."""


class FileStoreError(Exception):
    """Raised when a project file cannot be read or written."""


class PathTraversalError(FileStoreError):
    """Raised when a path resolves outside the configured project root."""
