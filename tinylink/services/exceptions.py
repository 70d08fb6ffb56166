"""Exceptions for the TinyLink service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
"""


class ServiceError(Exception):
    """Base exception for all service-level errors."""
    pass


class LinkError(ServiceError):
    """Base exception for link-related errors."""
    pass


class LinkValidationError(LinkError):
    """Link input failed validation checks."""
    pass


class InvalidCodeError(LinkValidationError):
    """The code is empty or does not have the required shape."""
    pass


class InvalidURLError(LinkValidationError):
    """The URL is missing or not an absolute http(s) URL."""
    pass


class CodeAlreadyExistsError(LinkError):
    """The requested code is already in use."""
    pass


class LinkNotFoundError(LinkError):
    """No link with the specified code exists."""
    pass


class StorageError(ServiceError):
    """The backing store is unavailable or a query failed."""
    pass


class CodeGenerationError(StorageError):
    """Failed to generate an unused code."""
    pass
