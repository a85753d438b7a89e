"""
Search Hub Exceptions

This module defines the root exceptions for the Search Hub package
to provide clear error handling and reporting.
"""

class SearchHubError(Exception):
    """Base exception for all Search Hub errors"""
    pass


class ConfigurationError(SearchHubError):
    """Raised when configuration is invalid or missing"""
    pass


class QueryError(SearchHubError):
    """Raised when a query operation fails"""
    pass


class OperationTimeoutError(SearchHubError):
    """Raised when an operation times out"""
    pass
