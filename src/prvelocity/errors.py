"""Custom exception types for the ADO PR velocity pipeline."""


class VelocityError(Exception):
    """Base exception for all recoverable velocity pipeline errors."""


class ConfigurationError(VelocityError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(ConfigurationError):
    """Raised when the Azure DevOps Personal Access Token is unavailable."""


class ApiError(VelocityError):
    """Raised when an Azure DevOps API request fails or returns an unexpected response."""


class UpstreamError(ApiError):
    """Raised when the organization's repository listing cannot be retrieved."""


class PageFetchError(ApiError):
    """Raised when one page of a repository's pull request listing cannot be retrieved."""


class EstimationError(ApiError):
    """Raised when commit data needed for a change estimate cannot be retrieved."""


class DecodeError(VelocityError):
    """Raised when persisted records or progress payloads cannot be decoded."""
