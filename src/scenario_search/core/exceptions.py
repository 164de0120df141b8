"""Custom exceptions for scenario search."""


class ScenarioSearchError(Exception):
    """Base exception for scenario search operations."""
    pass


class ValidationError(ScenarioSearchError):
    """Exception raised when a query or record fails validation."""
    pass


class EmptyInputError(ScenarioSearchError):
    """Exception raised when blank text is handed to a vectorizer."""
    pass


class DimensionMismatchError(ScenarioSearchError):
    """Exception raised when two vectors do not share a dimension."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Vector dimension mismatch: expected {expected}, got {actual}")


class VectorizerUnavailableError(ScenarioSearchError):
    """Exception raised when the embedding collaborator cannot produce vectors."""
    pass


class ContentUnavailableError(ScenarioSearchError):
    """Exception raised when the content provider fails or times out."""
    pass


class ConfigurationError(ScenarioSearchError):
    """Exception raised for configuration issues."""
    pass
