"""
Generation-service exceptions.
"""


class GenerationError(Exception):
    """Base exception for AI generation failures."""
    pass


class GenerationCredentialsError(GenerationError):
    """Raised when no API key is configured for the generation backend."""
    pass


class GenerationQuotaError(GenerationError):
    """Raised when the backend reports rate limiting or exhausted quota."""
    pass


class GenerationTimeoutError(GenerationError):
    """Raised when the backend does not answer in time."""
    pass
