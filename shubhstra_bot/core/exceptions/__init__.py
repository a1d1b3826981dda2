"""
Custom exceptions for the Shubhstra clinic bot.
"""

from .booking import BookingFlowError, BookingValidationError
from .external import ExternalAPIError, MessagingGatewayError
from .generation import (
    GenerationCredentialsError,
    GenerationError,
    GenerationQuotaError,
    GenerationTimeoutError,
)
from .store import DataStoreError, NotFoundError

__all__ = [
    "BookingFlowError",
    "BookingValidationError",
    "ExternalAPIError",
    "MessagingGatewayError",
    "GenerationError",
    "GenerationCredentialsError",
    "GenerationQuotaError",
    "GenerationTimeoutError",
    "DataStoreError",
    "NotFoundError",
]
