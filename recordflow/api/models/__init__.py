"""API models package"""
from recordflow.api.models.requests import (
    ConvertRequest,
    ConvertResponse,
    ConvertSummary,
    ParseErrorDetail,
    ValidateResponse,
)

__all__ = [
    "ConvertRequest",
    "ConvertResponse",
    "ConvertSummary",
    "ParseErrorDetail",
    "ValidateResponse",
]
