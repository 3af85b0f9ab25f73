"""Services package"""
from recordflow.services.recording import RecordingConverter, ParseError

__all__ = [
    "RecordingConverter",
    "ParseError",
]
