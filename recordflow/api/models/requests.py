"""Request and response models for API endpoints"""
from pydantic import BaseModel
from typing import Dict, Any, List


class ConvertRequest(BaseModel):
    """Request to convert a recorded script"""
    source: str
    includeActions: bool = False    # Also return raw actions and per-action contexts


class ConvertSummary(BaseModel):
    """Counts describing a conversion"""
    actions: int
    patterns: int
    pageGroupings: int
    navigationLinks: int
    omissions: int


class ConvertResponse(BaseModel):
    """Response from a conversion"""
    success: bool
    summary: ConvertSummary
    result: Dict[str, Any]


class ValidateResponse(BaseModel):
    """Response from recording validation"""
    valid: bool
    actionCount: int = 0
    errors: List[str] = []


class ParseErrorDetail(BaseModel):
    """Location of a syntax error in the recording"""
    message: str
    line: int = 0
    column: int = 0
