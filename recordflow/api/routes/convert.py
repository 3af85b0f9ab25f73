"""Recording conversion endpoints"""
import logging
from fastapi import APIRouter, HTTPException

from recordflow.api.models.requests import (
    ConvertRequest,
    ConvertResponse,
    ConvertSummary,
    ParseErrorDetail,
    ValidateResponse,
)
from recordflow.config import settings
from recordflow.services.recording import ParseError, RecordingConverter

logger = logging.getLogger(__name__)

router = APIRouter()


def get_converter() -> RecordingConverter:
    """New converter per request; converters are not re-entrant."""
    return RecordingConverter(settings.VOCABULARY, settings.TUNING)


def _check_size(source: str):
    if len(source) > settings.MAX_SOURCE_LENGTH:
        raise HTTPException(
            status_code=413,
            detail=f"Recording exceeds {settings.MAX_SOURCE_LENGTH} characters"
        )


@router.post("/convert", response_model=ConvertResponse)
async def convert_recording(request: ConvertRequest) -> ConvertResponse:
    """
    Convert a recorded browser script into an artifact graph.

    **Example:**
    ```
    POST /api/recordflow/convert
    {
      "source": "await page.getByRole('link', { name: 'Admin' }).click();",
      "includeActions": false
    }
    ```
    """
    _check_size(request.source)

    try:
        result = get_converter().convert(request.source)
    except ParseError as e:
        logger.warning(f"Rejected recording: {e}")
        raise HTTPException(
            status_code=422,
            detail=ParseErrorDetail(message=e.message, line=e.line, column=e.column).model_dump()
        )
    except Exception as e:
        logger.error(f"Conversion failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    architecture = result.architecture
    navigation = architecture.shared_navigation
    summary = ConvertSummary(
        actions=len(result.actions),
        patterns=len(result.patterns),
        pageGroupings=len(architecture.page_groupings),
        navigationLinks=len(navigation.elements) if navigation else 0,
        omissions=len(architecture.omissions),
    )
    logger.info(f"Converted recording: {summary.actions} actions, {summary.pageGroupings} page groupings")

    return ConvertResponse(
        success=True,
        summary=summary,
        result=result.to_dict(include_actions=request.includeActions)
    )


@router.post("/validate", response_model=ValidateResponse)
async def validate_recording(request: ConvertRequest) -> ValidateResponse:
    """Check that a recording parses, without building artifacts."""
    _check_size(request.source)
    return ValidateResponse(**get_converter().validate_recording(request.source))
