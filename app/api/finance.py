import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.errors import FinanceError
from app.dependencies import get_finance_service
from app.models.finance import ErrorResponse, FinanceResponse
from app.services.finance_service import FinanceChartService

logger = logging.getLogger(__name__)

router = APIRouter()

UNKNOWN_ERROR = "An unknown error occurred"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post(
    "/finance",
    response_model=FinanceResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def finance_endpoint(
    request: Request,
    finance_service: FinanceChartService = Depends(get_finance_service),
) -> JSONResponse:
    """
    Answer a finance question with an explanation and optional chart data.

    The body is read as raw JSON so that shape problems surface as the
    handler's own 400 messages instead of FastAPI's 422 validation report.
    """
    try:
        payload = await request.json()
        response = await finance_service.handle(payload)
        return JSONResponse(
            content=response.model_dump(by_alias=True),
            headers={"Cache-Control": "no-cache"},
        )
    except FinanceError as e:
        if e.code >= 500:
            logger.error("Finance request failed: %s", e.message)
        else:
            logger.warning("Finance request rejected: %s", e.message)
        return _error(e.code, e.message or UNKNOWN_ERROR)
    except Exception as e:
        logger.exception("Finance API error")
        return _error(500, str(e) or UNKNOWN_ERROR)
