"""
HTTP routes for the day tracker API.

Read endpoints degrade to defaults with a 200; write endpoints report a
generic 500 and keep the details in the server log.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from daytracker.dependencies import get_day_service
from daytracker.schemas import DaySummary, ErrorResponse, SuccessResponse
from daytracker.service import DayRecordService, default_record

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500, content=ErrorResponse(error=message).model_dump()
    )


@router.get("/day/{date}")
def get_day(date: str, service: DayRecordService = Depends(get_day_service)):
    try:
        return service.get(date)
    except Exception:
        logger.exception("Error getting day data")
        return default_record()


@router.post(
    "/day/{date}",
    response_model=SuccessResponse,
    responses={500: {"model": ErrorResponse}},
)
def save_day(
    date: str,
    payload: dict = Body(default={}),
    service: DayRecordService = Depends(get_day_service),
):
    try:
        service.save(date, payload)
    except Exception:
        logger.exception("Error saving day data for %s", date)
        return _error("Failed to save data")
    return SuccessResponse()


@router.get("/days", response_model=list[DaySummary])
def list_days(service: DayRecordService = Depends(get_day_service)):
    try:
        return service.list_summaries()
    except Exception:
        logger.exception("Error listing days")
        return []


@router.delete(
    "/day/{date}",
    response_model=SuccessResponse,
    responses={500: {"model": ErrorResponse}},
)
def delete_day(date: str, service: DayRecordService = Depends(get_day_service)):
    try:
        service.delete(date)
    except Exception:
        logger.exception("Error deleting day %s", date)
        return _error("Failed to delete data")
    return SuccessResponse()
