"""API route definitions for the QR code URL generator.

Endpoints:
    /health:  Health check for monitoring.
    /api/preview:  Generate URLs without persisting them.
    /api/urls:  Generate and persist a batch of URL records.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from qrcode_urls.codes import CodeSpaceExhaustedError
from qrcode_urls.dependencies import RequestContext, get_qrcode_service, get_request_context
from qrcode_urls.enums import HealthStatus
from qrcode_urls.schemas import MAX_COUNT, GenerateRequest, HealthResponse, InsertResponse, PreviewResponse
from qrcode_urls.service import QRCodeUrlService

__all__ = ["router"]

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    try:
        await ctx.database.execute(text("SELECT 1"))
    except Exception as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY

    return HealthResponse(status=db_status, database=db_status)


@router.get("/api/preview", response_model=PreviewResponse, tags=["urls"])
async def preview_urls(
    count: int = Query(..., ge=0, le=MAX_COUNT),
    service: QRCodeUrlService = Depends(get_qrcode_service),
) -> PreviewResponse:
    try:
        urls = await service.preview_urls(count)
    except CodeSpaceExhaustedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return PreviewResponse(count=len(urls), urls=urls)


@router.post("/api/urls", response_model=InsertResponse, status_code=201, tags=["urls"])
async def insert_urls(
    payload: GenerateRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: QRCodeUrlService = Depends(get_qrcode_service),
) -> InsertResponse:
    try:
        records = await service.insert_urls(payload.count)
    except CodeSpaceExhaustedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    ctx.logger.info(f"Insert request completed: {len(records)} records in {ctx.get_duration():.1f}ms")
    return InsertResponse.from_records(records)
