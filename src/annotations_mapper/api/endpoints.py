"""
Operational HTTP endpoints for the annotations mapper.

Public endpoints, no authentication: health, good-to-go and build info.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from .. import __version__
from ..config.settings import APP_NAME, APP_SYSTEM_CODE
from ..infrastructure.health_checker import MapperHealthCheck

HEALTH_PATH = "/__health"
GTG_PATH = "/__gtg"
BUILD_INFO_PATH = "/__build-info"

router = APIRouter()


def get_health_check(request: Request) -> MapperHealthCheck:
    """Provide the health checks wired up at startup."""
    return request.app.state.health_check


@router.get(HEALTH_PATH)
async def health(
    health_check: MapperHealthCheck = Depends(get_health_check),
) -> JSONResponse:
    """Report every dependency check. Failures are in the body, not the status code."""
    report = await health_check.monitor.check_health()
    return JSONResponse(
        content=report.model_dump(mode="json", by_alias=True),
        status_code=status.HTTP_200_OK,
    )


@router.get(GTG_PATH)
async def good_to_go(
    health_check: MapperHealthCheck = Depends(get_health_check),
) -> PlainTextResponse:
    """Readiness probe."""
    gtg = await health_check.good_to_go()
    if not gtg.good_to_go:
        return PlainTextResponse(
            gtg.message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )
    return PlainTextResponse("OK", status_code=status.HTTP_200_OK)


@router.get(BUILD_INFO_PATH)
async def build_info() -> JSONResponse:
    return JSONResponse(
        content={
            "systemCode": APP_SYSTEM_CODE,
            "name": APP_NAME,
            "version": __version__,
        }
    )
