"""
FastAPI HTTP Handlers for click and conversion tracking.
"""

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import RedirectResponse

from internal.domain.errors import ProductNotFoundError
from internal.infrastructure.metrics import tracking_failures_total
from internal.transport.http.dependencies import (
    get_catalog_service,
    get_track_click_use_case,
    get_track_conversion_use_case,
)
from internal.transport.http.dto import (
    TrackClickRequest,
    TrackConversionRequest,
    success_response,
)
from internal.usecase.catalog_service import CatalogService
from internal.usecase.track_engagement import TrackClickUseCase, TrackConversionUseCase
from pkg.logger.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(prefix="/api/track", tags=["tracking"])


@router.post("/click")
async def track_click(
    body: TrackClickRequest,
    request: Request,
    use_case: TrackClickUseCase = Depends(get_track_click_use_case),
) -> dict:
    """
    Record an outbound click.

    Returns the click count and the primary affiliate URL to open.
    """
    result = await use_case.execute(
        body.product_id,
        referrer=body.referrer or request.headers.get("Referer"),
        user_agent=body.user_agent or request.headers.get("User-Agent"),
    )
    return success_response(result.to_dict(), message="Click tracked successfully")


@router.post("/conversion")
async def track_conversion(
    body: TrackConversionRequest,
    use_case: TrackConversionUseCase = Depends(get_track_conversion_use_case),
) -> dict:
    """Record a conversion."""
    result = await use_case.execute(body.product_id, conversion_value=body.conversion_value)
    return success_response(result.to_dict(), message="Conversion tracked successfully")


@router.get("/redirect/{product_id}")
async def redirect_to_affiliate(
    request: Request,
    product_id: str = Path(..., description="Product ID or slug"),
    catalog: CatalogService = Depends(get_catalog_service),
    use_case: TrackClickUseCase = Depends(get_track_click_use_case),
) -> RedirectResponse:
    """
    Send the shopper to the product's primary affiliate link.

    The click is recorded on the way; a tracking failure is logged and
    counted but the redirect still happens.
    """
    product = await catalog.get_product(product_id)
    target = product.redirect_url
    if not target:
        raise ProductNotFoundError(product_id)

    try:
        await use_case.execute(
            str(product.id),
            referrer=request.headers.get("Referer"),
            user_agent=request.headers.get("User-Agent"),
        )
    except Exception as e:
        tracking_failures_total.labels(operation="click").inc()
        logger.error(
            "Click tracking failed, redirecting anyway",
            product_id=str(product.id),
            error=str(e),
            exc_info=True,
        )

    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)
