"""
FastAPI HTTP Handlers for the product catalog.

Implements public catalog reads and the admin-gated product write path.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import JSONResponse

from internal.domain.admin import Admin
from internal.transport.http.auth import require_admin
from internal.transport.http.dependencies import (
    get_catalog_service,
    get_create_use_case,
    get_delete_use_case,
    get_search_use_case,
    get_update_use_case,
)
from internal.transport.http.dto import (
    SORT_FIELD_PATTERN,
    SORT_ORDER_PATTERN,
    AdvancedSearchRequest,
    CreateProductRequest,
    UpdateProductRequest,
    success_response,
)
from internal.usecase.catalog_service import (
    LATEST_LIMIT,
    TOP_SELLING_LIMIT,
    CatalogService,
)
from internal.usecase.create_product import CreateProductInput, CreateProductUseCase
from internal.usecase.search_products import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    SearchProductsInput,
    SearchProductsUseCase,
)
from internal.usecase.update_product import (
    DeleteProductUseCase,
    UpdateProductInput,
    UpdateProductUseCase,
)
from pkg.logger.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(prefix="/api/products", tags=["products"])


def _split_csv(value: Optional[str]) -> list[str]:
    """Split a comma-separated query value into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _listing_response(result) -> dict:
    return success_response({
        "products": [product.to_dict() for product in result.products],
        "pagination": result.pagination(),
    })


@router.get("")
async def list_products(
    search: Optional[str] = Query(None, max_length=200, description="Full-text query"),
    categories: Optional[str] = Query(None, description="Comma-separated category names"),
    tags: Optional[str] = Query(None, description="Comma-separated tags"),
    top_selling: Optional[bool] = Query(None, description="Only top selling products"),
    sort_by: str = Query("createdAt", pattern=SORT_FIELD_PATTERN, description="Sort field"),
    sort_order: str = Query("desc", pattern=SORT_ORDER_PATTERN, description="Sort order"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
    use_case: SearchProductsUseCase = Depends(get_search_use_case),
) -> dict:
    """
    List active products with filters and pagination.

    An empty result is a normal response with ``total_pages`` of 0.
    """
    result = await use_case.execute(
        SearchProductsInput(
            search=search,
            categories=_split_csv(categories),
            tags=_split_csv(tags),
            top_selling=top_selling,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    )
    return _listing_response(result)


@router.get("/latest")
async def latest_products(
    limit: int = Query(LATEST_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Most recently added active products."""
    products = await catalog.latest(limit=limit)
    return success_response([product.to_dict() for product in products])


@router.get("/top-selling")
async def top_selling_products(
    limit: int = Query(TOP_SELLING_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Active products flagged as top selling."""
    products = await catalog.top_selling(limit=limit)
    return success_response([product.to_dict() for product in products])


@router.get("/meta/categories")
async def product_categories(catalog: CatalogService = Depends(get_catalog_service)) -> dict:
    return success_response(await catalog.distinct_categories())


@router.get("/meta/tags")
async def product_tags(catalog: CatalogService = Depends(get_catalog_service)) -> dict:
    return success_response(await catalog.distinct_tags())


@router.get("/meta/networks")
async def product_networks(catalog: CatalogService = Depends(get_catalog_service)) -> dict:
    return success_response(await catalog.distinct_networks())


@router.get("/admin/all")
async def list_all_products(
    search: Optional[str] = Query(None, max_length=200),
    categories: Optional[str] = Query(None),
    tags: Optional[str] = Query(None),
    top_selling: Optional[bool] = Query(None),
    product_status: str = Query(
        "all",
        alias="status",
        pattern=r"^(all|active|inactive|draft)$",
        description="Status filter, 'all' for any status",
    ),
    sort_by: str = Query("createdAt", pattern=SORT_FIELD_PATTERN),
    sort_order: str = Query("desc", pattern=SORT_ORDER_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    admin: Admin = Depends(require_admin),
    use_case: SearchProductsUseCase = Depends(get_search_use_case),
) -> dict:
    """List products of any status for the back office."""
    result = await use_case.execute(
        SearchProductsInput(
            search=search,
            categories=_split_csv(categories),
            tags=_split_csv(tags),
            top_selling=top_selling,
            status=None if product_status == "all" else product_status,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    )
    return _listing_response(result)


@router.post("/search")
async def advanced_search(
    request: AdvancedSearchRequest,
    use_case: SearchProductsUseCase = Depends(get_search_use_case),
) -> dict:
    """
    Search active products by text, categories, networks and price range.

    ``sort`` is one of relevance (top selling first, then newest),
    price_low, price_high, name or latest.
    """
    result = await use_case.execute(
        SearchProductsInput(
            search=request.search,
            categories=[name.strip() for name in request.categories if name.strip()],
            networks=[name.strip() for name in request.networks if name.strip()],
            min_price=request.min_price,
            max_price=request.max_price,
            sort_preset=request.sort,
            limit=request.limit,
        )
    )
    return success_response({
        "products": [product.to_dict() for product in result.products],
        "count": len(result.products),
        "total": result.total,
    })


@router.get("/{identifier}")
async def get_product(
    identifier: str = Path(..., min_length=1, description="Product ID or slug"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Get an active product by ID or slug."""
    product = await catalog.get_product(identifier)
    return success_response(product.to_dict())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: CreateProductRequest,
    admin: Admin = Depends(require_admin),
    use_case: CreateProductUseCase = Depends(get_create_use_case),
) -> JSONResponse:
    """
    Create a product.

    Price, primary link, slug and ctr are derived; clients never send them.
    """
    logger.info("Creating product", title=request.title, admin_id=str(admin.id))

    result = await use_case.execute(
        CreateProductInput(
            title=request.title.strip(),
            short_description=request.short_description.strip(),
            description=request.description.strip(),
            images=request.images,
            affiliate_links=[link.to_entity() for link in request.affiliate_links],
            affiliate_url=request.affiliate_url,
            price=request.price,
            categories=[name.strip() for name in request.categories],
            tags=[tag.strip() for tag in request.tags],
            top_selling=request.top_selling,
            status=request.status,
            meta_title=request.meta_title,
            meta_description=request.meta_description,
            created_by=admin.id,
        )
    )

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_response(result.to_dict(), message="Product created successfully"),
    )


@router.put("/{product_id}")
async def update_product(
    request: UpdateProductRequest,
    product_id: str = Path(..., description="Product ID"),
    admin: Admin = Depends(require_admin),
    use_case: UpdateProductUseCase = Depends(get_update_use_case),
) -> dict:
    """Apply a partial update to a product."""
    result = await use_case.execute(
        UpdateProductInput(
            product_id=product_id,
            changes=request.to_changes(),
            updated_by=admin.id,
        )
    )
    return success_response(result.to_dict(), message="Product updated successfully")


@router.delete("/{product_id}")
async def delete_product(
    product_id: str = Path(..., description="Product ID"),
    admin: Admin = Depends(require_admin),
    use_case: DeleteProductUseCase = Depends(get_delete_use_case),
) -> dict:
    """Hard-delete a product."""
    await use_case.execute(product_id)
    logger.info("Product deleted by admin", product_id=product_id, admin_id=str(admin.id))
    return success_response(None, message="Product deleted successfully")
