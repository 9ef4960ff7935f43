from fastapi import APIRouter, Depends

from ..deps import get_backend, get_token
from ..models import Product, ProductPage
from ..services.backend import BackendClient

router = APIRouter()


def _catalog_backend(token: str | None = Depends(get_token), backend: BackendClient = Depends(get_backend)):
    # the catalog is readable without signing in
    return backend.with_token(token)


@router.get("", response_model=ProductPage)
def browse_products(
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    category: str | None = None,
    manufacturer: str | None = None,
    sort: str = "nameAsc",
    backend: BackendClient = Depends(_catalog_backend),
):
    return backend.list_products(
        page=page,
        limit=limit,
        search=search,
        category=category,
        manufacturer=manufacturer,
        sort=sort,
    )


@router.get("/categories")
def product_categories(backend: BackendClient = Depends(_catalog_backend)):
    return {"categories": backend.product_categories()}


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: str, backend: BackendClient = Depends(_catalog_backend)):
    return backend.get_product(product_id)
