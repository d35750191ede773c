# crudsuite/api/v1/products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from crudsuite.api.v1.auth import require_roles
from crudsuite.core.errors import NotFoundError
from crudsuite.core.security import Role
from crudsuite.models.product import ProductCreate, ProductUpdate
from crudsuite.repositories import products as products_repo

router = APIRouter(prefix="/api/products", tags=["products"])

admin_only = require_roles(Role.ADMIN)


@router.get("")
async def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: Optional[str] = Query(None, pattern="^(price-low|price-high|newest|featured)$"),
):
    return await products_repo.list_products(category=category, search=search, sort=sort)


@router.get("/{product_id}")
async def get_product(product_id: str):
    product = await products_repo.get_product(product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.post("", status_code=201)
async def create_product(payload: ProductCreate, _admin: dict = Depends(admin_only)):
    product = await products_repo.create_product(payload.model_dump())
    return {"message": "Product created successfully", "product": product}


@router.put("/{product_id}")
async def update_product(product_id: str, payload: ProductUpdate, _admin: dict = Depends(admin_only)):
    product = await products_repo.update_product(product_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    if not product:
        raise NotFoundError("Product not found")
    return {"message": "Product updated successfully", "product": product}


@router.delete("/{product_id}")
async def delete_product(product_id: str, _admin: dict = Depends(admin_only)):
    if not await products_repo.delete_product(product_id):
        raise NotFoundError("Product not found")
    return {"message": "Product deleted successfully"}
