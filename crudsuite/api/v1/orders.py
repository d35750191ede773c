# crudsuite/api/v1/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from crudsuite.api.v1.auth import get_current_user, require_roles
from crudsuite.core.errors import ForbiddenError, NotFoundError, ValidationError
from crudsuite.core.security import Role, is_admin
from crudsuite.models.order import OrderCreate, OrderStatusUpdate
from crudsuite.models.workflow import OrderStatus
from crudsuite.repositories import orders as orders_repo
from crudsuite.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["orders"])

admin_only = require_roles(Role.ADMIN)


async def _load_order(order_id: str) -> dict:
    order = await orders_repo.get_order(order_id)
    if not order:
        raise NotFoundError("Order not found")
    return order


@router.post("", status_code=201)
async def create_order(payload: OrderCreate, current_user: dict = Depends(get_current_user)):
    order = await order_service.place_order(current_user, payload)
    return {"message": "Order placed successfully", "order": order}


@router.get("/my-orders")
async def my_orders(current_user: dict = Depends(get_current_user)):
    return await orders_repo.list_orders(user_id=current_user["id"])


@router.get("")
async def list_orders(status: Optional[OrderStatus] = Query(None), _admin: dict = Depends(admin_only)):
    return await orders_repo.list_orders(status=status.value if status else None)


@router.get("/{order_id}")
async def get_order(order_id: str, current_user: dict = Depends(get_current_user)):
    order = await _load_order(order_id)
    if order["user_id"] != current_user["id"] and not is_admin(current_user["role"]):
        raise ForbiddenError("You can only view your own orders")
    return order


@router.put("/{order_id}/status")
async def update_order_status(order_id: str, payload: OrderStatusUpdate, _admin: dict = Depends(admin_only)):
    order = await _load_order(order_id)
    updated = await order_service.change_status(order, payload.status)
    return {"message": "Order status updated", "order": updated}


@router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, current_user: dict = Depends(get_current_user)):
    order = await _load_order(order_id)
    if order["user_id"] != current_user["id"]:
        raise ForbiddenError("You can only cancel your own orders")
    if order["status"] != OrderStatus.PENDING.value:
        raise ValidationError("Only pending orders can be cancelled")
    updated = await order_service.change_status(order, OrderStatus.CANCELLED)
    return {"message": "Order cancelled", "order": updated}
