# crudsuite/api/v1/admin.py
from fastapi import APIRouter, Depends

from crudsuite.api.v1.auth import require_roles
from crudsuite.core.security import Role
from crudsuite.models.workflow import OrderStatus
from crudsuite.repositories import orders as orders_repo
from crudsuite.repositories import products as products_repo
from crudsuite.repositories import users as users_repo

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_roles(Role.ADMIN))])


@router.get("/stats")
async def stats():
    # cancelled orders returned their stock and earn nothing
    return {
        "total_users": await users_repo.count_users(),
        "total_products": await products_repo.count_products(),
        "total_orders": await orders_repo.count_orders(),
        "pending_orders": await orders_repo.count_orders(OrderStatus.PENDING.value),
        "total_revenue": await orders_repo.total_revenue(exclude_status=OrderStatus.CANCELLED.value),
        "orders_by_status": {s.value: await orders_repo.count_orders(s.value) for s in OrderStatus},
    }


@router.get("/users")
async def users():
    return await users_repo.list_users()
