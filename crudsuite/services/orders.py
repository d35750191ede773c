# crudsuite/services/orders.py
"""
Checkout and order status workflow.

Stock is reserved line by line with a conditional decrement. If any line, or
the order insert itself, fails, every reservation made so far is handed back
before the error propagates, so an order and its stock movement land together
or not at all.
"""
import logging
from typing import Any, Dict, List, Tuple

from crudsuite.core.errors import ConflictError, ValidationError
from crudsuite.models.order import OrderCreate, OrderItemIn
from crudsuite.models.workflow import InvalidTransition, OrderStatus, check_order_transition
from crudsuite.repositories import orders as orders_repo
from crudsuite.repositories import products as products_repo

logger = logging.getLogger(__name__)


async def _release(reserved: List[Tuple[OrderItemIn, Dict[str, Any]]]) -> None:
    for item, _product in reversed(reserved):
        await products_repo.release_stock(item.product_id, item.quantity)


async def _release_items(items: List[Dict[str, Any]]) -> None:
    for line in items:
        await products_repo.release_stock(line["product_id"], line["quantity"])


def order_total(items: List[Dict[str, Any]]) -> float:
    return round(sum(line["price"] * line["quantity"] for line in items), 2)


async def place_order(user: Dict[str, Any], payload: OrderCreate) -> Dict[str, Any]:
    reserved: List[Tuple[OrderItemIn, Dict[str, Any]]] = []
    try:
        for item in payload.items:
            product = await products_repo.reserve_stock(item.product_id, item.quantity)
            if product is None:
                existing = await products_repo.get_product(item.product_id)
                if existing is None:
                    raise ValidationError(f"Product {item.product_id} not found")
                raise ValidationError(f"Insufficient stock for {existing['name']}")
            reserved.append((item, product))

        items = [
            {
                "product_id": product["id"],
                "name": product["name"],
                "price": float(product["price"]),
                "quantity": item.quantity,
                "image": product.get("image"),
            }
            for item, product in reserved
        ]
        order = await orders_repo.insert_order({
            "user_id": user["id"],
            "user_name": user["name"],
            "user_email": user["email"],
            "items": items,
            "shipping_info": payload.shipping_info.model_dump(),
            "payment_info": {
                "card_last4": payload.payment_info.last4(),
                "card_name": payload.payment_info.card_name,
            },
            "total": order_total(items),
            "status": OrderStatus.PENDING.value,
        })
    except Exception:
        if reserved:
            logger.warning("Order for user %s failed, returning %d reservations", user["id"], len(reserved))
            await _release(reserved)
        raise

    logger.info("Order %s placed by %s (total=%.2f)", order["id"], user["id"], order["total"])
    return order


async def change_status(order: Dict[str, Any], target: OrderStatus) -> Dict[str, Any]:
    current = OrderStatus(order["status"])
    try:
        check_order_transition(current, target)
    except InvalidTransition as exc:
        raise ValidationError(str(exc)) from exc

    updated = await orders_repo.set_status_if(order["id"], current.value, target.value)
    if updated is None:
        raise ConflictError("Order status was changed by another request")
    if target is OrderStatus.CANCELLED:
        await _release_items(updated["items"])
    logger.info("Order %s moved %s -> %s", order["id"], current.value, target.value)
    return updated
