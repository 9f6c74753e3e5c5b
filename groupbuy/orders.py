# -*- coding: utf-8 -*-
# Orders
# Copyright (c) 2025 Jan Sarivuo

"""
Tilausten luonti ja tilanhallinta.

Tilausta luotaessa jokaiselle riville tallennetaan sen hetkinen
varausmaksu (booking_price) ja porrashinta (unit_price). Näitä ei
lasketa myöhemmin uudelleen, vaikka kysyntä ja hinnat muuttuisivat.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from groupbuy import config
from groupbuy.auth import Actor, ensure_user
from groupbuy.cart import cart_items_for, clear_cart, item_product, priceables_for_items
from groupbuy.catalog import can_add_to_cart, find_variant, resolve_active_price_context
from groupbuy.errors import NotFoundError, ValidationFailed
from groupbuy.models import Order, OrderItem, OrderStatus, User
from groupbuy.pricing import ZERO, PricingEngine, safe_to_fixed
from groupbuy.products import invalidate_catalog_cache, make_pagination
from groupbuy.schemas import CustomerOut, OrderItemOut, OrderListResponse, OrderOut

log = logging.getLogger("groupbuy.orders")

VALID_STATUSES = [s.value for s in OrderStatus]

SORTABLE_COLUMNS = {
    "created_at": Order.created_at,
    "updated_at": Order.updated_at,
    "total_quantity": Order.total_quantity,
    "booking_amount": Order.booking_amount,
    "status": Order.status,
}


def _money(value) -> str:
    return safe_to_fixed(value, config.PRICE_DECIMALS)


def order_out(order: Order, include_customer: bool = False) -> OrderOut:
    items = []
    for item in order.order_items:
        if item.variant is not None:
            name = item.variant.product.name
            variant_name = item.variant.name
        elif item.product is not None:
            name = item.product.name
            variant_name = None
        else:
            # Tuote on poistettu tilauksen jälkeen
            name = "Deleted product"
            variant_name = None

        items.append(
            OrderItemOut(
                id=item.id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                name=name,
                variant_name=variant_name,
                quantity=item.quantity,
                booking_price=_money(item.booking_price),
                unit_price=_money(item.unit_price),
            )
        )

    customer = None
    if include_customer and order.user is not None:
        customer = CustomerOut.model_validate(order.user)

    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        status=order.status,
        total_quantity=order.total_quantity,
        booking_amount=_money(order.booking_amount),
        transaction_id=order.transaction_id,
        created_at=order.created_at,
        items=items,
        customer=customer,
    )


# --------------------------------------------------------------------
# Käyttäjän tilaukset
# --------------------------------------------------------------------


def create_order_from_cart(db: Session, actor: Actor) -> OrderOut:
    """
    Luo BOOKED-tilaisen tilauksen korin sisällöstä ja tyhjentää korin.
    """
    user = ensure_user(db, actor)
    items = cart_items_for(db, user.id)
    if not items:
        raise ValidationFailed("Cart is empty")

    priceables = priceables_for_items(db, items)

    order = Order(user_id=user.id, status=OrderStatus.BOOKED.value)
    total_quantity = 0
    total_booking = ZERO

    for item in items:
        product = priceables[item_product(item).id]
        variant = find_variant(product, item.variant_id)
        context = resolve_active_price_context(product, variant)

        # Hinta 0 tarkoittaa "ei tiedossa", joten riviä ei voi tilata
        if not can_add_to_cart(product, variant) or not context.has_pricing:
            log.warning(
                f"Order for user {user.id} refused: cart line {item.id} "
                f"(product {product.id}, variant {item.variant_id}) cannot be priced"
            )
            raise ValidationFailed(
                f"'{product.name}' is no longer available as added; remove it from the cart"
            )
        unit_price = PricingEngine.current_price(context.brackets, context.demand)

        order.order_items.append(
            OrderItem(
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                booking_price=context.booking_amount,
                unit_price=unit_price,
            )
        )
        total_quantity += item.quantity
        total_booking += context.booking_amount * item.quantity

    order.total_quantity = total_quantity
    order.booking_amount = total_booking
    db.add(order)
    clear_cart(db, user.id)

    try:
        db.commit()
    except Exception:
        db.rollback()
        log.exception(f"Creating order for user {user.id} failed")
        raise

    db.refresh(order)
    invalidate_catalog_cache()
    log.info(f"Order {order.id} booked for user {user.id}: {total_quantity} units, booking {_money(total_booking)}")
    return order_out(order)


def list_user_orders(db: Session, actor: Actor) -> List[OrderOut]:
    stmt = (
        select(Order)
        .where(Order.user_id == actor.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return [order_out(o) for o in db.execute(stmt).scalars().all()]


def _own_order(db: Session, actor: Actor, order_id: int) -> Order:
    stmt = select(Order).where(Order.id == order_id, Order.user_id == actor.user_id)
    order = db.execute(stmt).scalars().first()
    if order is None:
        raise NotFoundError("Order not found")
    return order


def get_user_order(db: Session, actor: Actor, order_id: int) -> OrderOut:
    return order_out(_own_order(db, actor, order_id), include_customer=True)


def apply_user_action(db: Session, actor: Actor, order_id: int, action: str) -> OrderOut:
    """Käyttäjä voi ainoastaan perua BOOKED-tilassa olevan tilauksen."""
    order = _own_order(db, actor, order_id)
    if action != "cancel" or order.status != OrderStatus.BOOKED.value:
        raise ValidationFailed("Invalid action or order cannot be modified")

    order.status = OrderStatus.CANCELLED.value
    db.commit()
    invalidate_catalog_cache()
    log.info(f"Order {order.id} cancelled by user {actor.user_id}")
    return order_out(order)


# --------------------------------------------------------------------
# Myynti: kaikki tilaukset
# --------------------------------------------------------------------


def list_orders(
    db: Session,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    search: str = "",
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> OrderListResponse:
    filters = []
    if status:
        if status not in VALID_STATUSES:
            raise ValidationFailed("Invalid status")
        filters.append(Order.status == status)

    if search:
        like_pattern = f"%{search.lower()}%"
        filters.append(
            or_(
                Order.transaction_id.ilike(like_pattern),
                User.name.ilike(like_pattern),
                User.email.ilike(like_pattern),
                User.roll.ilike(like_pattern),
            )
        )

    column = SORTABLE_COLUMNS.get(sort_by, Order.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()

    total = db.execute(
        select(func.count(Order.id)).select_from(Order).join(User, User.id == Order.user_id).where(*filters)
    ).scalar_one()
    stmt = (
        select(Order)
        .join(User, User.id == Order.user_id)
        .where(*filters)
        .order_by(ordering, Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    orders = db.execute(stmt).scalars().all()

    return OrderListResponse(
        orders=[order_out(o, include_customer=True) for o in orders],
        pagination=make_pagination(page, limit, total),
    )


def get_order(db: Session, order_id: int) -> OrderOut:
    order = db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order_out(order, include_customer=True)


def update_order_status(db: Session, actor: Actor, order_id: int, status: str) -> OrderOut:
    if status not in VALID_STATUSES:
        raise ValidationFailed("Invalid status")

    order = db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    previous = order.status
    order.status = status
    db.commit()
    invalidate_catalog_cache()
    log.info(f"Order {order.id} status {previous} -> {status} by {actor.role} {actor.user_id}")
    return order_out(order, include_customer=True)
