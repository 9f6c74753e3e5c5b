# -*- coding: utf-8 -*-
# Shopping cart
# Copyright (c) 2025 Jan Sarivuo

"""
Ostoskori.

Korissa maksetaan vain varausmaksu (booking amount) kappaleelta.
Porrashinta näytetään rivillä tietona, mutta se ei vaikuta korin summaan.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from groupbuy import config
from groupbuy.auth import Actor, ensure_user
from groupbuy.catalog import (
    PriceableProduct,
    VariantedProduct,
    can_add_to_cart,
    find_variant,
    resolve_active_price_context,
)
from groupbuy.errors import NotFoundError, ValidationFailed
from groupbuy.models import CartItem, Product, Variant
from groupbuy.pricing import ZERO, PricingEngine, safe_to_fixed
from groupbuy.products import load_priceables
from groupbuy.schemas import CartAddIn, CartLineOut, CartOut

log = logging.getLogger("groupbuy.cart")


def item_product(item: CartItem) -> Product:
    """Variantin rivillä tuote löytyy variantin kautta."""
    if item.variant is not None:
        return item.variant.product
    return item.product


def line_details(item: CartItem, product: PriceableProduct) -> Tuple[CartLineOut, Decimal]:
    """
    Muodostaa koririvin tiedot. Palauttaa myös rivin varaussumman
    Decimalina, jotta summat lasketaan ennen pyöristystä.
    """
    variant = find_variant(product, item.variant_id)
    context = resolve_active_price_context(product, variant)
    line_total = context.booking_amount * item.quantity
    unit_price = PricingEngine.current_price(context.brackets, context.demand)

    line = CartLineOut(
        id=item.id,
        product_id=product.id,
        variant_id=variant.id if variant is not None else None,
        name=product.name,
        variant_name=variant.name if variant is not None else None,
        quantity=item.quantity,
        images=context.images,
        has_variants=isinstance(product, VariantedProduct),
        booking_amount_per_unit=safe_to_fixed(context.booking_amount, config.PRICE_DECIMALS),
        total_booking_amount=safe_to_fixed(line_total, config.PRICE_DECIMALS),
        unit_price=safe_to_fixed(unit_price, config.PRICE_DECIMALS),
    )
    return line, line_total


def calculate_cart_totals(lines: List[Tuple[CartLineOut, Decimal]]) -> Tuple[int, Decimal]:
    total_items = 0
    total_booking_amount = ZERO
    for line, line_total in lines:
        total_items += line.quantity
        total_booking_amount += line_total
    return total_items, total_booking_amount


def cart_items_for(db: Session, user_id: str) -> List[CartItem]:
    stmt = select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.id.asc())
    return list(db.execute(stmt).scalars().all())


def priceables_for_items(db: Session, items: List[CartItem]) -> Dict[int, PriceableProduct]:
    products: Dict[int, Product] = {}
    for item in items:
        product = item_product(item)
        products[product.id] = product
    return {p.id: p for p in load_priceables(db, list(products.values()))}


def get_cart(db: Session, actor: Actor) -> CartOut:
    items = cart_items_for(db, actor.user_id)
    priceables = priceables_for_items(db, items)

    lines = [line_details(item, priceables[item_product(item).id]) for item in items]
    total_items, total_booking_amount = calculate_cart_totals(lines)

    return CartOut(
        items=[line for line, _ in lines],
        total_items=total_items,
        total_booking_amount=safe_to_fixed(total_booking_amount, config.PRICE_DECIMALS),
        formatted_total=f"{safe_to_fixed(total_booking_amount, config.PRICE_DECIMALS)} {config.CURRENCY}",
        currency=config.CURRENCY,
    )


def _check_quantity(quantity: Optional[int]) -> None:
    if not quantity or quantity < 1:
        raise ValidationFailed("Quantity must be at least 1")


def add_to_cart(db: Session, actor: Actor, payload: CartAddIn) -> CartOut:
    """
    Lisää tuotteen koriin. Jos sama tuote/variantti on jo korissa,
    määrä kasvaa olemassa olevalla rivillä.
    """
    _check_quantity(payload.quantity)
    if payload.product_id is None and payload.variant_id is None:
        raise ValidationFailed("Either product_id or variant_id is required")

    variant_row: Optional[Variant] = None
    if payload.variant_id is not None:
        variant_row = db.get(Variant, payload.variant_id)
        if variant_row is None:
            raise NotFoundError("Variant not found")
        product_row = variant_row.product
        if payload.product_id is not None and payload.product_id != product_row.id:
            raise ValidationFailed("Variant does not belong to the product")
    else:
        product_row = db.get(Product, payload.product_id)
        if product_row is None:
            raise NotFoundError("Product not found")

    priceable = load_priceables(db, [product_row])[0]
    variant = find_variant(priceable, payload.variant_id)
    if not can_add_to_cart(priceable, variant):
        if isinstance(priceable, VariantedProduct) and variant is None:
            raise ValidationFailed("Select a variant before adding this product")
        raise ValidationFailed("Product is not available for purchase")

    user = ensure_user(db, actor)

    # Variantin rivillä product_id on aina NULL
    product_id = None if variant_row is not None else product_row.id
    variant_id = variant_row.id if variant_row is not None else None
    stmt = select(CartItem).where(
        CartItem.user_id == user.id,
        CartItem.product_id.is_(None) if product_id is None else CartItem.product_id == product_id,
        CartItem.variant_id.is_(None) if variant_id is None else CartItem.variant_id == variant_id,
    )
    existing = db.execute(stmt).scalars().first()

    if existing is not None:
        existing.quantity += payload.quantity
    else:
        db.add(
            CartItem(
                user_id=user.id,
                product_id=product_id,
                variant_id=variant_id,
                quantity=payload.quantity,
            )
        )

    db.commit()
    log.info(f"User {actor.user_id} added {payload.quantity} x product {product_row.id} (variant {variant_id})")
    return get_cart(db, actor)


def _own_item(db: Session, actor: Actor, item_id: int) -> CartItem:
    stmt = select(CartItem).where(CartItem.id == item_id, CartItem.user_id == actor.user_id)
    item = db.execute(stmt).scalars().first()
    if item is None:
        raise NotFoundError("Cart item not found")
    return item


def update_cart_item(db: Session, actor: Actor, item_id: int, quantity: int) -> CartOut:
    _check_quantity(quantity)
    item = _own_item(db, actor, item_id)
    item.quantity = quantity
    db.commit()
    return get_cart(db, actor)


def remove_cart_item(db: Session, actor: Actor, item_id: int) -> CartOut:
    item = _own_item(db, actor, item_id)
    db.delete(item)
    db.commit()
    return get_cart(db, actor)


def clear_cart(db: Session, user_id: str) -> int:
    """Poistaa käyttäjän korin rivit. Ei commitoi."""
    items = cart_items_for(db, user_id)
    for item in items:
        db.delete(item)
    return len(items)
