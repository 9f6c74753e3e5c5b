# -*- coding: utf-8 -*-
# Admin: product maintenance
# Copyright (c) 2025 Jan Sarivuo

"""
Tuotteiden ylläpito (admin).

Hintaportaat tarkistetaan jo tallennusvaiheessa, jotta hinnoittelun ei
tarvitse arvailla päällekkäisten tai samalla alarajalla alkavien
portaiden järjestystä.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from groupbuy.catalog import product_status
from groupbuy.errors import NotFoundError, ValidationFailed
from groupbuy.models import PriceRange, Product, Variant
from groupbuy.products import (
    build_product_out,
    invalidate_catalog_cache,
    load_priceable,
    load_priceables,
    make_pagination,
    search_filter,
)
from groupbuy.schemas import (
    AdminProductListResponse,
    AdminProductOut,
    PriceRangeIn,
    ProductIn,
    ProductStatusOut,
    VariantIn,
)

log = logging.getLogger("groupbuy.admin")

STATUS_FILTERS = ("all", "active", "inactive")

# Numeric(10, 2) -sarakkeiden suurin arvo
MAX_AMOUNT = Decimal("99999999.99")


# --------------------------------------------------------------------
# Tarkistukset
# --------------------------------------------------------------------


def validate_price_ranges(ranges: List[PriceRangeIn], label: str = "product") -> None:
    """
    Hyväksytään vain hyvin muodostettu porrastus:
    - vähintään yksi porras
    - min >= 1, max >= min, hinta > 0
    - ei kahta porrasta samalla alarajalla, ei päällekkäisyyksiä
    - ylöspäin avoin porras (max puuttuu) vain ylimpänä
    """
    if not ranges:
        raise ValidationFailed(f"At least one price range is required for {label}")

    ordered = sorted(ranges, key=lambda r: r.min_quantity)
    previous: Optional[PriceRangeIn] = None
    for index, current in enumerate(ordered):
        if current.min_quantity < 1:
            raise ValidationFailed(f"Minimum quantity must be at least 1 ({label})")
        if current.max_quantity is not None and current.max_quantity < current.min_quantity:
            raise ValidationFailed(f"Maximum quantity must not be below minimum quantity ({label})")
        if current.price_per_unit <= 0:
            raise ValidationFailed(f"Price per unit must be positive ({label})")
        if current.price_per_unit > MAX_AMOUNT:
            raise ValidationFailed(f"Price per unit must not exceed {MAX_AMOUNT} ({label})")
        if current.max_quantity is None and index != len(ordered) - 1:
            raise ValidationFailed(f"Only the highest price range can be open-ended ({label})")

        if previous is not None:
            if current.min_quantity == previous.min_quantity:
                raise ValidationFailed(
                    f"Duplicate minimum quantity {current.min_quantity} ({label})"
                )
            if current.min_quantity <= previous.max_quantity:
                raise ValidationFailed(f"Price ranges overlap ({label})")
        previous = current


def validate_product(payload: ProductIn) -> None:
    if not payload.name or not payload.name.strip():
        raise ValidationFailed("Product name is required")

    if payload.has_variants:
        if not payload.variants:
            raise ValidationFailed("A product with variants needs at least one variant")
        for variant in payload.variants:
            if not variant.name or not variant.name.strip():
                raise ValidationFailed("Variant name is required")
            if variant.booking_amount < 0:
                raise ValidationFailed(f"Booking amount must not be negative ({variant.name})")
            if variant.booking_amount > MAX_AMOUNT:
                raise ValidationFailed(f"Booking amount must not exceed {MAX_AMOUNT} ({variant.name})")
            validate_price_ranges(variant.price_ranges, label=f"variant {variant.name}")
        return

    if payload.booking_amount is None or payload.booking_amount < 0:
        raise ValidationFailed("Booking amount is required for a product without variants")
    if payload.booking_amount > MAX_AMOUNT:
        raise ValidationFailed(f"Booking amount must not exceed {MAX_AMOUNT}")
    validate_price_ranges(payload.price_ranges)


# --------------------------------------------------------------------
# Rakentajat
# --------------------------------------------------------------------


def _price_range_rows(ranges: List[PriceRangeIn]) -> List[PriceRange]:
    return [
        PriceRange(
            min_quantity=r.min_quantity,
            max_quantity=r.max_quantity,
            price_per_unit=r.price_per_unit,
        )
        for r in sorted(ranges, key=lambda r: r.min_quantity)
    ]


def _variant_row(payload: VariantIn) -> Variant:
    return Variant(
        name=payload.name.strip(),
        booking_amount=payload.booking_amount,
        images=list(payload.images),
        is_active=payload.is_active,
        price_ranges=_price_range_rows(payload.price_ranges),
    )


def has_order_history(product: Product) -> bool:
    if product.order_items:
        return True
    return any(v.order_items for v in product.variants)


def admin_product_out(db: Session, product: Product) -> AdminProductOut:
    priceable = load_priceable(db, product)
    return _admin_out(product, priceable)


def _admin_out(product: Product, priceable) -> AdminProductOut:
    base = build_product_out(priceable, include_inactive_variants=True)
    return AdminProductOut(
        **base.model_dump(),
        status=ProductStatusOut(**product_status(priceable)),
        order_count=len(product.order_items) + sum(len(v.order_items) for v in product.variants),
        cart_count=len(product.cart_items) + sum(len(v.cart_items) for v in product.variants),
    )


def _get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        log.exception(f"Admin write failed: {what}")
        raise
    invalidate_catalog_cache()


# --------------------------------------------------------------------
# Operaatiot
# --------------------------------------------------------------------


def list_admin_products(
    db: Session,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    status: str = "all",
) -> AdminProductListResponse:
    """Admin näkee myös passiiviset tuotteet ja variantit."""
    if status not in STATUS_FILTERS:
        raise ValidationFailed("Invalid status filter")

    filters = []
    if search:
        filters.append(search_filter(search))
    if status == "active":
        filters.append(Product.is_active.is_(True))
    elif status == "inactive":
        filters.append(Product.is_active.is_(False))

    total = db.execute(select(func.count(Product.id)).where(*filters)).scalar_one()
    stmt = (
        select(Product)
        .where(*filters)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = db.execute(stmt).scalars().all()
    priceables = load_priceables(db, rows)

    return AdminProductListResponse(
        products=[_admin_out(row, p) for row, p in zip(rows, priceables)],
        pagination=make_pagination(page, limit, total),
    )


def get_admin_product(db: Session, product_id: int) -> AdminProductOut:
    return admin_product_out(db, _get_product(db, product_id))


def create_product(db: Session, payload: ProductIn) -> AdminProductOut:
    validate_product(payload)

    product = Product(
        name=payload.name.strip(),
        description=payload.description,
        has_variants=payload.has_variants,
        is_active=payload.is_active,
    )
    if payload.has_variants:
        product.images = []
        product.booking_amount = None
        product.variants = [_variant_row(v) for v in payload.variants]
    else:
        product.images = list(payload.images)
        product.booking_amount = payload.booking_amount
        product.price_ranges = _price_range_rows(payload.price_ranges)

    db.add(product)
    _commit(db, f"create product '{product.name}'")
    db.refresh(product)
    log.info(f"Created product {product.id} '{product.name}' (variants: {product.has_variants})")
    return admin_product_out(db, product)


def update_product(db: Session, product_id: int, payload: ProductIn) -> AdminProductOut:
    """
    Päivittää tuotteen. Variantit tunnistetaan id:n perusteella; listalta
    puuttuva variantti poistetaan, tai passivoidaan jos sillä on tilauksia.
    """
    product = _get_product(db, product_id)
    validate_product(payload)

    mode_changed = payload.has_variants != product.has_variants
    if mode_changed and has_order_history(product):
        raise ValidationFailed("Cannot change variant mode of a product with existing orders")
    if mode_changed and product.cart_items:
        # Tuotetason koririvejä ei voi hinnoitella varianttitilassa
        log.info(f"Removing {len(product.cart_items)} cart lines of product {product_id} (variant mode changed)")
        product.cart_items = []

    product.name = payload.name.strip()
    product.description = payload.description
    product.is_active = payload.is_active
    product.has_variants = payload.has_variants

    if not payload.has_variants:
        product.images = list(payload.images)
        product.booking_amount = payload.booking_amount
        product.price_ranges = _price_range_rows(payload.price_ranges)
        product.variants = []
    else:
        product.images = []
        product.booking_amount = None
        product.price_ranges = []

        existing = {v.id: v for v in product.variants}
        kept = []
        for incoming in payload.variants:
            current = existing.pop(incoming.id, None) if incoming.id is not None else None
            if current is None:
                kept.append(_variant_row(incoming))
                continue
            current.name = incoming.name.strip()
            current.booking_amount = incoming.booking_amount
            current.images = list(incoming.images)
            current.is_active = incoming.is_active
            current.price_ranges = _price_range_rows(incoming.price_ranges)
            kept.append(current)

        for leftover in existing.values():
            if leftover.order_items:
                leftover.is_active = False
                kept.append(leftover)
        product.variants = kept

    _commit(db, f"update product {product_id}")
    db.refresh(product)
    log.info(f"Updated product {product.id}")
    return admin_product_out(db, product)


def set_product_status(db: Session, product_id: int, is_active: bool) -> AdminProductOut:
    product = _get_product(db, product_id)
    product.is_active = is_active
    _commit(db, f"set status of product {product_id}")
    log.info(f"Product {product_id} is_active={is_active}")
    return admin_product_out(db, product)


def delete_product(db: Session, product_id: int) -> None:
    product = _get_product(db, product_id)
    if has_order_history(product):
        raise ValidationFailed("Cannot delete a product with existing orders; deactivate it instead")

    db.delete(product)
    _commit(db, f"delete product {product_id}")
    log.info(f"Deleted product {product_id}")
