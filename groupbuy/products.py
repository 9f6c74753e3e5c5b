# -*- coding: utf-8 -*-
# Product catalog queries
# Copyright (c) 2025 Jan Sarivuo

"""
Tuotekatalogin haut ja vastausten muodostus.

Kysyntälaskuri (kuinka monta kappaletta tuotetta/varianttia on jo tilattu)
lasketaan tilausriveistä. Mukaan lasketaan vain voimassa olevat tilaukset
(BOOKED, DELIVERED).
"""

import logging
import math
from typing import Dict, Iterable, List, Optional

from cachetools import TTLCache
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from groupbuy import config
from groupbuy.catalog import (
    PriceableProduct,
    PriceBracket,
    VariantedProduct,
    active_variants,
    find_variant,
    is_variant_active,
    quote_with_alert,
    resolve_active_price_context,
    to_priceable,
)
from groupbuy.errors import NotFoundError
from groupbuy.models import DEMAND_STATUSES, Order, OrderItem, Product, Variant
from groupbuy.pricing import PriceQuote, safe_number, safe_to_fixed
from groupbuy.schemas import (
    Pagination,
    PriceBracketOut,
    PricingOut,
    ProductListResponse,
    ProductOut,
    VariantOut,
)

log = logging.getLogger("groupbuy.products")

# Avain: hakuparametrit (string), arvo: ProductListResponse
catalog_cache: TTLCache = TTLCache(maxsize=config.CATALOG_CACHE_SIZE, ttl=config.CATALOG_CACHE_TTL)

SORT_OPTIONS = ("newest", "price_low", "price_high")


def cache_key(page: int, limit: int, search: str, sort: str) -> str:
    return f"p={page}|l={limit}|q={search}|s={sort}|policy={config.UNSELECTED_VARIANT_POLICY}"


def invalidate_catalog_cache() -> None:
    """Tyhjennetään, kun tuotteet tai tilausmäärät (eli hinnat) muuttuvat."""
    catalog_cache.clear()


# --------------------------------------------------------------------
# Kysyntälaskurit
# --------------------------------------------------------------------


def demand_by_product(db: Session, product_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(product_ids)
    if not ids:
        return {}
    stmt = (
        select(OrderItem.product_id, func.sum(OrderItem.quantity))
        .join(Order, Order.id == OrderItem.order_id)
        .where(OrderItem.product_id.in_(ids), Order.status.in_(DEMAND_STATUSES))
        .group_by(OrderItem.product_id)
    )
    return {pid: int(total or 0) for pid, total in db.execute(stmt)}


def demand_by_variant(db: Session, variant_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(variant_ids)
    if not ids:
        return {}
    stmt = (
        select(OrderItem.variant_id, func.sum(OrderItem.quantity))
        .join(Order, Order.id == OrderItem.order_id)
        .where(OrderItem.variant_id.in_(ids), Order.status.in_(DEMAND_STATUSES))
        .group_by(OrderItem.variant_id)
    )
    return {vid: int(total or 0) for vid, total in db.execute(stmt)}


def load_priceables(db: Session, products: List[Product]) -> List[PriceableProduct]:
    """Muuntaa ORM-tuotteet hinnoiteltaviksi yhdellä kysyntähaulla."""
    product_demand = demand_by_product(db, [p.id for p in products if not p.has_variants])
    variant_demand = demand_by_variant(
        db, [v.id for p in products if p.has_variants for v in p.variants]
    )
    return [to_priceable(p, product_demand, variant_demand) for p in products]


def load_priceable(db: Session, product: Product) -> PriceableProduct:
    return load_priceables(db, [product])[0]


# --------------------------------------------------------------------
# Vastausten muodostus
# --------------------------------------------------------------------


def bracket_out(bracket: PriceBracket) -> PriceBracketOut:
    return PriceBracketOut(
        min_quantity=bracket.min_quantity,
        max_quantity=bracket.max_quantity,
        price_per_unit=safe_to_fixed(bracket.price_per_unit, config.PRICE_DECIMALS),
    )


def pricing_out(quote: PriceQuote, available: bool) -> PricingOut:
    units_to_next = None
    if quote.units_to_next is not None:
        units_to_next = int(math.ceil(quote.units_to_next))
    return PricingOut(
        current_price=safe_to_fixed(quote.current_price, config.PRICE_DECIMALS),
        next_bracket=bracket_out(quote.next_bracket) if quote.next_bracket is not None else None,
        floor_price=safe_to_fixed(quote.floor_price, config.PRICE_DECIMALS),
        orders_placed=int(quote.demand),
        units_to_next=units_to_next,
        currency=config.CURRENCY,
        available=available,
    )


def build_product_out(
    product: PriceableProduct,
    selected_variant_id: Optional[int] = None,
    include_inactive_variants: bool = False,
) -> ProductOut:
    selected = find_variant(product, selected_variant_id)
    context = resolve_active_price_context(product, selected)
    pricing = pricing_out(quote_with_alert(product, context), context.has_pricing)

    if isinstance(product, VariantedProduct):
        shown = product.variants if include_inactive_variants else active_variants(product)
        variants = []
        for variant in shown:
            variant_context = resolve_active_price_context(product, variant)
            variants.append(
                VariantOut(
                    id=variant.id,
                    name=variant.name,
                    booking_amount=safe_to_fixed(variant.booking_amount, config.PRICE_DECIMALS),
                    images=variant.images,
                    is_active=is_variant_active(variant),
                    total_ordered_quantity=variant.total_ordered_quantity,
                    price_ranges=[bracket_out(b) for b in variant.price_ranges],
                    pricing=pricing_out(
                        quote_with_alert(product, variant_context), variant_context.has_pricing
                    ),
                )
            )
        return ProductOut(
            id=product.id,
            kind=product.kind,
            name=product.name,
            description=product.description,
            has_variants=True,
            is_active=product.is_active,
            images=context.images,
            booking_amount=(
                safe_to_fixed(context.booking_amount, config.PRICE_DECIMALS)
                if context.variant_id is not None
                else None
            ),
            total_ordered_quantity=sum(v.total_ordered_quantity for v in product.variants),
            variants=variants,
            selected_variant_id=context.variant_id,
            pricing=pricing,
            created_at=product.created_at,
        )

    return ProductOut(
        id=product.id,
        kind=product.kind,
        name=product.name,
        description=product.description,
        has_variants=False,
        is_active=product.is_active,
        images=product.images,
        booking_amount=safe_to_fixed(safe_number(product.booking_amount), config.PRICE_DECIMALS),
        total_ordered_quantity=product.total_ordered_quantity,
        price_ranges=[bracket_out(b) for b in product.price_ranges],
        pricing=pricing,
        created_at=product.created_at,
    )


def make_pagination(page: int, limit: int, total: int) -> Pagination:
    pages = int(math.ceil(total / limit)) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


# --------------------------------------------------------------------
# Julkiset haut
# --------------------------------------------------------------------


def search_filter(search: str):
    like_pattern = f"%{search.lower()}%"
    return or_(Product.name.ilike(like_pattern), Product.description.ilike(like_pattern))


def list_public_products(
    db: Session,
    page: int = 1,
    limit: int = 12,
    search: str = "",
    sort: str = "newest",
) -> ProductListResponse:
    """
    Aktiiviset tuotteet hintatietoineen. Variantillisista tuotteista
    näytetään vain ne, joilla on vähintään yksi aktiivinen variantti.
    """
    key = cache_key(page, limit, search, sort)
    if key in catalog_cache:
        return catalog_cache[key]

    filters = [
        Product.is_active.is_(True),
        or_(Product.has_variants.is_(False), Product.variants.any(Variant.is_active.is_(True))),
    ]
    if search:
        filters.append(search_filter(search))

    if sort == "price_low":
        order_by = [Product.booking_amount.asc(), Product.id.asc()]
    elif sort == "price_high":
        order_by = [Product.booking_amount.desc(), Product.id.desc()]
    else:
        order_by = [Product.created_at.desc(), Product.id.desc()]

    total = db.execute(select(func.count(Product.id)).where(*filters)).scalar_one()
    stmt = (
        select(Product)
        .where(*filters)
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = db.execute(stmt).scalars().all()

    result = ProductListResponse(
        products=[build_product_out(p) for p in load_priceables(db, rows)],
        pagination=make_pagination(page, limit, total),
    )

    catalog_cache[key] = result
    return result


def get_public_product(db: Session, product_id: int, variant_id: Optional[int] = None) -> ProductOut:
    product = db.get(Product, product_id)
    if product is None or not product.is_active:
        raise NotFoundError("Product not found")

    priceable = load_priceable(db, product)
    if variant_id is not None:
        variant = find_variant(priceable, variant_id)
        if variant is None or not is_variant_active(variant):
            raise NotFoundError("Variant not found")

    return build_product_out(priceable, selected_variant_id=variant_id)
