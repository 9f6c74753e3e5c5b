# -*- coding: utf-8 -*-
# Business Logic: Priceable entities
# Copyright (c) 2025 Jan Sarivuo

"""
Tuotteiden hinnoiteltavat muodot ja niiden ratkaisu hinnoittelua varten.

Tuote on aina jompikumpi:
- SimpleProduct: oma varausmaksu, kuvat ja hintaportaat.
- VariantedProduct: vähintään yksi variantti, jokaisella omat tiedot.

Kaikki kutsupaikat (listaus, tuotesivu, ostoskori, tilaus) selvittävät
voimassa olevat portaat ja kysynnän resolve_active_price_context()-funktiolla,
jotta "variantti puuttuu" käsitellään kaikkialla samalla tavalla.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from groupbuy import config
from groupbuy.pricing import ZERO, PricingEngine, PriceQuote, safe_number

log = logging.getLogger("groupbuy.catalog")


class PriceBracket(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    min_quantity: int
    max_quantity: Optional[int] = None
    price_per_unit: Decimal


class Variant(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    booking_amount: Decimal = ZERO
    images: List[str] = []
    is_active: Optional[bool] = True
    total_ordered_quantity: int = 0
    price_ranges: List[PriceBracket] = []


class SimpleProduct(BaseModel):
    kind: Literal["simple"] = "simple"
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    booking_amount: Optional[Decimal] = None
    images: List[str] = []
    price_ranges: List[PriceBracket] = []
    total_ordered_quantity: int = 0


class VariantedProduct(BaseModel):
    kind: Literal["varianted"] = "varianted"
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    variants: List[Variant] = Field(min_length=1)


PriceableProduct = Union[SimpleProduct, VariantedProduct]


@dataclass(frozen=True)
class PriceContext:
    """Yhden hinnoiteltavan kohteen portaat, kysyntä ja varausmaksu."""

    brackets: List[PriceBracket] = field(default_factory=list)
    demand: int = 0
    booking_amount: Decimal = ZERO
    images: List[str] = field(default_factory=list)
    variant_id: Optional[int] = None

    @property
    def has_pricing(self) -> bool:
        return bool(self.brackets)

    def quote(self) -> PriceQuote:
        return PricingEngine.quote(self.brackets, self.demand)


def to_priceable(
    product,
    product_demand: Optional[Dict[int, int]] = None,
    variant_demand: Optional[Dict[int, int]] = None,
) -> PriceableProduct:
    """
    Muuntaa ORM-rivin tagged union -muotoon. Kysyntälaskurit annetaan
    erikseen, koska ne lasketaan tilausriveistä.
    """
    product_demand = product_demand or {}
    variant_demand = variant_demand or {}

    common = dict(
        id=product.id,
        name=product.name,
        description=product.description,
        is_active=bool(product.is_active),
        created_at=product.created_at,
    )

    if product.has_variants:
        variants = [
            Variant(
                id=v.id,
                name=v.name,
                booking_amount=safe_number(v.booking_amount),
                images=list(v.images or []),
                is_active=v.is_active,
                total_ordered_quantity=variant_demand.get(v.id, 0),
                price_ranges=[PriceBracket.model_validate(r) for r in v.price_ranges],
            )
            for v in product.variants
        ]
        return VariantedProduct(variants=variants, **common)

    return SimpleProduct(
        booking_amount=product.booking_amount,
        images=list(product.images or []),
        price_ranges=[PriceBracket.model_validate(r) for r in product.price_ranges],
        total_ordered_quantity=product_demand.get(product.id, 0),
        **common,
    )


# --------------------------------------------------------------------
# Aktiivisuus
# --------------------------------------------------------------------


def is_variant_active(variant: Variant) -> bool:
    # Puuttuva lippu tulkitaan aktiiviseksi
    return variant.is_active is not False


def active_variants(product: PriceableProduct) -> List[Variant]:
    if not isinstance(product, VariantedProduct):
        return []
    return [v for v in product.variants if is_variant_active(v)]


def is_product_active(product: PriceableProduct) -> bool:
    if not product.is_active:
        return False
    if isinstance(product, VariantedProduct):
        return bool(active_variants(product))
    return True


def filter_active_products(products: List[PriceableProduct]) -> List[PriceableProduct]:
    return [p for p in products if is_product_active(p)]


def default_variant(product: PriceableProduct) -> Optional[Variant]:
    """Ensimmäinen aktiivinen variantti, muuten ensimmäinen variantti."""
    if not isinstance(product, VariantedProduct):
        return None
    active = active_variants(product)
    if active:
        return active[0]
    return product.variants[0]


def find_variant(product: PriceableProduct, variant_id: Optional[int]) -> Optional[Variant]:
    if variant_id is None or not isinstance(product, VariantedProduct):
        return None
    for variant in product.variants:
        if variant.id == variant_id:
            return variant
    return None


def can_add_to_cart(product: PriceableProduct, variant: Optional[Variant] = None) -> bool:
    if not product.is_active:
        return False
    if isinstance(product, VariantedProduct):
        if variant is None:
            return False
        return is_variant_active(variant)
    return True


def product_status(product: PriceableProduct) -> dict:
    """Tuotteen tilan yhteenveto admin-näkymiä varten."""
    active = active_variants(product)
    total = len(product.variants) if isinstance(product, VariantedProduct) else 0
    return {
        "is_active": product.is_active,
        "has_active_variants": bool(active),
        "total_variants": total,
        "active_variants": len(active),
        "can_be_purchased": is_product_active(product),
    }


# --------------------------------------------------------------------
# Hintakontekstin ratkaisu
# --------------------------------------------------------------------


def resolve_active_price_context(
    product: PriceableProduct,
    variant: Optional[Variant] = None,
    policy: Optional[str] = None,
) -> PriceContext:
    """
    Valitsee, mitkä portaat ja mikä kysyntälaskuri ovat voimassa.

    Variantillisella tuotteella ilman valittua varianttia tulos riippuu
    asetuksesta UNSELECTED_VARIANT_POLICY:
    - "none" (oletus): tyhjät portaat ja kysyntä 0, eli hintaa ei vielä ole.
    - "first_active": esikatselu default_variant()-variantilla.
    """
    if isinstance(product, VariantedProduct):
        policy = policy or config.UNSELECTED_VARIANT_POLICY
        selected = variant
        if selected is None and policy == config.POLICY_FIRST_ACTIVE:
            selected = default_variant(product)
        if selected is None:
            return PriceContext()
        return PriceContext(
            brackets=list(selected.price_ranges),
            demand=selected.total_ordered_quantity,
            booking_amount=safe_number(selected.booking_amount),
            images=list(selected.images),
            variant_id=selected.id,
        )

    return PriceContext(
        brackets=list(product.price_ranges),
        demand=product.total_ordered_quantity,
        booking_amount=safe_number(product.booking_amount),
        images=list(product.images),
    )


def quote_with_alert(product: PriceableProduct, context: PriceContext) -> PriceQuote:
    """
    Laskee hinnat ja kirjaa varoituksen, jos hinnoiteltavalla kohteella
    ei ole käyttökelpoista hintaa (näytetään 0).
    """
    quote = context.quote()
    if context.has_pricing and quote.current_price == ZERO:
        log.warning(
            f"Product {product.id} (variant {context.variant_id}) resolved to price 0 "
            f"with {len(context.brackets)} brackets"
        )
    elif not context.has_pricing and isinstance(product, SimpleProduct):
        log.warning(f"Product {product.id} has no price brackets configured")
    return quote
