# -*- coding: utf-8 -*-
# API schemas (Pydantic)
# Copyright (c) 2025 Jan Sarivuo

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

# Rahasummat palautetaan valmiiksi muotoiltuina merkkijonoina ("12.50"),
# jotta front-endin ei tarvitse pyöristää liukulukuja.


class PriceBracketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    min_quantity: int
    max_quantity: Optional[int] = None
    price_per_unit: str


class PricingOut(BaseModel):
    """Hintapaneelin tiedot: nykyinen hinta, seuraava porras, alin hinta."""
    current_price: str
    next_bracket: Optional[PriceBracketOut] = None
    floor_price: str
    orders_placed: int
    units_to_next: Optional[int] = None
    currency: str
    available: bool


class VariantOut(BaseModel):
    id: int
    name: str
    booking_amount: str
    images: List[str] = []
    is_active: bool = True
    total_ordered_quantity: int = 0
    price_ranges: List[PriceBracketOut] = []
    pricing: PricingOut


class ProductOut(BaseModel):
    id: int
    kind: str
    name: str
    description: Optional[str] = None
    has_variants: bool
    is_active: bool
    images: List[str] = []
    booking_amount: Optional[str] = None
    total_ordered_quantity: int = 0
    price_ranges: List[PriceBracketOut] = []
    variants: List[VariantOut] = []
    selected_variant_id: Optional[int] = None
    pricing: PricingOut
    created_at: Optional[datetime] = None


class ProductStatusOut(BaseModel):
    is_active: bool
    has_active_variants: bool
    total_variants: int
    active_variants: int
    can_be_purchased: bool


class AdminProductOut(ProductOut):
    status: ProductStatusOut
    order_count: int = 0
    cart_count: int = 0


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class ProductListResponse(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class AdminProductListResponse(BaseModel):
    products: List[AdminProductOut]
    pagination: Pagination


# --------------------------------------------------------------------
# Ostoskori
# --------------------------------------------------------------------


class CartAddIn(BaseModel):
    product_id: Optional[int] = None
    variant_id: Optional[int] = None
    quantity: int = 1


class CartUpdateIn(BaseModel):
    quantity: int


class CartLineOut(BaseModel):
    id: int
    product_id: int
    variant_id: Optional[int] = None
    name: str
    variant_name: Optional[str] = None
    quantity: int
    images: List[str] = []
    has_variants: bool
    booking_amount_per_unit: str
    total_booking_amount: str
    unit_price: str


class CartOut(BaseModel):
    items: List[CartLineOut]
    total_items: int
    total_booking_amount: str
    formatted_total: str
    currency: str


# --------------------------------------------------------------------
# Tilaukset
# --------------------------------------------------------------------


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    hall: Optional[str] = None
    roll: Optional[str] = None


class OrderItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    variant_id: Optional[int] = None
    name: str
    variant_name: Optional[str] = None
    quantity: int
    booking_price: str
    unit_price: str


class OrderOut(BaseModel):
    id: int
    user_id: str
    status: str
    total_quantity: int
    booking_amount: str
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]
    customer: Optional[CustomerOut] = None


class OrderListResponse(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class OrderActionIn(BaseModel):
    action: str


class OrderStatusIn(BaseModel):
    status: str


class OrderUpdateResponse(BaseModel):
    success: bool
    order: OrderOut
    message: str


# --------------------------------------------------------------------
# Admin: tuotteiden ylläpito
# --------------------------------------------------------------------


class PriceRangeIn(BaseModel):
    min_quantity: int
    max_quantity: Optional[int] = None
    price_per_unit: Decimal


class VariantIn(BaseModel):
    id: Optional[int] = None
    name: str
    booking_amount: Decimal
    images: List[str] = []
    is_active: bool = True
    price_ranges: List[PriceRangeIn] = []


class ProductIn(BaseModel):
    name: str
    description: Optional[str] = None
    has_variants: bool = False
    images: List[str] = []
    booking_amount: Optional[Decimal] = None
    is_active: bool = True
    price_ranges: List[PriceRangeIn] = []
    variants: List[VariantIn] = []


class ProductStatusIn(BaseModel):
    is_active: bool
