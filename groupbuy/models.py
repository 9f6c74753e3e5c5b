# -*- coding: utf-8 -*-
# Database models
# Copyright (c) 2025 Jan Sarivuo

"""
SQLAlchemy ORM -mallit.

Hintaportaat (price_ranges) kuuluvat joko suoraan tuotteelle tai
tuotteen variantille. Ostoskorin ja tilausten rivit viittaavat samalla
tavalla joko tuotteeseen tai varianttiin, ei koskaan molempiin.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from groupbuy.db import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    SALES = "sales"
    USER = "user"


class OrderStatus(str, enum.Enum):
    BOOKED = "BOOKED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Tilat, joiden määrät lasketaan mukaan kysyntälaskuriin
DEMAND_STATUSES = (OrderStatus.BOOKED.value, OrderStatus.DELIVERED.value)


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)   # ulkoisen tunnistuspalvelun id
    name = Column(String(200))
    email = Column(String(200), index=True)
    phone = Column(String(50))
    hall = Column(String(100))
    roll = Column(String(50))                    # opiskelijanumero
    role = Column(String(20), nullable=False, default=Role.USER.value)
    created_at = Column(DateTime, default=utcnow)

    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    images = Column(JSON, default=list)
    booking_amount = Column(Numeric(10, 2))      # NULL, jos tuotteella on variantit
    has_variants = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    variants = relationship(
        "Variant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Variant.id",
    )
    price_ranges = relationship(
        "PriceRange",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="PriceRange.min_quantity",
    )
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan")
    order_items = relationship("OrderItem", back_populates="product")


class Variant(Base):
    __tablename__ = "variants"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    booking_amount = Column(Numeric(10, 2), nullable=False, default=0)
    images = Column(JSON, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    product = relationship("Product", back_populates="variants")
    price_ranges = relationship(
        "PriceRange",
        back_populates="variant",
        cascade="all, delete-orphan",
        order_by="PriceRange.min_quantity",
    )
    cart_items = relationship("CartItem", back_populates="variant", cascade="all, delete-orphan")
    order_items = relationship("OrderItem", back_populates="variant")


class PriceRange(Base):
    __tablename__ = "price_ranges"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True)
    variant_id = Column(Integer, ForeignKey("variants.id", ondelete="CASCADE"), index=True)
    min_quantity = Column(Integer, nullable=False)
    max_quantity = Column(Integer)               # NULL = ylöspäin avoin porras
    price_per_unit = Column(Numeric(10, 2), nullable=False)

    product = relationship("Product", back_populates="price_ranges")
    variant = relationship("Variant", back_populates="price_ranges")


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"))
    variant_id = Column(Integer, ForeignKey("variants.id", ondelete="CASCADE"))
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="cart_items")
    product = relationship("Product", back_populates="cart_items")
    variant = relationship("Variant", back_populates="cart_items")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    total_quantity = Column(Integer, nullable=False, default=0)
    booking_amount = Column(Numeric(12, 2), nullable=False, default=0)
    transaction_id = Column(String(100), index=True)
    status = Column(String(20), nullable=False, default=OrderStatus.BOOKED.value, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="orders")
    order_items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True)
    variant_id = Column(Integer, ForeignKey("variants.id"), index=True)
    quantity = Column(Integer, nullable=False)
    booking_price = Column(Numeric(10, 2), nullable=False)   # varausmaksu / kpl tilaushetkellä
    unit_price = Column(Numeric(10, 2), nullable=False)      # porrashinta / kpl tilaushetkellä

    order = relationship("Order", back_populates="order_items")
    product = relationship("Product", back_populates="order_items")
    variant = relationship("Variant", back_populates="order_items")
