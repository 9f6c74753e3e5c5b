# -*- coding: utf-8 -*-
# Admin routes
# Copyright (c) 2025 Jan Sarivuo

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from groupbuy import admin as admin_service
from groupbuy.auth import Actor, require_role
from groupbuy.db import get_db
from groupbuy.models import Role
from groupbuy.routes import translate_errors
from groupbuy.schemas import (
    AdminProductListResponse,
    AdminProductOut,
    ProductIn,
    ProductStatusIn,
)

router = APIRouter(prefix="/admin/products", tags=["admin"])

admin_only = require_role(Role.ADMIN.value)


@router.get("", response_model=AdminProductListResponse)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query(""),
    status: str = Query("all", description="all | active | inactive"),
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
) -> AdminProductListResponse:
    with translate_errors("fetching admin products"):
        return admin_service.list_admin_products(
            db, page=page, limit=limit, search=search.strip(), status=status
        )


@router.post("", response_model=AdminProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
) -> AdminProductOut:
    with translate_errors("creating product"):
        return admin_service.create_product(db, payload)


@router.get("/{product_id}", response_model=AdminProductOut)
def get_product(
    product_id: int,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
) -> AdminProductOut:
    with translate_errors("fetching admin product"):
        return admin_service.get_admin_product(db, product_id)


@router.put("/{product_id}", response_model=AdminProductOut)
def update_product(
    product_id: int,
    payload: ProductIn,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
) -> AdminProductOut:
    with translate_errors("updating product"):
        return admin_service.update_product(db, product_id, payload)


@router.patch("/{product_id}/status", response_model=AdminProductOut)
def set_product_status(
    product_id: int,
    payload: ProductStatusIn,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
) -> AdminProductOut:
    with translate_errors("updating product status"):
        return admin_service.set_product_status(db, product_id, payload.is_active)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    actor: Actor = Depends(admin_only),
    db: Session = Depends(get_db),
) -> dict:
    with translate_errors("deleting product"):
        admin_service.delete_product(db, product_id)
    return {"message": "Product deleted"}
