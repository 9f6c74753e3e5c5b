# -*- coding: utf-8 -*-
# Public catalog routes
# Copyright (c) 2025 Jan Sarivuo

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from groupbuy.db import get_db
from groupbuy.products import SORT_OPTIONS, get_public_product, list_public_products
from groupbuy.routes import translate_errors
from groupbuy.schemas import ProductListResponse, ProductOut

router = APIRouter(prefix="/products", tags=["catalog"])


@router.get("", response_model=ProductListResponse)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: str = Query("", description="Haku nimestä ja kuvauksesta"),
    sort: str = Query("newest", description="newest | price_low | price_high"),
    db: Session = Depends(get_db),
) -> ProductListResponse:
    """
    Aktiiviset tuotteet hintatietoineen (nykyinen hinta, seuraava porras,
    alin mahdollinen hinta). Tulokset pidetään hetken välimuistissa.
    """
    if sort not in SORT_OPTIONS:
        sort = "newest"
    with translate_errors("fetching products"):
        return list_public_products(db, page=page, limit=limit, search=search.strip(), sort=sort)


@router.get("/{product_id}", response_model=ProductOut)
def product_detail(
    product_id: int,
    variant_id: Optional[int] = Query(None, description="Valittu variantti"),
    db: Session = Depends(get_db),
) -> ProductOut:
    with translate_errors("fetching product"):
        return get_public_product(db, product_id, variant_id)
