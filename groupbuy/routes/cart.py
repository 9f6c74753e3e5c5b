# -*- coding: utf-8 -*-
# Cart routes
# Copyright (c) 2025 Jan Sarivuo

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from groupbuy import cart as cart_service
from groupbuy.auth import Actor, get_current_actor
from groupbuy.db import get_db
from groupbuy.routes import translate_errors
from groupbuy.schemas import CartAddIn, CartOut, CartUpdateIn

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)) -> CartOut:
    with translate_errors("fetching cart"):
        return cart_service.get_cart(db, actor)


@router.post("", response_model=CartOut)
def add_to_cart(
    payload: CartAddIn,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> CartOut:
    with translate_errors("adding to cart"):
        return cart_service.add_to_cart(db, actor, payload)


@router.put("/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateIn,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> CartOut:
    with translate_errors("updating cart item"):
        return cart_service.update_cart_item(db, actor, item_id, payload.quantity)


@router.delete("/{item_id}", response_model=CartOut)
def remove_cart_item(
    item_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> CartOut:
    with translate_errors("removing cart item"):
        return cart_service.remove_cart_item(db, actor, item_id)
