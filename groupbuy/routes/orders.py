# -*- coding: utf-8 -*-
# Order routes (customer)
# Copyright (c) 2025 Jan Sarivuo

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from groupbuy import orders as order_service
from groupbuy.auth import Actor, get_current_actor
from groupbuy.db import get_db
from groupbuy.routes import translate_errors
from groupbuy.schemas import OrderActionIn, OrderOut, OrderUpdateResponse

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderOut, status_code=201)
def create_order(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)) -> OrderOut:
    """
    Luo tilauksen ostoskorista. Riveille tallennetaan varausmaksu ja
    porrashinta tilaushetken mukaan.
    """
    with translate_errors("creating order"):
        return order_service.create_order_from_cart(db, actor)


@router.get("", response_model=List[OrderOut])
def list_orders(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)) -> List[OrderOut]:
    with translate_errors("fetching orders"):
        return order_service.list_user_orders(db, actor)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> OrderOut:
    with translate_errors("fetching order"):
        return order_service.get_user_order(db, actor, order_id)


@router.put("/{order_id}", response_model=OrderUpdateResponse)
def update_order(
    order_id: int,
    payload: OrderActionIn,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> OrderUpdateResponse:
    with translate_errors("updating order"):
        order = order_service.apply_user_action(db, actor, order_id, payload.action)
    return OrderUpdateResponse(success=True, order=order, message="Order cancelled successfully")
