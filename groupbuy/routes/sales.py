# -*- coding: utf-8 -*-
# Sales routes
# Copyright (c) 2025 Jan Sarivuo

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from groupbuy import orders as order_service
from groupbuy.auth import Actor, require_role
from groupbuy.db import get_db
from groupbuy.models import Role
from groupbuy.routes import translate_errors
from groupbuy.schemas import OrderListResponse, OrderOut, OrderStatusIn, OrderUpdateResponse

router = APIRouter(prefix="/sales/orders", tags=["sales"])

staff_only = require_role(Role.SALES.value, Role.ADMIN.value)


@router.get("", response_model=OrderListResponse)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    status: Optional[str] = Query(None, description="BOOKED | DELIVERED | CANCELLED | REFUNDED"),
    search: str = Query("", description="Maksutunnus, nimi, sähköposti tai opiskelijanumero"),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
) -> OrderListResponse:
    with translate_errors("fetching sales orders"):
        return order_service.list_orders(
            db,
            page=page,
            limit=limit,
            status=status,
            search=search.strip(),
            sort_by=sort_by,
            sort_order=sort_order,
        )


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
) -> OrderOut:
    with translate_errors("fetching sales order"):
        return order_service.get_order(db, order_id)


@router.put("/{order_id}", response_model=OrderUpdateResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    actor: Actor = Depends(staff_only),
    db: Session = Depends(get_db),
) -> OrderUpdateResponse:
    with translate_errors("updating order status"):
        order = order_service.update_order_status(db, actor, order_id, payload.status)
    return OrderUpdateResponse(success=True, order=order, message="Order status updated successfully")
