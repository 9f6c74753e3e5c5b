# -*- coding: utf-8 -*-
# Group-buying store API (FastAPI)
# Copyright (c) 2025 Jan Sarivuo

"""
Ryhmäostokaupan taustajärjestelmä.

Ominaisuudet:
- Tuotekatalogi porrashinnoittelulla (hinta laskee, kun tilattu määrä kasvaa)
- Ostoskori ja varausmaksulliset tilaukset
- Myynnin tilaushallinta ja tuotteiden ylläpito (admin)

Käynnistys: uvicorn groupbuy.app:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.orm import Session

from groupbuy import __version__, config
from groupbuy.db import get_db, init_db
from groupbuy.routes import admin, cart, catalog, orders, sales

config.setup_logging()
log = logging.getLogger("groupbuy")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info(f"Group-buy API started (variant policy: {config.UNSELECTED_VARIANT_POLICY})")
    yield


app = FastAPI(
    title="Group-buy Store API",
    description="Tiered-price group buying: catalog, cart, booking orders, sales and admin.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(catalog.router)
app.include_router(cart.router)
app.include_router(orders.router)
app.include_router(sales.router)
app.include_router(admin.router)


@app.get("/health", tags=["meta"])
def health_check(db: Session = Depends(get_db)) -> dict:
    """Kevyt endpoint kuormituksenjakajalle ja valvonnalle."""
    try:
        db.execute(select(1))
    except Exception as exc:
        log.error(f"Health check failed: {exc}")
        raise HTTPException(status_code=500, detail="Database unavailable")

    return {"status": "ok", "service": "groupbuy-api"}
