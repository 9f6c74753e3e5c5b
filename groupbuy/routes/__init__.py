# -*- coding: utf-8 -*-
# Copyright (c) 2025 Jan Sarivuo

"""HTTP-reitit. Reitit ovat ohuita: logiikka on palvelumoduuleissa."""

import logging
from contextlib import contextmanager

from fastapi import HTTPException

from groupbuy.errors import StoreError

log = logging.getLogger("groupbuy.api")


@contextmanager
def translate_errors(action: str):
    """
    Muuntaa palvelukerroksen virheet HTTP-vastauksiksi. Odottamattomat
    virheet lokitetaan ja palautetaan yleisenä 500-virheenä.
    """
    try:
        yield
    except HTTPException:
        raise
    except StoreError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail)
    except Exception:
        log.exception(f"Error {action}")
        raise HTTPException(status_code=500, detail="Internal server error")
