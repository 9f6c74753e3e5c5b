# -*- coding: utf-8 -*-
# Configuration
# Copyright (c) 2025 Jan Sarivuo

"""
Sovelluksen konfiguraatio.

Arvot luetaan ympäristömuuttujista; paikallisessa kehityksessä ne voi
antaa projektin juuressa olevassa .env-tiedostossa.
"""

import os
import logging
from pathlib import Path

from dotenv import load_dotenv

# Määritetään projektin juurihakemisto
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(ENV_PATH)

# Tietokanta
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./groupbuy.db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "0") == "1"

# Loggaus
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# CORS (sallitut front-endit pilkulla eroteltuna)
ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

# Tuotelistauksen välimuisti
CATALOG_CACHE_TTL = int(os.getenv("CATALOG_CACHE_TTL", "60"))
CATALOG_CACHE_SIZE = int(os.getenv("CATALOG_CACHE_SIZE", "1000"))

# Hintojen esitys
CURRENCY = os.getenv("CURRENCY", "INR")
PRICE_DECIMALS = int(os.getenv("PRICE_DECIMALS", "2"))

# Mitä hinnoittelu näyttää variantilliselle tuotteelle, jolta ei ole valittu
# varianttia:
#   none         -> ei hintaa (tyhjät portaat, kysyntä 0)
#   first_active -> esikatselu ensimmäisellä aktiivisella variantilla
POLICY_NONE = "none"
POLICY_FIRST_ACTIVE = "first_active"
VARIANT_POLICIES = (POLICY_NONE, POLICY_FIRST_ACTIVE)

log = logging.getLogger("groupbuy.config")


def get_unselected_variant_policy() -> str:
    policy = (os.getenv("UNSELECTED_VARIANT_POLICY") or POLICY_NONE).strip().lower()
    if policy not in VARIANT_POLICIES:
        log.warning(f"Unknown UNSELECTED_VARIANT_POLICY '{policy}', using '{POLICY_NONE}'")
        return POLICY_NONE
    return policy


UNSELECTED_VARIANT_POLICY = get_unselected_variant_policy()


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Alustaa loggauksen kerran sovelluksen käynnistyessä."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
