# -*- coding: utf-8 -*-
# Business Logic: Bracket Pricing
# Copyright (c) 2025 Jan Sarivuo

"""
Keskitetty porrashinnoittelu (Business Logic Layer).

Ryhmäostossa tuotteen yksikköhinta riippuu siitä, kuinka paljon tuotetta
on jo tilattu yhteensä (kysyntälaskuri). Hintaportaat ovat muotoa
{minQuantity, maxQuantity?, pricePerUnit}.

Kaikki näkymät (listaus, tuotesivu, ostoskori, tilauksen luonti) laskevat
hinnat tämän moduulin kautta, jotta:
1. Sama porras valitaan joka paikassa samalla säännöllä.
2. Virheellinen hintadata ei koskaan kaada sivua: tuloksena on aina jokin
   määritelty arvo (0 tai None), ei poikkeusta.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Iterable, List, Optional

ZERO = Decimal("0")

# Näytettävän luvun kokonaisosan suurin numeromäärä
MAX_DISPLAY_DIGITS = 30

# Kenttien nimet: JSON-data tulee camelCase-muodossa, ORM/pydantic snake_case.
_FIELD_ALIASES = {
    "min_quantity": ("min_quantity", "minQuantity"),
    "max_quantity": ("max_quantity", "maxQuantity"),
    "price_per_unit": ("price_per_unit", "pricePerUnit"),
}


def safe_number(value: Any) -> Decimal:
    """
    Muuntaa arvon Decimaliksi. Kaikki mikä ei ole järkevä luku -> 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        num = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    if not num.is_finite():
        return ZERO
    return num


def safe_to_fixed(value: Any, decimals: int = 2) -> str:
    """
    Muotoilee hinnan näyttöä varten (oletuksena 2 desimaalia).

    Järjettömän suuri luku näytetään nollana ("ei tiedossa"), jotta
    muotoilu ei koskaan kaada näkymää.
    """
    quantum = Decimal(1).scaleb(-decimals) if decimals > 0 else Decimal(1)
    num = safe_number(value)
    if num.adjusted() > MAX_DISPLAY_DIGITS:
        num = ZERO
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, num.adjusted() + decimals + 2)
        return str(num.quantize(quantum, rounding=ROUND_HALF_UP))


def bracket_field(bracket: Any, name: str) -> Any:
    """
    Lukee porrastiedon kentän riippumatta siitä, onko porras dict,
    pydantic-malli vai SQLAlchemy-rivi.
    """
    for key in _FIELD_ALIASES[name]:
        if isinstance(bracket, dict):
            if key in bracket:
                return bracket[key]
        elif hasattr(bracket, key):
            return getattr(bracket, key, None)
    return None


def _min_quantity(bracket: Any) -> Decimal:
    return safe_number(bracket_field(bracket, "min_quantity"))


def _max_quantity(bracket: Any) -> Optional[Decimal]:
    raw = bracket_field(bracket, "max_quantity")
    # Tyhjä tai nolla yläraja = porras on ylöspäin avoin
    if raw is None or raw == "" or raw == 0:
        return None
    return safe_number(raw)


def _price(bracket: Any) -> Decimal:
    return max(safe_number(bracket_field(bracket, "price_per_unit")), ZERO)


def sort_brackets(brackets: Optional[Iterable[Any]]) -> List[Any]:
    """
    Järjestää portaat nousevasti minQuantityn mukaan. Jos kahdella portaalla
    on sama alaraja, halvempi hinta tulee ensin. Syötettä ei muokata.
    """
    if not brackets:
        return []
    return sorted(brackets, key=lambda b: (_min_quantity(b), _price(b)))


@dataclass(frozen=True)
class PriceQuote:
    """Näyttökerroksen tarvitsemat hintatiedot yhdellä kutsulla."""

    current_price: Decimal
    next_bracket: Optional[Any]
    floor_price: Decimal
    demand: Decimal
    units_to_next: Optional[Decimal] = None

    @property
    def next_price(self) -> Optional[Decimal]:
        if self.next_bracket is None:
            return None
        return _price(self.next_bracket)

    @property
    def next_min_quantity(self) -> Optional[Decimal]:
        if self.next_bracket is None:
            return None
        return _min_quantity(self.next_bracket)


class PricingEngine:
    """
    Porrashinnoittelun puhtaat funktiot. Ei tilaa, ei I/O:ta.
    """

    @staticmethod
    def current_price(brackets: Optional[Iterable[Any]], demand: Any) -> Decimal:
        """
        Palauttaa voimassa olevan yksikköhinnan kertyneellä kysynnällä.

        - Ei portaita -> 0 ("hintaa ei tiedossa", ei "ilmainen").
        - Kysyntä < 1 -> alimman portaan hinta.
        - Muuten ensimmäinen porras, jonka väliin kysyntä osuu.
        - Jos mikään porras ei osu (aukko tai yli kaikkien ylärajojen),
          käytetään ylimmän portaan hintaa.
        """
        ordered = sort_brackets(brackets)
        if not ordered:
            return ZERO

        total = safe_number(demand)
        if total < 1:
            return _price(ordered[0])

        for bracket in ordered:
            upper = _max_quantity(bracket)
            if total >= _min_quantity(bracket) and (upper is None or total <= upper):
                return _price(bracket)

        return _price(ordered[-1])

    @staticmethod
    def next_bracket(brackets: Optional[Iterable[Any]], demand: Any) -> Optional[Any]:
        """
        Seuraava porras: pienin minQuantity, joka on aidosti suurempi kuin
        nykyinen kysyntä. None, jos ollaan jo ylimmällä portaalla.
        """
        total = max(safe_number(demand), ZERO)
        for bracket in sort_brackets(brackets):
            if _min_quantity(bracket) > total:
                return bracket
        return None

    @staticmethod
    def floor_price(brackets: Optional[Iterable[Any]]) -> Decimal:
        """Halvin mahdollinen hinta. Portaiden ei oleteta laskevan."""
        prices = [_price(b) for b in brackets or []]
        if not prices:
            return ZERO
        return min(prices)

    @staticmethod
    def quote(brackets: Optional[Iterable[Any]], demand: Any) -> PriceQuote:
        ordered = sort_brackets(brackets)
        total = max(safe_number(demand), ZERO)
        upcoming = PricingEngine.next_bracket(ordered, total)
        units_to_next = None
        if upcoming is not None:
            units_to_next = _min_quantity(upcoming) - total

        return PriceQuote(
            current_price=PricingEngine.current_price(ordered, total),
            next_bracket=upcoming,
            floor_price=PricingEngine.floor_price(ordered),
            demand=total,
            units_to_next=units_to_next,
        )


# Lyhyet aliakset kutsupaikoille
current_price = PricingEngine.current_price
next_bracket = PricingEngine.next_bracket
floor_price = PricingEngine.floor_price
