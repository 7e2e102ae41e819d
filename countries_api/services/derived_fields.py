"""
Calcul des champs dérivés / Derived field calculation.
Code devise, taux de change et PIB estimé pour un pays.
Currency code, exchange rate and estimated GDP for one country.
"""

import math
import random
from typing import Any, Mapping, NamedTuple

MULTIPLIER_MIN = 1000
MULTIPLIER_MAX = 2000


class DerivedFields(NamedTuple):
    currency_code: str | None
    exchange_rate: float | None
    estimated_gdp: float | None


def _to_number(value: Any) -> float | None:
    """Nombre fini ou None / Finite number or None (bools are not numbers)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_population(raw: Any) -> int:
    """
    Population entière non négative / Non-negative integer population.
    Valeur absente, non numérique ou négative -> 0.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw if raw > 0 else 0
    number = _to_number(raw)
    if number is None or number < 0:
        return 0
    return int(number)


def first_currency_code(currencies: Any) -> str | None:
    """Code de la première devise uniquement / Code of the first currency entry only."""
    if not isinstance(currencies, list) or not currencies:
        return None
    entry = currencies[0]
    if not isinstance(entry, Mapping):
        return None
    code = entry.get("code")
    if not isinstance(code, str) or not code.strip():
        return None
    return code.strip()


def resolve_rate(code: str, rates: Mapping[str, Any]) -> float | None:
    """Taux fini et positif, sinon None / Finite positive rate, otherwise None."""
    if code not in rates:
        return None
    rate = _to_number(rates[code])
    if rate is None or rate <= 0:
        return None
    return rate


def compute_derived_fields(
    population: Any,
    currencies: Any,
    rates: Mapping[str, Any],
    rng: random.Random | None = None,
) -> DerivedFields:
    """
    Appliquer la table de règles / Apply the derivation policy table.

    - pas de devise (ou premier code absent) -> (None, None, 0)
    - devise inconnue des taux / rate unknown -> (code, None, None)
    - taux r résolu / rate r resolved -> (code, r, round(population * m / r, 2)),
      m tiré uniformément dans [1000, 2000] à chaque appel / m drawn uniformly on each call
    """
    code = first_currency_code(currencies)
    if code is None:
        return DerivedFields(None, None, 0.0)

    rate = resolve_rate(code, rates)
    if rate is None:
        return DerivedFields(code, None, None)

    multiplier = (rng or random).randint(MULTIPLIER_MIN, MULTIPLIER_MAX)
    estimated_gdp = round(coerce_population(population) * multiplier / rate, 2)
    return DerivedFields(code, rate, estimated_gdp)
