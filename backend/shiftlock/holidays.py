"""
Jours fériés (France métropolitaine).

Source : calendrier.api.gouv.fr (un JSON par année, {"AAAA-MM-JJ": "libellé"}).
Si l'API est désactivée ou injoignable, un calendrier local est utilisé
(dates fixes + fêtes mobiles calculées depuis Pâques).
"""

import asyncio
import logging
import time
from datetime import date, timedelta
from typing import Optional

import httpx

from shiftlock.core.config import settings

logger = logging.getLogger(__name__)

# --- Calendrier local (fallback) ---

_FIXED_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "1er janvier",
    (5, 1): "1er mai",
    (5, 8): "8 mai",
    (7, 14): "14 juillet",
    (8, 15): "Assomption",
    (11, 1): "Toussaint",
    (11, 11): "11 novembre",
    (12, 25): "Jour de Noël",
}

# Décalage en jours depuis le dimanche de Pâques
_EASTER_OFFSETS: dict[int, str] = {
    1: "Lundi de Pâques",
    39: "Ascension",
    50: "Lundi de Pentecôte",
}


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def _local_holidays(year: int) -> dict[date, str]:
    """Jours fériés d'une année par le calendrier intégré (sans API)."""
    out = {date(year, m, d): name for (m, d), name in _FIXED_HOLIDAYS.items()}
    easter = easter_sunday(year)
    for offset, name in _EASTER_OFFSETS.items():
        out[easter + timedelta(days=offset)] = name
    return out


# --- Cache et requête à l'API ---

_api_cache: dict[int, dict[date, str]] = {}

# Année → instant (time.monotonic) du dernier échec ; pas de nouvel essai avant _RETRY_AFTER_SEC
_failed_at: dict[int, float] = {}
_RETRY_AFTER_SEC = 600.0


def _year_url(year: int) -> str:
    return f"{settings.PUBLIC_HOLIDAYS_API_URL.rstrip('/')}/{year}.json"


def _recently_failed(year: int) -> bool:
    failed = _failed_at.get(year)
    return failed is not None and time.monotonic() - failed < _RETRY_AFTER_SEC


def _parse_year_response(payload: object, year: int) -> Optional[dict[date, str]]:
    """
    Lit la réponse JSON de l'API ({"2026-01-01": "1er janvier", ...}).
    Retourne None si le format est inattendu ou ne concerne pas l'année.
    """
    if not isinstance(payload, dict) or not payload:
        return None
    result: dict[date, str] = {}
    for key, name in payload.items():
        try:
            d = date.fromisoformat(str(key))
        except ValueError:
            return None
        if d.year == year:
            result[d] = str(name)
    return result or None


def _store(year: int, parsed: Optional[dict[date, str]]) -> bool:
    if parsed is None:
        _failed_at[year] = time.monotonic()
        return False
    _api_cache[year] = parsed
    _failed_at.pop(year, None)
    return True


def _get_year(year: int) -> Optional[dict[date, str]]:
    """
    Cache par année ; en cas d'absence, requête synchrone.
    Hors de la boucle asyncio uniquement : les routes appellent d'abord
    ``warm_cache_for_years``.
    """
    if year in _api_cache:
        return _api_cache[year]
    if _recently_failed(year):
        return None
    try:
        with httpx.Client(
            timeout=settings.PUBLIC_HOLIDAYS_API_TIMEOUT_SEC,
            follow_redirects=True,
        ) as client:
            resp = client.get(_year_url(year))
            resp.raise_for_status()
            payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("calendrier.api.gouv.fr year=%d request failed: %s", year, exc)
        _store(year, None)
        return None

    parsed = _parse_year_response(payload, year)
    _store(year, parsed)
    return parsed


def public_holidays(year: int) -> dict[date, str]:
    """Jours fériés de l'année, {date: libellé}."""
    if not settings.PUBLIC_HOLIDAYS_API_ENABLED:
        return _local_holidays(year)
    return _get_year(year) or _local_holidays(year)


def is_public_holiday(d: date) -> bool:
    return d in public_holidays(d.year)


def holidays_between(start: date, end: date) -> frozenset[date]:
    """Jours fériés compris dans [start, end]."""
    if end < start:
        return frozenset()
    found: set[date] = set()
    for year in range(start.year, end.year + 1):
        found.update(d for d in public_holidays(year) if start <= d <= end)
    return frozenset(found)


async def _fetch_year_async(year: int) -> bool:
    """Charge une année dans le cache. Retourne True en cas de succès."""
    try:
        async with httpx.AsyncClient(
            timeout=settings.PUBLIC_HOLIDAYS_API_TIMEOUT_SEC,
            follow_redirects=True,
        ) as client:
            resp = await client.get(_year_url(year))
            resp.raise_for_status()
            payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("calendrier.api.gouv.fr year=%d request failed: %s", year, exc)
        _store(year, None)
        return False

    parsed = _parse_year_response(payload, year)
    if not _store(year, parsed):
        logger.warning("calendrier.api.gouv.fr year=%d: unexpected response", year)
        return False

    logger.info("Jours fériés en cache: year=%d (%d jours)", year, len(parsed))
    return True


async def warm_cache_for_years(years: list[int]) -> None:
    """
    Charge les années manquantes (en parallèle) avant un calcul.
    Les années en échec récent sont laissées au calendrier local.
    """
    if not settings.PUBLIC_HOLIDAYS_API_ENABLED:
        return

    to_fetch = [y for y in years if y not in _api_cache and not _recently_failed(y)]
    if not to_fetch:
        return

    results = await asyncio.gather(
        *[_fetch_year_async(y) for y in to_fetch],
        return_exceptions=True,
    )
    for y, ok in zip(to_fetch, results):
        if ok is not True:
            logger.warning("Jours fériés NON chargés pour year=%d (calendrier local)", y)


async def warm_cache_for_range(start: date, end: date) -> None:
    if end < start:
        return
    await warm_cache_for_years(list(range(start.year, end.year + 1)))


async def warm_cache_on_startup(years: Optional[list[int]] = None) -> None:
    """
    Précharge les jours fériés au démarrage.
    Par défaut : année précédente, courante et suivante (une période de
    paie de janvier commence en décembre).
    """
    if years is None:
        today = date.today()
        years = [today.year - 1, today.year, today.year + 1]
    await warm_cache_for_years(years)
