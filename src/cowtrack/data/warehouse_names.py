"""Canonical warehouse names for spelling variants found in the movement sheet."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

# Lower-cased, whitespace-collapsed variant -> canonical display name.
WAREHOUSE_CANONICAL_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "stc jeddah wh": "stc Jeddah WH",
        "stc al ula wh": "stc Al Ula WH",
        "stc sharma wh": "stc Sharma WH",
        "stc madinah wh": "stc Madinah WH",
        "stc madina wh": "stc Madinah WH",
        "stc abha wh": "stc Abha WH",
        "stc al kharaj wh": "stc Al Kharaj WH",
        "stc jizan wh": "stc Jizan WH",
        "stc arar wh": "stc Arar WH",
        "stc umluj wh": "stc Umluj WH",
        "stc sakaka wh": "stc Sakaka WH",
        "stc tabouk wh": "stc Tabouk WH",
        "stc taboulk wh": "stc Tabouk WH",
        "stc buraidah wh": "stc Buraidah WH",
        "stc burida wh": "stc Buraidah WH",
        "stc riyadh exit 18 wh": "stc Riyadh Exit 18 WH",
        "aces makkah wh": "ACES Makkah WH",
        "aces muzahmiya wh": "ACES Muzahmiya WH",
        "aces dammam wh": "ACES Dammam WH",
        "madaf wh": "Madaf WH",
        "madaf huraymila wh": "Madaf WH",
        "hoi al kharaj wh": "HOI Al Kharaj WH",
    }
)

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def canonical_location_name(name: str, canonical_names: Mapping[str, str] = WAREHOUSE_CANONICAL_NAMES) -> str:
    """Collapse whitespace and map known warehouse spelling variants to one name."""

    normalized = _WHITESPACE.sub(" ", (name or "").strip())
    return canonical_names.get(normalized.lower(), normalized)


def location_id_for(name: str) -> str:
    """Stable location id derived from a canonical name, e.g. ``LOC-stc-jeddah-wh``."""

    return f"LOC-{_NON_ALNUM.sub('-', name.lower())}"
