"""Data access helpers for loading the COW movement sheet."""

from __future__ import annotations

import csv
import functools
import json
import logging
import math
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, TextIO

from openpyxl import load_workbook

from .warehouse_names import WAREHOUSE_CANONICAL_NAMES, canonical_location_name, location_id_for
from ..config import settings
from ..models.domain import Dataset, Location, Movement, MovementType
from ..services.geospatial import DEFAULT_REGION, region_from_coordinates

KNOWN_REGIONS = ("CENTRAL", "WEST", "EAST", "SOUTH", "NORTH")
EBU_ROYAL_VALUES = ("ROYAL", "EBU")

_SPREADSHEET_DATE_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d-%b-%Y %H:%M",
    "%d-%b-%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)

# Keyword hints used when a sheet carries a province or city instead of a region code.
_REGION_KEYWORDS = {
    "WEST": ("WEST", "MAKKAH", "MECCA", "JEDDAH", "MADINAH", "MEDINA", "TAIF"),
    "EAST": ("EAST", "DAMMAM", "KHOBAR", "AHSA", "JUBAIL"),
    "SOUTH": ("SOUTH", "ASIR", "ABHA", "JAZAN", "JIZAN", "NAJRAN", "BAHA"),
    "NORTH": ("NORTH", "TABUK", "HAIL", "JOUF", "ARAR", "SAKAKA"),
    "CENTRAL": ("CENTRAL", "RIYADH", "QASSIM", "BURAIDAH"),
}


def _text(row: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_distance(value: Any) -> float:
    """Source distance in km; blanks and garbage count as zero."""
    number = _coerce_float(value)
    return number if number is not None else 0.0


def parse_sheet_datetime(value: Any) -> Optional[datetime]:
    """Parse a sheet timestamp into an aware UTC datetime.

    Accepts datetimes handed over by openpyxl, ISO-8601 strings and the usual
    spreadsheet renderings. Blank or unreadable values give None, which keeps
    them out of every idle, stay and duration calculation.
    """

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    text = str(value or "").strip()
    if not text:
        return None

    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _SPREADSHEET_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logging.warning(f"Unparseable movement date '{text}', treating it as unknown")
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def parse_movement_type(value: Any) -> Optional[MovementType]:
    text = str(value or "").strip()
    if not text:
        return None
    lowered = text.lower()
    if "full" in lowered:
        return "Full"
    if "half" in lowered:
        return "Half"
    return "Zero"


def parse_ebu_royal(value: Any) -> str:
    text = str(value or "").strip().upper()
    return text if text in EBU_ROYAL_VALUES else "NON EBU"


def normalize_region(value: Any, latitude: Optional[float], longitude: Optional[float]) -> str:
    """Upper-case a region label, inferring it from coordinates when blank or unknown."""

    text = str(value or "").strip().upper()
    if text in KNOWN_REGIONS:
        return text
    if text:
        for region, keywords in _REGION_KEYWORDS.items():
            if any(keyword in text for keyword in keywords):
                return region
    return region_from_coordinates(latitude, longitude)


def build_dataset(
    rows: Iterable[Mapping[str, Any]],
    canonical_names: Mapping[str, str] = WAREHOUSE_CANONICAL_NAMES,
) -> Dataset:
    """Map raw sheet rows onto movements plus the location directory they imply."""

    locations: dict[str, Location] = {}
    movements: list[Movement] = []
    skipped = 0

    def register(name: str, region_raw: str, lat: Optional[float], lon: Optional[float],
                 sub_location: Optional[str], owner: str) -> str:
        location_id = location_id_for(name)
        region = normalize_region(region_raw, lat, lon)
        existing = locations.get(location_id)
        if existing is None:
            locations[location_id] = Location(
                location_id=location_id,
                location_name=name,
                region=region,
                location_type="Warehouse" if "WH" in name.upper() else "Site",
                latitude=lat or 0.0,
                longitude=lon or 0.0,
                owner=owner,
                sub_location=sub_location,
            )
        elif region != DEFAULT_REGION:
            existing.region = region
        return location_id

    for index, row in enumerate(rows):
        cow_id = _text(row, "cows_id", "cow_id", "COW_ID")
        from_raw = _text(row, "from_location", "From_Location")
        to_raw = _text(row, "to_location", "to_locatio", "To_Location")
        if not cow_id or not from_raw or not to_raw:
            skipped += 1
            continue

        owner = _text(row, "owner", "vehicle_make") or "Unknown"
        from_sub = _text(row, "from_sub_location") or None
        to_sub = _text(row, "to_sub_location") or None
        from_id = register(
            canonical_location_name(from_raw, canonical_names),
            _text(row, "region_from"),
            _coerce_float(row.get("from_latitude")),
            _coerce_float(row.get("from_longitude")),
            from_sub,
            owner,
        )
        to_id = register(
            canonical_location_name(to_raw, canonical_names),
            _text(row, "region_to"),
            _coerce_float(row.get("to_latitude")),
            _coerce_float(row.get("to_longitude")),
            to_sub,
            owner,
        )

        movements.append(
            Movement(
                sn=index + 1,
                cow_id=cow_id,
                from_location_id=from_id,
                to_location_id=to_id,
                moved_datetime=parse_sheet_datetime(row.get("moved_date_time")),
                reached_datetime=parse_sheet_datetime(row.get("reached_date_time")),
                movement_type=parse_movement_type(row.get("movement_type")),
                distance_km=parse_distance(row.get("distance")),
                top_event=_text(row, "top_events", "top_event") or None,
                from_sub_location=from_sub,
                to_sub_location=to_sub,
                vendor=_text(row, "vendor") or None,
                ebu_royal_category=parse_ebu_royal(row.get("ebu_royal")),
            )
        )

    if skipped:
        logging.warning(f"Skipped {skipped} movement rows without a COW id or endpoints")
    logging.info(f"Loaded {len(movements)} movements across {len(locations)} locations")
    return Dataset(movements=tuple(movements), locations=tuple(locations.values()))


def read_csv_rows(handle: TextIO) -> list[dict[str, Any]]:
    reader = csv.DictReader(handle)
    if not reader.fieldnames:
        raise ValueError("Movement sheet is missing a header row.")
    return [{(key or "").strip(): value for key, value in row.items()} for row in reader]


def _read_json_rows(path: Path) -> list[dict[str, Any]]:
    with path.open(mode="r", encoding="utf-8-sig") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict):
        payload = payload.get("movements", payload.get("rows"))
    if not isinstance(payload, list):
        raise ValueError(f"Movement snapshot '{path}' must hold a list of row objects.")
    return [row for row in payload if isinstance(row, dict)]


def _read_xlsx_rows(path: Path) -> list[dict[str, Any]]:
    wb = load_workbook(path, data_only=True, read_only=True)
    try:
        sheet = wb.active
        rows = sheet.iter_rows(min_row=1, values_only=True)
        header = next(rows, None)
        if header is None:
            raise ValueError(f"Movement workbook '{path}' is empty.")
        names = [str(cell).strip() if cell is not None else "" for cell in header]
        return [dict(zip(names, row)) for row in rows if any(cell is not None for cell in row)]
    finally:
        wb.close()


def read_movement_rows(path: Path) -> list[dict[str, Any]]:
    """Read raw rows from a CSV export, JSON snapshot or xlsx workbook."""

    if not path.exists():
        raise FileNotFoundError(f"Movement file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
            return read_csv_rows(handle)
    if suffix == ".json":
        return _read_json_rows(path)
    if suffix in {".xlsx", ".xlsm"}:
        return _read_xlsx_rows(path)
    raise ValueError(f"Unsupported movement file type '{suffix}' ({path.name})")


@functools.lru_cache(maxsize=1)
def load_dataset(source: Optional[Path] = None) -> Dataset:
    """Load the active movement dataset.

    A configured sheet URL wins over the local file unless ``source`` is given.
    """

    if source is None and settings.sheet_csv_url:
        from .sheets_client import fetch_sheet_dataset

        return fetch_sheet_dataset(settings.sheet_csv_url)

    path = source or settings.movements_file
    return build_dataset(read_movement_rows(path))


def set_active_movements_file(path: Path) -> None:
    """Update the active movement file and clear the cached dataset."""

    settings.movements_file = path
    load_dataset.cache_clear()


def reload_dataset() -> Dataset:
    """Drop the cached dataset and load it again from the active source."""

    load_dataset.cache_clear()
    dataset = load_dataset()
    logging.info(f"Reloaded movement dataset: {len(dataset.movements)} movements")
    return dataset
