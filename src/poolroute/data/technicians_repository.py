"""Technician home locations with database-first approach, falling back to an Excel file."""

from __future__ import annotations

import functools
import logging
from pathlib import Path

from openpyxl import load_workbook

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Technician


def _load_technicians_from_database() -> tuple[Technician, ...] | None:
    """Load technicians with a home location. Returns None if database not available or empty."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    # full_name, home_latitude and home_longitude are added by
    # supabase/migrations/20250401000000_technician_home_locations.sql.
    try:
        response = supabase.table("technicians").select("id, full_name, home_latitude, home_longitude").execute()
    except Exception as e:
        logging.warning(f"Technician query failed, falling back to file: {e}")
        return None

    technicians: list[Technician] = []
    for row in response.data or []:
        if row.get("home_latitude") is None or row.get("home_longitude") is None:
            continue
        try:
            technicians.append(
                Technician(
                    id=str(row["id"]),
                    latitude=float(row["home_latitude"]),
                    longitude=float(row["home_longitude"]),
                    name=row.get("full_name"),
                )
            )
        except (KeyError, ValueError, TypeError) as e:
            logging.warning(f"Skipping invalid technician row: {e}")
    return tuple(technicians) if technicians else None


def _load_technicians_from_file(source: Path | None = None) -> tuple[Technician, ...]:
    """Load technician locations from the Excel workbook."""
    workbook_path = source or settings.technician_locations_file
    if not workbook_path.exists():
        raise FileNotFoundError(f"Technician workbook not found: {workbook_path}")

    wb = load_workbook(workbook_path, data_only=True, read_only=True)
    sheet = wb.active
    rows = sheet.iter_rows(min_row=1, values_only=True)
    header = next(rows, None)
    if header is None:
        raise ValueError(f"Technician workbook '{workbook_path}' is empty.")

    header_map = {name: idx for idx, name in enumerate(header)}
    missing_columns = {"TechnicianId", "Latitude", "Longitude"} - set(header_map)
    if missing_columns:
        raise ValueError(f"Technician workbook missing columns: {', '.join(sorted(missing_columns))}")

    name_idx = header_map.get("Name")
    technicians: list[Technician] = []
    for row in rows:
        tech_id = row[header_map["TechnicianId"]]
        lat_value = row[header_map["Latitude"]]
        lon_value = row[header_map["Longitude"]]
        if not tech_id or lat_value is None or lon_value is None:
            continue
        technicians.append(
            Technician(
                id=str(tech_id).strip(),
                latitude=float(lat_value),
                longitude=float(lon_value),
                name=str(row[name_idx]).strip() if name_idx is not None and row[name_idx] else None,
            )
        )
    wb.close()
    return tuple(technicians)


@functools.lru_cache(maxsize=1)
def get_technicians(source: Path | None = None) -> tuple[Technician, ...]:
    """Get technicians from database first, fall back to the workbook if needed."""
    db_technicians = _load_technicians_from_database()
    if db_technicians:
        return db_technicians

    try:
        return _load_technicians_from_file(source)
    except FileNotFoundError as e:
        logging.warning(f"No technician locations available: {e}")
        return tuple()


def resolve_technician(technician_id: str | None) -> Technician | None:
    """Return the technician with a known home location, if any."""
    if not technician_id:
        return None
    lookup = {technician.id: technician for technician in get_technicians()}
    return lookup.get(str(technician_id))
