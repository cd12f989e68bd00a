# app/services/backup_service.py
"""
JSON backup/restore and Excel import/export of vehicle records.
Imports go through access_service.create_vehicle one row at a time, so
every imported vehicle is owned by the importing user.
"""

from datetime import date, datetime
from io import BytesIO
from typing import Optional

import openpyxl
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.exceptions import InvalidInput, StorageError, VehicleTrackerError
from app.models.share_request import ShareRequest
from app.models.vehicle import Vehicle
from app.models.vehicle_log import FuelLog, MaintenanceLog, MileageLog
from app.models.vehicle_share import VehicleShare
from app.schemas.user import CallingUser
from app.schemas.vehicle import ImportResult, VehicleBackup, VehicleIn, VehicleOut
from app.services import vehicle_repository
from app.services.access_service import create_vehicle
from app.utils.logger import get_logger

logger = get_logger(__name__)

# (header, VehicleOut attribute) in sheet column order
EXPORT_COLUMNS = [
    ("Owner Name", "owner_name"),
    ("ID Number", "id_number"),
    ("Plate Number", "plate_number"),
    ("Vehicle Name", "vehicle_name"),
    ("Model Year", "model_year"),
    ("Category", "category"),
    ("Permit Expiry", "permit_expiry_date"),
    ("On Hold", "is_on_hold"),
    ("Status", "status"),
]

# Header spellings accepted on import, normalised by _header_key()
HEADER_ALIASES = {
    "ownername": "owner_name",
    "idnumber": "id_number",
    "platenumber": "plate_number",
    "vehiclename": "vehicle_name",
    "modelyear": "model_year",
    "category": "category",
    "permitexpiry": "permit_expiry_date",
    "permitexpirydate": "permit_expiry_date",
    "onhold": "is_on_hold",
    "isonhold": "is_on_hold",
}

DEFAULT_CATEGORY = "Private"


# ── JSON backup ──────────────────────────────────────────────────────────────

def export_vehicles(db: Session) -> list[VehicleBackup]:
    return [VehicleBackup.model_validate(v) for v in vehicle_repository.find_all(db)]


def restore_vehicles(db: Session, user: CallingUser, rows) -> int:
    """Replace every vehicle with the given backup rows, in one transaction."""
    if not isinstance(rows, list):
        raise InvalidInput("Invalid data format")
    try:
        parsed = [VehicleBackup.model_validate(row) for row in rows]
    except ValidationError as e:
        raise InvalidInput(f"Invalid backup row: {e.errors()[0]['msg']}") from e
    for index, row in enumerate(parsed, start=1):
        if not row.model_fields_set - {"id", "owner_id"}:
            raise InvalidInput(f"Backup row {index} has no vehicle fields")

    try:
        for model in (MaintenanceLog, FuelLog, MileageLog, VehicleShare, ShareRequest, Vehicle):
            db.query(model).delete(synchronize_session=False)
        for row in parsed:
            fields = row.model_dump(exclude={"id", "owner_id"})
            db.add(Vehicle(owner_id=row.owner_id or user.id, **fields))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Restore failed: {e}")
        raise StorageError("Could not restore vehicles") from e
    commit_or_raise(db, "restore vehicles")
    logger.warning(f"Vehicle table restored from backup by user {user.id}: {len(parsed)} rows")
    return len(parsed)


# ── Excel ────────────────────────────────────────────────────────────────────

def export_excel(vehicles: list[VehicleOut]) -> bytes:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Vehicles"
    sheet.append([header for header, _ in EXPORT_COLUMNS])
    for v in vehicles:
        row = []
        for _, attr in EXPORT_COLUMNS:
            value = getattr(v, attr)
            if attr == "is_on_hold":
                value = "Yes" if value else "No"
            row.append(value)
        sheet.append(row)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _header_key(header) -> str:
    return "".join(ch for ch in str(header or "").lower() if ch.isalnum())


def _parse_date(value) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _parse_hold(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"yes", "true", "1", "y"}
    return bool(value)


def row_to_vehicle(row: dict) -> VehicleIn:
    """Map one sheet row (already keyed by field name) to a VehicleIn."""
    return VehicleIn(
        owner_name=row.get("owner_name") or "",
        id_number=row.get("id_number") or "",
        plate_number=row.get("plate_number") or "",
        vehicle_name=row.get("vehicle_name"),
        model_year=row.get("model_year") or str(date.today().year),
        category=row.get("category") or DEFAULT_CATEGORY,
        permit_expiry_date=_parse_date(row.get("permit_expiry_date")),
        is_on_hold=_parse_hold(row.get("is_on_hold")),
    )


def import_excel(db: Session, user: CallingUser, raw: bytes) -> ImportResult:
    try:
        workbook = openpyxl.load_workbook(BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise InvalidInput(f"Could not read Excel file: {e}") from e

    rows = list(workbook.active.iter_rows(values_only=True))
    if not rows:
        raise InvalidInput("The Excel file is empty")
    fields = [HEADER_ALIASES.get(_header_key(h)) for h in rows[0]]
    if not any(fields):
        raise InvalidInput("No recognised columns in header row")

    data_rows = [r for r in rows[1:] if any(cell not in (None, "") for cell in r)]
    imported = 0
    errors: list[str] = []
    for line_no, cells in enumerate(data_rows, start=2):
        record = {f: cells[i] for i, f in enumerate(fields) if f and i < len(cells)}
        try:
            vehicle = row_to_vehicle(record)
            create_vehicle(db, user, vehicle.model_dump())
            imported += 1
        except (ValueError, VehicleTrackerError) as e:
            errors.append(f"Row {line_no}: {e}")

    logger.info(f"Excel import by user {user.id}: {imported}/{len(data_rows)} vehicles")
    return ImportResult(imported=imported, total=len(data_rows), errors=errors)
