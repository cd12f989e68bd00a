# app/services/share_service.py
"""
Vehicle sharing workflow.

  create  → one pending ShareRequest per (vehicle, target user) pair
  accept  → request becomes "accepted" and a VehicleShare grant is materialised
  reject  → request becomes "rejected", no grant

Only the addressee may accept or reject, and only while the request is pending.
A batch create is not atomic: each pair is committed on its own and failures
come back as data (count + error list) instead of aborting the batch.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from app.database import commit_or_raise
from app.exceptions import AlreadyProcessed, InvalidInput, NotFound, VehicleTrackerError
from app.models.share_request import ACCEPTED, PENDING, REJECTED, ShareRequest
from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.vehicle_share import VehicleShare
from app.schemas.share_request import PendingShareRequestOut, SentShareRequestOut, ShareBatchResult
from app.schemas.user import ROLE_ADMIN, CallingUser
from app.services import vehicle_repository
from app.services.access_service import access_level_for
from app.utils.logger import get_logger

logger = get_logger(__name__)


# ── Create ───────────────────────────────────────────────────────────────────

def _check_pair(db: Session, vehicle_id, target_user_id, from_user: CallingUser):
    """Raises a VehicleTrackerError describing why this pair cannot be requested."""
    vehicle = vehicle_repository.find_by_id(db, vehicle_id)
    if not vehicle or access_level_for(db, from_user, vehicle) is None:
        raise NotFound("vehicle not found")
    target = db.query(User).filter(User.id == target_user_id).first()
    if not target:
        raise NotFound("user not found")
    if target.id == from_user.id:
        raise InvalidInput("cannot share with yourself")
    if target.id == vehicle.owner_id:
        raise InvalidInput("user already owns this vehicle")

    already_granted = db.query(VehicleShare).filter(
        VehicleShare.vehicle_id == vehicle_id,
        VehicleShare.shared_to_user_id == target_user_id,
    ).first()
    if already_granted:
        raise InvalidInput("vehicle already shared with this user")

    pending = db.query(ShareRequest).filter(
        ShareRequest.vehicle_id == vehicle_id,
        ShareRequest.shared_by_user_id == from_user.id,
        ShareRequest.shared_to_user_id == target_user_id,
        ShareRequest.status == PENDING,
    ).first()
    if pending:
        raise InvalidInput(f"request {pending.id} already pending")


def _insert_share_request(db: Session, vehicle_id: int, from_user_id: int, target_user_id: int,
                          now: datetime) -> ShareRequest:
    request = ShareRequest(
        vehicle_id=vehicle_id,
        shared_by_user_id=from_user_id,
        shared_to_user_id=target_user_id,
        status=PENDING,
        created_at=now,
        updated_at=now,
    )
    db.add(request)
    db.commit()
    return request


def create_share_requests(db: Session, vehicle_ids, target_user_ids, from_user: CallingUser,
                          now: Optional[datetime] = None) -> ShareBatchResult:
    if not isinstance(vehicle_ids, list) or not isinstance(target_user_ids, list):
        raise InvalidInput("Invalid request format")
    if not vehicle_ids or not target_user_ids:
        raise InvalidInput("No vehicles or users selected")

    now = now or datetime.utcnow()
    created = 0
    errors: list[str] = []

    for vehicle_id in vehicle_ids:
        for target_user_id in target_user_ids:
            prefix = f"Vehicle {vehicle_id} to User {target_user_id}"
            try:
                _check_pair(db, vehicle_id, target_user_id, from_user)
                _insert_share_request(db, vehicle_id, from_user.id, target_user_id, now)
                created += 1
            except VehicleTrackerError as e:
                errors.append(f"{prefix}: {e.detail}")
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Share request insert failed ({prefix}): {e}")
                errors.append(f"{prefix}: {e}")

    logger.info(f"User {from_user.id} created {created} share request(s), {len(errors)} failed")
    return ShareBatchResult(requests_created=created, errors=errors or None)


# ── Transitions ──────────────────────────────────────────────────────────────

def _addressed_request(db: Session, request_id: int, user: CallingUser) -> ShareRequest:
    # Same error for "missing" and "not yours" so other users can't guess ids.
    # Row lock: a concurrent accept waits here, then reads the updated status.
    request = (
        db.query(ShareRequest)
        .filter(ShareRequest.id == request_id, ShareRequest.shared_to_user_id == user.id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not request:
        raise NotFound("Request not found")
    if request.status != PENDING:
        raise AlreadyProcessed("Request already processed")
    return request


def _grant(db: Session, vehicle_id: int, shared_by_user_id: int, shared_to_user_id: int):
    """Adds the grant unless the same triple already exists."""
    exists = db.query(VehicleShare).filter(
        VehicleShare.vehicle_id == vehicle_id,
        VehicleShare.shared_by_user_id == shared_by_user_id,
        VehicleShare.shared_to_user_id == shared_to_user_id,
    ).first()
    if not exists:
        db.add(VehicleShare(
            vehicle_id=vehicle_id,
            shared_by_user_id=shared_by_user_id,
            shared_to_user_id=shared_to_user_id,
        ))


def accept_share_request(db: Session, request_id: int, user: CallingUser,
                         now: Optional[datetime] = None) -> ShareRequest:
    request = _addressed_request(db, request_id, user)
    request.status = ACCEPTED
    request.updated_at = now or datetime.utcnow()
    _grant(db, request.vehicle_id, request.shared_by_user_id, request.shared_to_user_id)
    # Status change and grant commit together
    commit_or_raise(db, f"accept share request {request_id}")
    logger.info(f"Share request {request_id} accepted by user {user.id} (vehicle {request.vehicle_id})")
    return request


def reject_share_request(db: Session, request_id: int, user: CallingUser,
                         now: Optional[datetime] = None) -> ShareRequest:
    request = _addressed_request(db, request_id, user)
    request.status = REJECTED
    request.updated_at = now or datetime.utcnow()
    commit_or_raise(db, f"reject share request {request_id}")
    logger.info(f"Share request {request_id} rejected by user {user.id}")
    return request


# ── Queries ──────────────────────────────────────────────────────────────────

def list_pending(db: Session, user: CallingUser) -> list[PendingShareRequestOut]:
    sender = aliased(User)
    rows = (
        db.query(ShareRequest, Vehicle, sender.username)
        .join(Vehicle, Vehicle.id == ShareRequest.vehicle_id)
        .join(sender, sender.id == ShareRequest.shared_by_user_id)
        .filter(ShareRequest.shared_to_user_id == user.id, ShareRequest.status == PENDING)
        .order_by(ShareRequest.created_at.desc(), ShareRequest.id.desc())
        .all()
    )
    return [
        PendingShareRequestOut(
            id=req.id,
            vehicle_id=req.vehicle_id,
            shared_by_user_id=req.shared_by_user_id,
            created_at=req.created_at,
            vehicle_name=vehicle.vehicle_name,
            plate_number=vehicle.plate_number,
            owner_name=vehicle.owner_name,
            shared_by_username=username,
        )
        for req, vehicle, username in rows
    ]


def list_sent(db: Session, user: CallingUser) -> list[SentShareRequestOut]:
    recipient = aliased(User)
    rows = (
        db.query(ShareRequest, Vehicle, recipient.username)
        .join(Vehicle, Vehicle.id == ShareRequest.vehicle_id)
        .join(recipient, recipient.id == ShareRequest.shared_to_user_id)
        .filter(ShareRequest.shared_by_user_id == user.id)
        .order_by(ShareRequest.created_at.desc(), ShareRequest.id.desc())
        .all()
    )
    return [
        SentShareRequestOut(
            id=req.id,
            vehicle_id=req.vehicle_id,
            shared_to_user_id=req.shared_to_user_id,
            status=req.status,
            created_at=req.created_at,
            updated_at=req.updated_at,
            vehicle_name=vehicle.vehicle_name,
            plate_number=vehicle.plate_number,
            shared_to_username=username,
        )
        for req, vehicle, username in rows
    ]


def list_shareable_users(db: Session, user: CallingUser) -> list[User]:
    """Everyone but the caller; admins are hidden from non-admin callers."""
    q = db.query(User).filter(User.id != user.id)
    if not user.is_admin:
        q = q.filter(User.role != ROLE_ADMIN)
    return q.order_by(User.username).all()


def search_users(db: Session, user: CallingUser, query: str, limit: int = 5) -> list[User]:
    if not query:
        return []
    return (
        db.query(User)
        .filter(User.username.like(f"%{query}%"), User.role != ROLE_ADMIN, User.id != user.id)
        .order_by(User.username)
        .limit(limit)
        .all()
    )
