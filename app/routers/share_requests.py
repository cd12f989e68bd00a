# app/routers/share_requests.py
"""Vehicle sharing: create requests in bulk, list them, accept or reject."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.schemas.share_request import (
    PendingShareRequestOut, SentShareRequestOut, ShareBatchResult, ShareRequestCreate,
)
from app.schemas.user import CallingUser
from app.services import share_service

router = APIRouter()


@router.post("/share-requests", response_model=ShareBatchResult, response_model_exclude_none=True,
             summary="Request to share vehicles with users (every vehicle × every user)")
def create_share_requests(body: ShareRequestCreate, user: CallingUser = Depends(get_current_user),
                          db: Session = Depends(get_db)):
    return share_service.create_share_requests(db, body.vehicle_ids, body.target_user_ids, user)


@router.get("/share-requests/pending", response_model=list[PendingShareRequestOut],
            summary="Requests waiting for my answer, newest first")
def pending_requests(user: CallingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return share_service.list_pending(db, user)


@router.get("/share-requests/sent", response_model=list[SentShareRequestOut],
            summary="Requests I sent, any status, newest first")
def sent_requests(user: CallingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return share_service.list_sent(db, user)


@router.post("/share-requests/{request_id}/accept", summary="Accept a share request")
def accept_request(request_id: int, user: CallingUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    share_service.accept_share_request(db, request_id, user)
    return {"success": True}


@router.post("/share-requests/{request_id}/reject", summary="Reject a share request")
def reject_request(request_id: int, user: CallingUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    share_service.reject_share_request(db, request_id, user)
    return {"success": True}
