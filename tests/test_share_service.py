# tests/test_share_service.py
"""Unit tests for the share-request workflow (create → accept / reject)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.exceptions import AlreadyProcessed, InvalidInput, NotFound
from app.models.share_request import ShareRequest
from app.models.vehicle_share import VehicleShare
from app.schemas.user import CallingUser
from app.services import access_service, share_service


def share(db, vehicle, sender, target, now=None):
    share_service.create_share_requests(db, [vehicle.id], [target.id], sender, now=now)
    return db.query(ShareRequest).order_by(ShareRequest.id.desc()).first()


class TestCreateShareRequests:
    @pytest.mark.parametrize("vehicle_ids,target_ids", [
        ([], [1]), ([1], []), (None, [1]), ([1], "2"), ({"id": 1}, [1]),
    ])
    def test_bad_batch_rejected_whole(self, db, alice, vehicle_ids, target_ids):
        with pytest.raises(InvalidInput):
            share_service.create_share_requests(db, vehicle_ids, target_ids, alice)
        assert db.query(ShareRequest).count() == 0

    def test_every_vehicle_to_every_user(self, db, alice, make_user, make_vehicle):
        targets = [make_user(f"user{i}") for i in range(3)]
        vehicles = [make_vehicle(alice, plate=f"P{i}") for i in range(2)]

        result = share_service.create_share_requests(
            db, [v.id for v in vehicles], [t.id for t in targets], alice)

        assert result.requests_created == 6
        assert result.errors is None
        rows = db.query(ShareRequest).all()
        assert len(rows) == 6
        assert {r.status for r in rows} == {"pending"}
        assert {r.shared_by_user_id for r in rows} == {alice.id}

    def test_one_failed_insert_is_reported(self, db, alice, make_user, make_vehicle):
        targets = [make_user(f"user{i}") for i in range(3)]
        vehicles = [make_vehicle(alice, plate=f"P{i}") for i in range(2)]
        real_insert = share_service._insert_share_request
        calls = {"n": 0}

        def flaky_insert(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 4:
                raise IntegrityError("INSERT INTO share_requests", {}, Exception("constraint failed"))
            return real_insert(*args, **kwargs)

        with patch.object(share_service, "_insert_share_request", side_effect=flaky_insert):
            result = share_service.create_share_requests(
                db, [v.id for v in vehicles], [t.id for t in targets], alice)

        assert result.requests_created == 5
        assert len(result.errors) == 1
        assert result.errors[0].startswith(f"Vehicle {vehicles[1].id} to User {targets[0].id}:")
        assert db.query(ShareRequest).count() == 5

    def test_invalid_pairs_collected_not_raised(self, db, alice, bob, make_vehicle):
        mine = make_vehicle(alice)
        result = share_service.create_share_requests(db, [mine.id, 9999], [bob.id, alice.id, 8888], alice)
        assert result.requests_created == 1
        assert len(result.errors) == 5

    def test_cannot_share_someone_elses_vehicle(self, db, alice, bob, make_user, make_vehicle):
        carol = make_user("carol")
        bobs = make_vehicle(bob)
        result = share_service.create_share_requests(db, [bobs.id], [carol.id], alice)
        assert result.requests_created == 0
        assert "vehicle not found" in result.errors[0]

    def test_grantee_may_reshare(self, db, alice, bob, make_user, make_vehicle):
        carol = make_user("carol")
        vehicle = make_vehicle(alice)
        share_service.accept_share_request(db, share(db, vehicle, alice, bob).id, bob)

        result = share_service.create_share_requests(db, [vehicle.id], [carol.id], bob)
        assert result.requests_created == 1

    def test_cannot_share_with_owner(self, db, alice, bob, admin, make_vehicle):
        vehicle = make_vehicle(bob)
        result = share_service.create_share_requests(db, [vehicle.id], [bob.id], admin)
        assert result.requests_created == 0
        assert "owns" in result.errors[0]

    def test_duplicate_pending_not_created(self, db, alice, bob, make_vehicle):
        vehicle = make_vehicle(alice)
        share(db, vehicle, alice, bob)
        result = share_service.create_share_requests(db, [vehicle.id], [bob.id], alice)
        assert result.requests_created == 0
        assert "already pending" in result.errors[0]
        assert db.query(ShareRequest).count() == 1

    def test_new_request_allowed_after_rejection(self, db, alice, bob, make_vehicle):
        vehicle = make_vehicle(alice)
        share_service.reject_share_request(db, share(db, vehicle, alice, bob).id, bob)
        result = share_service.create_share_requests(db, [vehicle.id], [bob.id], alice)
        assert result.requests_created == 1


class TestAcceptReject:
    def test_accept_creates_grant_and_visibility(self, db, alice, bob, make_vehicle):
        vehicle = make_vehicle(alice)
        request = share(db, vehicle, alice, bob)

        share_service.accept_share_request(db, request.id, bob)

        db.refresh(request)
        assert request.status == "accepted"
        grants = db.query(VehicleShare).all()
        assert [(g.vehicle_id, g.shared_by_user_id, g.shared_to_user_id) for g in grants] == \
            [(vehicle.id, alice.id, bob.id)]
        rows = access_service.list_visible_vehicles(db, bob)
        assert [(r.id, r.access_level) for r in rows] == [(vehicle.id, "shared")]

    def test_second_accept_is_already_processed(self, db, alice, bob, make_vehicle):
        request = share(db, make_vehicle(alice), alice, bob)
        share_service.accept_share_request(db, request.id, bob)

        with pytest.raises(AlreadyProcessed):
            share_service.accept_share_request(db, request.id, bob)
        assert db.query(VehicleShare).count() == 1

    def test_accept_is_idempotent_for_existing_grant(self, db, alice, bob, make_vehicle):
        vehicle = make_vehicle(alice)
        request = share(db, vehicle, alice, bob)
        db.add(VehicleShare(vehicle_id=vehicle.id, shared_by_user_id=alice.id, shared_to_user_id=bob.id))
        db.commit()

        share_service.accept_share_request(db, request.id, bob)
        assert db.query(VehicleShare).count() == 1

    def test_updated_at_moves_on_transition(self, db, alice, bob, make_vehicle):
        created = datetime(2026, 1, 1, 8, 0)
        request = share(db, make_vehicle(alice), alice, bob, now=created)
        later = created + timedelta(hours=3)
        share_service.accept_share_request(db, request.id, bob, now=later)
        db.refresh(request)
        assert request.created_at == created
        assert request.updated_at == later

    def test_only_recipient_can_accept(self, db, alice, bob, make_user, make_vehicle):
        carol = make_user("carol")
        request = share(db, make_vehicle(alice), alice, bob)
        for outsider in (alice, carol):
            with pytest.raises(NotFound):
                share_service.accept_share_request(db, request.id, outsider)
        db.refresh(request)
        assert request.status == "pending"

    def test_unknown_request_not_found(self, db, bob):
        with pytest.raises(NotFound):
            share_service.reject_share_request(db, 31337, bob)

    def test_reject_creates_no_grant(self, db, alice, bob, make_vehicle):
        request = share(db, make_vehicle(alice), alice, bob)
        share_service.reject_share_request(db, request.id, bob)
        db.refresh(request)
        assert request.status == "rejected"
        assert db.query(VehicleShare).count() == 0
        assert access_service.list_visible_vehicles(db, bob) == []

    def test_rejected_cannot_be_accepted(self, db, alice, bob, make_vehicle):
        request = share(db, make_vehicle(alice), alice, bob)
        share_service.reject_share_request(db, request.id, bob)
        with pytest.raises(AlreadyProcessed):
            share_service.accept_share_request(db, request.id, bob)


    def test_lookup_locks_the_request_row(self):
        db = MagicMock()
        locked = db.query.return_value.filter.return_value.populate_existing.return_value.with_for_update
        locked.return_value.first.return_value = ShareRequest(id=5, status="accepted", shared_to_user_id=2)

        with pytest.raises(AlreadyProcessed):
            share_service.accept_share_request(db, 5, CallingUser(id=2))
        locked.assert_called_once()
        db.add.assert_not_called()
        db.commit.assert_not_called()

    def test_accept_after_concurrent_accept_is_already_processed(self, engine, db, alice, bob, make_vehicle):
        request = share(db, make_vehicle(alice), alice, bob)
        other = sessionmaker(bind=engine)()
        try:
            # The other session still holds the request as pending
            assert other.get(ShareRequest, request.id).status == "pending"
            share_service.accept_share_request(db, request.id, bob)

            with pytest.raises(AlreadyProcessed):
                share_service.accept_share_request(other, request.id, bob)
        finally:
            other.close()
        assert db.query(VehicleShare).count() == 1

class TestQueries:
    def test_pending_lists_only_open_requests_newest_first(self, db, alice, bob, make_vehicle):
        t0 = datetime(2026, 2, 1, 10, 0)
        v1 = make_vehicle(alice, plate="OLD", vehicle_name="Truck")
        v2 = make_vehicle(alice, plate="NEW", vehicle_name="Sedan", owner_name="Alice A.")
        v3 = make_vehicle(alice, plate="DONE")
        share(db, v1, alice, bob, now=t0)
        share(db, v2, alice, bob, now=t0 + timedelta(minutes=5))
        share_service.reject_share_request(db, share(db, v3, alice, bob, now=t0).id, bob)

        pending = share_service.list_pending(db, bob)
        assert [p.plate_number for p in pending] == ["NEW", "OLD"]
        assert pending[0].shared_by_username == "alice"
        assert pending[0].vehicle_name == "Sedan"
        assert pending[0].owner_name == "Alice A."
        assert share_service.list_pending(db, alice) == []

    def test_sent_lists_every_state(self, db, alice, bob, make_user, make_vehicle):
        carol = make_user("carol")
        vehicle = make_vehicle(alice)
        share_service.create_share_requests(db, [vehicle.id], [bob.id, carol.id], alice)
        first = db.query(ShareRequest).filter(ShareRequest.shared_to_user_id == bob.id).first()
        share_service.accept_share_request(db, first.id, bob)

        sent = share_service.list_sent(db, alice)
        assert {(s.shared_to_username, s.status) for s in sent} == {("bob", "accepted"), ("carol", "pending")}
        assert share_service.list_sent(db, bob) == []


class TestShareableUsers:
    def test_non_admin_does_not_see_admins_or_self(self, db, admin, alice, bob):
        names = [u.username for u in share_service.list_shareable_users(db, alice)]
        assert names == ["bob"]

    def test_admin_sees_everyone_but_self(self, db, admin, alice, bob):
        names = [u.username for u in share_service.list_shareable_users(db, admin)]
        assert names == ["alice", "bob"]

    def test_search(self, db, admin, alice, bob, make_user):
        make_user("bobby")
        names = [u.username for u in share_service.search_users(db, alice, "bob")]
        assert names == ["bob", "bobby"]
        assert share_service.search_users(db, alice, "") == []
        assert share_service.search_users(db, alice, "root") == []
