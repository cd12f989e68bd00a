# tests/test_license_service.py
"""Unit tests for the trial / activation gate."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta

from app.config import settings
from app.exceptions import InvalidInput
from app.models.system_config import SystemConfig
from app.services import license_service

INSTALLED = datetime(2026, 5, 1, 12, 0)


class TestLicenseStatus:
    def test_seeding_is_idempotent(self, db):
        license_service.ensure_license_rows(db, now=INSTALLED)
        license_service.ensure_license_rows(db, now=INSTALLED + timedelta(days=3))
        assert db.query(SystemConfig).count() == 2
        assert license_service.get_license_status(db).install_id == INSTALLED.isoformat()

    def test_trial_counts_down(self, db):
        license_service.ensure_license_rows(db, now=INSTALLED)
        status = license_service.get_license_status(db, now=INSTALLED + timedelta(hours=1))
        assert status.trial_remaining == settings.TRIAL_DAYS - 1
        assert not status.is_expired
        assert not status.is_activated

    def test_trial_expires(self, db):
        license_service.ensure_license_rows(db, now=INSTALLED)
        status = license_service.get_license_status(db, now=INSTALLED + timedelta(days=settings.TRIAL_DAYS))
        assert status.trial_remaining == 0
        assert status.is_expired

    def test_activation_lifts_expiry(self, db):
        license_service.ensure_license_rows(db, now=INSTALLED)
        key = license_service.generate_license_key(INSTALLED.isoformat())
        license_service.activate(db, key)
        status = license_service.get_license_status(db, now=INSTALLED + timedelta(days=365))
        assert status.is_activated
        assert not status.is_expired

    def test_timezone_suffixed_install_date(self, db):
        db.add(SystemConfig(key="install_date", value="2026-05-01T12:00:00.000Z"))
        db.commit()
        status = license_service.get_license_status(db, now=INSTALLED + timedelta(days=2))
        assert status.trial_remaining == settings.TRIAL_DAYS - 2

    def test_aware_now_accepted(self, db):
        from datetime import timezone
        license_service.ensure_license_rows(db, now=INSTALLED)
        aware = (INSTALLED + timedelta(hours=1)).replace(tzinfo=timezone.utc)
        assert license_service.get_license_status(db, now=aware).trial_remaining == settings.TRIAL_DAYS - 1


class TestActivation:
    def test_key_format(self):
        key = license_service.generate_license_key("2026-05-01T12:00:00")
        assert key.startswith("VMS-")
        assert len(key) == 20
        assert key == key.upper()

    def test_key_depends_on_seed(self):
        assert license_service.generate_license_key("a") != license_service.generate_license_key("b")

    @pytest.mark.parametrize("key", [None, "", "VMS-0000000000000000"])
    def test_bad_keys_rejected(self, db, key):
        license_service.ensure_license_rows(db, now=INSTALLED)
        with pytest.raises(InvalidInput):
            license_service.activate(db, key)
        assert not license_service.get_license_status(db).is_activated
