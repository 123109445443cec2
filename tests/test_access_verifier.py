# tests/test_access_verifier.py
"""Unit tests for the access verifier: pure decision, effects and failures."""

import time

import pytest
from unittest.mock import MagicMock

from app.exceptions import InvalidRequest, PersistenceUnavailable
from app.services.access_verifier import (
    AccessVerifier, decide,
    IDENTITY_NOT_FOUND, VEHICLE_NOT_REGISTERED, VEHICLE_NOT_OWNED, INACTIVE,
)
from app.services.broadcaster import ACCESS_LOG, ACCESS_GRANTED, ACCESS_DENIED, NEW_ALERT


class TestDecide:
    def test_unknown_student(self, seed, memory_storage):
        _, vehicle = seed(memory_storage)
        verdict = decide(None, vehicle)
        assert not verdict.is_valid
        assert verdict.reason == IDENTITY_NOT_FOUND

    def test_unregistered_vehicle(self, seed, memory_storage):
        seed(memory_storage, plate=None)
        student = memory_storage.get_student_by_student_id("S100")
        verdict = decide(student, None)
        assert verdict.reason == VEHICLE_NOT_REGISTERED

    def test_unregistered_vehicle_reported_before_inactivity(self, seed, memory_storage):
        seed(memory_storage, plate=None, active=False)
        student = memory_storage.get_student_by_student_id("S100")
        verdict = decide(student, None)
        assert not verdict.is_valid
        assert verdict.reason == VEHICLE_NOT_REGISTERED

    def test_vehicle_of_someone_else(self, seed, memory_storage):
        seed(memory_storage, "S100", "ABC123")
        _, other_vehicle = seed(memory_storage, "S200", "XYZ999")
        student = memory_storage.get_student_by_student_id("S100")
        assert decide(student, other_vehicle).reason == VEHICLE_NOT_OWNED

    def test_inactive_student(self, seed, memory_storage):
        _, vehicle = seed(memory_storage, active=False)
        student = memory_storage.get_student_by_student_id("S100")
        assert decide(student, vehicle).reason == INACTIVE

    def test_inactive_vehicle(self, seed, memory_storage):
        _, vehicle = seed(memory_storage, vehicle_active=False)
        student = memory_storage.get_student_by_student_id("S100")
        assert decide(student, vehicle).reason == INACTIVE

    def test_ownership_checked_before_activity(self, seed, memory_storage):
        seed(memory_storage, "S100", "ABC123", active=False)
        _, other_vehicle = seed(memory_storage, "S200", "XYZ999", vehicle_active=False)
        student = memory_storage.get_student_by_student_id("S100")
        assert decide(student, other_vehicle).reason == VEHICLE_NOT_OWNED

    def test_valid_pair(self, seed, memory_storage):
        _, vehicle = seed(memory_storage)
        student = memory_storage.get_student_by_student_id("S100")
        verdict = decide(student, vehicle)
        assert verdict.is_valid
        assert verdict.reason is None


class TestVerify:
    @pytest.mark.asyncio
    async def test_matching_active_pair_is_granted(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123", department="CS")
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.verify("S100", "ABC123", "Gate1")

        assert result.is_valid
        assert result.reason is None
        assert result.access_log.access_status == "granted"
        assert result.access_log.metadata == {"confidence": 100}
        assert result.access_log.student.student_id == "S100"
        assert memory_storage.list_recent_alerts() == []
        broadcaster.broadcast.assert_awaited_once()
        event_type, payload = broadcaster.broadcast.await_args.args
        assert event_type == ACCESS_LOG
        assert payload["id"] == result.access_log.id

    @pytest.mark.asyncio
    async def test_unregistered_plate_is_denied_with_alert(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123")
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.verify("S100", "XYZ999", "Gate1")

        assert not result.is_valid
        assert result.reason == VEHICLE_NOT_REGISTERED
        assert result.access_log.access_status == "denied"
        assert result.access_log.plate_number == "XYZ999"
        alerts = memory_storage.list_recent_alerts()
        assert len(alerts) == 1
        assert alerts[0].severity == "critical"
        assert alerts[0].alert_type == "unauthorized_access"
        assert "XYZ999" in alerts[0].description
        assert alerts[0].gate_location == "Gate1"
        assert [c.args[0] for c in broadcaster.broadcast.await_args_list] == [ACCESS_LOG, NEW_ALERT]

    @pytest.mark.asyncio
    async def test_unknown_student_is_denied(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123")
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.verify("NOPE", "ABC123", "Gate1")

        assert not result.is_valid
        assert result.reason == IDENTITY_NOT_FOUND
        assert result.student is None
        logs = memory_storage.list_recent_access_logs()
        assert len(logs) == 1
        assert logs[0].access_status == "denied"
        assert logs[0].student_id is None
        alert = memory_storage.list_recent_alerts()[0]
        assert alert.metadata == {"studentId": "NOPE", "plateNumber": "ABC123"}

    @pytest.mark.asyncio
    async def test_vehicle_of_other_student_is_denied(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123")
        seed(memory_storage, "S200", "XYZ999")
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.verify("S100", "XYZ999", "Gate2")

        assert not result.is_valid
        assert result.reason == VEHICLE_NOT_OWNED
        assert len(memory_storage.list_recent_alerts()) == 1

    @pytest.mark.asyncio
    async def test_inactive_student_with_unknown_plate(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123", active=False)
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.verify("S100", "XYZ999", "Gate1")

        assert not result.is_valid
        assert result.reason == VEHICLE_NOT_REGISTERED
        assert memory_storage.list_recent_alerts()[0].description.startswith(VEHICLE_NOT_REGISTERED)

    @pytest.mark.asyncio
    async def test_plate_match_is_case_sensitive(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123")
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.verify("S100", "abc123", "Gate1")

        assert result.reason == VEHICLE_NOT_REGISTERED

    @pytest.mark.asyncio
    async def test_repeated_scans_are_logged_separately(self, seed, memory_storage, broadcaster):
        seed(memory_storage)
        verifier = AccessVerifier(memory_storage, broadcaster)

        first = await verifier.verify("S100", "ABC123", "Gate1")
        second = await verifier.verify("S100", "ABC123", "Gate1")

        assert first.access_log.id != second.access_log.id
        assert len(memory_storage.list_recent_access_logs()) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("student_id,plate,gate", [
        ("", "ABC123", "Gate1"),
        ("S100", None, "Gate1"),
        ("S100", "ABC123", "   "),
    ])
    async def test_missing_fields_rejected_before_side_effects(self, seed, memory_storage, broadcaster,
                                                               student_id, plate, gate):
        seed(memory_storage)
        memory_storage.get_student_by_student_id = MagicMock()
        verifier = AccessVerifier(memory_storage, broadcaster)

        with pytest.raises(InvalidRequest):
            await verifier.verify(student_id, plate, gate)

        memory_storage.get_student_by_student_id.assert_not_called()
        assert memory_storage.list_recent_access_logs() == []
        broadcaster.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_log_write_failure_aborts_before_alert(self, seed, memory_storage, broadcaster):
        memory_storage.create_access_log = MagicMock(side_effect=PersistenceUnavailable("Database unavailable"))
        memory_storage.create_alert = MagicMock()
        verifier = AccessVerifier(memory_storage, broadcaster)

        with pytest.raises(PersistenceUnavailable):
            await verifier.verify("S100", "ABC123", "Gate1")

        memory_storage.create_alert.assert_not_called()
        broadcaster.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_alert_write_failure_keeps_log(self, seed, memory_storage, broadcaster):
        memory_storage.create_alert = MagicMock(side_effect=PersistenceUnavailable("Database unavailable"))
        verifier = AccessVerifier(memory_storage, broadcaster)

        with pytest.raises(PersistenceUnavailable):
            await verifier.verify("S100", "ABC123", "Gate1")

        assert len(memory_storage.list_recent_access_logs()) == 1
        broadcaster.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_slow_store_times_out(self, seed, memory_storage, broadcaster):
        memory_storage.get_student_by_student_id = lambda student_id: time.sleep(0.5)
        verifier = AccessVerifier(memory_storage, broadcaster, timeout=0.05)

        with pytest.raises(PersistenceUnavailable):
            await verifier.verify("S100", "ABC123", "Gate1")

        broadcaster.broadcast.assert_not_awaited()


class TestManualOverrides:
    @pytest.mark.asyncio
    async def test_grant_logs_without_alert(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123", active=False)
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.grant_manually("S100", "ABC123", "Gate1")

        assert result.success
        assert result.access_log.access_status == "granted"
        assert result.access_log.metadata == {"manual": True}
        assert result.access_log.vehicle.plate_number == "ABC123"
        assert memory_storage.list_recent_alerts() == []
        broadcaster.broadcast.assert_awaited_once()
        assert broadcaster.broadcast.await_args.args[0] == ACCESS_GRANTED

    @pytest.mark.asyncio
    async def test_grant_for_unknown_pair_still_logged(self, seed, memory_storage, broadcaster):
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.grant_manually("GHOST", "NOPLATE", "Gate1")

        assert result.access_log.student_id is None
        assert result.access_log.vehicle_id is None
        assert result.access_log.plate_number == "NOPLATE"

    @pytest.mark.asyncio
    async def test_deny_without_student_creates_alert(self, seed, memory_storage, broadcaster):
        seed(memory_storage, "S100", "ABC123")
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.deny_manually(None, "ABC123", "Gate1", "Suspicious")

        assert result.access_log.access_status == "denied"
        assert result.access_log.student_id is None
        assert result.access_log.reason == "Suspicious"
        assert result.alert.title == "Access Manually Denied"
        assert result.alert.metadata["manual"] is True
        assert len(memory_storage.list_recent_alerts()) == 1
        assert [c.args[0] for c in broadcaster.broadcast.await_args_list] == [ACCESS_DENIED, NEW_ALERT]

    @pytest.mark.asyncio
    async def test_deny_defaults(self, seed, memory_storage, broadcaster):
        verifier = AccessVerifier(memory_storage, broadcaster)

        result = await verifier.deny_manually(None, None, "Gate2")

        assert result.access_log.plate_number == "Unknown"
        assert result.access_log.reason == "Manual denial"
        assert "Unknown" in result.alert.description

    @pytest.mark.asyncio
    async def test_manual_entry_needs_gate(self, seed, memory_storage, broadcaster):
        verifier = AccessVerifier(memory_storage, broadcaster)

        with pytest.raises(InvalidRequest):
            await verifier.grant_manually("S100", "ABC123", "")
        with pytest.raises(InvalidRequest):
            await verifier.deny_manually("S100", "ABC123", None)
