"""Holiday calendar tests: state expansion, import idempotency, filters, CRUD."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from leavedesk.common.constants import HolidayType, UserRole
from leavedesk.common.exceptions import ValidationException
from leavedesk.holidays.calendar import builtin_calendar, expand_states
from leavedesk.holidays.schemas import HolidayCreate, HolidayUpdate
from leavedesk.holidays.service import HolidayService
from tests.conftest import auth_headers, make_employee


class TestExpandStates:
    def test_codes_become_names(self):
        assert expand_states(["MH", "KA"]) == ["Maharashtra", "Karnataka"]

    def test_unknown_passes_through(self):
        assert expand_states(["Atlantis", None, ""]) == ["Atlantis"]

    def test_idempotent(self):
        once = expand_states(["TN", "WB", "DL"])
        assert expand_states(once) == once

    def test_builtin_calendar(self):
        seeds = builtin_calendar(2026)
        assert len(seeds) == 158
        assert sum(1 for s in seeds if s.holiday_type == HolidayType.regional) == 155
        assert len({s.dedupe_key for s in seeds}) == len(seeds)
        assert any(s.name == "Republic Day" and s.is_national for s in seeds)
        pongal = next(s for s in seeds if s.name == "Pongal")
        assert "Tamil Nadu" in pongal.states
        assert builtin_calendar(1999) == []


class TestHolidayService:
    async def test_import_is_idempotent(self, db):
        admin = await make_employee(db, role=UserRole.admin)

        first = await HolidayService.import_calendar(db, 2026, actor_id=admin.id, batch_size=10)
        second = await HolidayService.import_calendar(db, 2026, actor_id=admin.id)

        assert first.imported == first.total > 0
        assert second.imported == 0
        assert second.skipped == second.total
        assert len(await HolidayService.list_holidays(db, 2026)) == first.total

    async def test_import_unknown_year(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        with pytest.raises(ValidationException):
            await HolidayService.import_calendar(db, 2030, actor_id=admin.id)

    async def test_state_filter(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        await HolidayService.import_calendar(db, 2026, actor_id=admin.id)

        kerala = {h.name for h in await HolidayService.list_holidays(db, 2026, state="KL")}
        assert "Vishu" in kerala
        assert "Republic Day" in kerala
        assert "Pongal" not in kerala

        by_name = {
            h.name for h in await HolidayService.list_holidays(db, 2026, state="Kerala")
        }
        assert by_name == kerala

    async def test_available_states(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        await HolidayService.create_holiday(
            db,
            HolidayCreate(
                name="Harvest Day", date=date(2025, 1, 14),
                holiday_type=HolidayType.regional, states=["TN", "Kerala"],
            ),
            actor_id=admin.id,
        )
        assert await HolidayService.get_available_states(db, 2025) == ["Kerala", "Tamil Nadu"]

    async def test_regional_update_needs_states(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        holiday = await HolidayService.create_holiday(
            db, HolidayCreate(name="Founders Day", date=date(2025, 5, 5)), actor_id=admin.id,
        )
        with pytest.raises(ValidationException):
            await HolidayService.update_holiday(
                db, holiday.id, HolidayUpdate(holiday_type=HolidayType.regional),
                actor_id=admin.id,
            )

    async def test_only_mandatory_dates_block_leave(self, db):
        admin = await make_employee(db, role=UserRole.admin)
        await HolidayService.create_holiday(
            db, HolidayCreate(name="Founders Day", date=date(2025, 5, 5)), actor_id=admin.id,
        )
        await HolidayService.create_holiday(
            db,
            HolidayCreate(
                name="Local Fair", date=date(2025, 5, 6),
                holiday_type=HolidayType.regional, states=["GA"],
            ),
            actor_id=admin.id,
        )
        dates = await HolidayService.holiday_dates_between(db, date(2025, 5, 1), date(2025, 5, 31))
        assert dates == {date(2025, 5, 5)}


class TestHolidayAPI:
    async def test_list_defaults_to_current_year(self, client, db):
        emp = await make_employee(db)
        with patch("leavedesk.common.clock.today", return_value=date(2026, 2, 1)):
            resp = await client.get("/api/v1/holidays", headers=auth_headers(emp))
        assert resp.status_code == 200
        assert resp.json()["meta"]["year"] == 2026
        assert resp.json()["meta"]["max_regional_per_year"] == 6

    async def test_import_requires_permission(self, client, db):
        emp = await make_employee(db)
        resp = await client.post("/api/v1/holidays/import?year=2026", headers=auth_headers(emp))
        assert resp.status_code == 403

    async def test_import_twice(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        first = await client.post("/api/v1/holidays/import?year=2026", headers=auth_headers(hr))
        second = await client.post("/api/v1/holidays/import?year=2026", headers=auth_headers(hr))
        assert first.status_code == 201
        assert second.json()["data"]["imported"] == 0
        assert second.json()["message"] == "All holidays for this year are already imported"

    async def test_create_and_delete(self, client, db):
        hr = await make_employee(db, role=UserRole.hr)
        resp = await client.post(
            "/api/v1/holidays",
            json={"name": "Company Offsite", "date": "2025-11-21", "holiday_type": "company"},
            headers=auth_headers(hr),
        )
        assert resp.status_code == 201
        holiday_id = resp.json()["data"]["id"]

        resp = await client.delete(f"/api/v1/holidays/{holiday_id}", headers=auth_headers(hr))
        assert resp.status_code == 200
