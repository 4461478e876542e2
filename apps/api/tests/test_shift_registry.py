"""Template catalog and shift registry tests."""

from datetime import date

import pytest

from conftest import actor_for
from shiftdesk.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from shiftdesk.scheduling.shift_templates import seed_default_templates
from shiftdesk.services import shifts as shift_service
from shiftdesk.services.presenters import shift_payload, weekly_payload


class TestTemplates:
    def test_seed_creates_default_catalog(self, db, templates):
        assert set(templates) == {"evening", "night", "early_morning"}
        evening = templates["evening"]
        assert evening.start_time.strftime("%H:%M") == "22:00"
        assert evening.end_time.strftime("%H:%M") == "02:00"
        assert evening.crosses_midnight
        assert not templates["early_morning"].crosses_midnight

    def test_seed_is_idempotent(self, db, templates):
        assert seed_default_templates(db) == []
        assert len(shift_service.list_templates(db)) == 3

    def test_templates_ordered_by_start_time(self, db, templates):
        names = [t.name.value for t in shift_service.list_templates(db)]
        assert names == ["night", "early_morning", "evening"]

    def test_create_template_rejects_unknown_name(self, db, manager_actor):
        with pytest.raises(ValidationError):
            shift_service.create_template(db, manager_actor, "brunch", "10:00", "14:00")

    def test_create_template_rejects_duplicate(self, db, manager_actor, templates):
        with pytest.raises(ConflictError) as exc:
            shift_service.create_template(db, manager_actor, "evening", "21:00", "01:00")
        assert exc.value.reason == "duplicate"

    def test_create_template_rejects_bad_time(self, db, manager_actor):
        with pytest.raises(ValidationError):
            shift_service.create_template(db, manager_actor, "night", "2am", "06:00")

    def test_create_template_requires_manager(self, db, make_staff):
        staff = make_staff()
        with pytest.raises(AuthorizationError):
            shift_service.create_template(db, actor_for(staff), "night", "02:00", "06:00")


class TestShifts:
    def test_create_shift_with_requirements(self, db, make_shift):
        shift = make_shift(
            requirements=[
                {"role_name": "Server", "required_count": 2},
                {"role_name": "cook", "required_count": 1},
            ]
        )

        assert shift.shift_date == date(2025, 10, 10)
        assert shift.template.name.value == "evening"
        roles = {r.role_name: r.required_count for r in shift.requirements}
        assert roles == {"server": 2, "cook": 1}
        assert all(r.filled_count == 0 for r in shift.requirements)

    def test_duplicate_date_and_template_rejected(self, db, make_shift):
        make_shift()
        with pytest.raises(ConflictError) as exc:
            make_shift()
        assert exc.value.reason == "duplicate"

    def test_same_template_on_another_date_allowed(self, db, make_shift):
        make_shift(shift_date=date(2025, 10, 10))
        other = make_shift(shift_date=date(2025, 10, 11))
        assert other.shift_date == date(2025, 10, 11)

    def test_duplicate_role_in_requirements_rejected(self, db, make_shift):
        with pytest.raises(ValidationError):
            make_shift(requirements=[
                {"role_name": "server", "required_count": 1},
                {"role_name": "SERVER", "required_count": 2},
            ])

    def test_negative_required_count_rejected(self, db, make_shift):
        with pytest.raises(ValidationError):
            make_shift(requirements=[{"role_name": "server", "required_count": -1}])

    def test_unknown_template_rejected(self, db, manager_actor, templates):
        with pytest.raises(NotFoundError):
            shift_service.create_shift(db, manager_actor, "2025-10-10", 9999)

    def test_invalid_date_rejected(self, db, manager_actor, templates):
        with pytest.raises(ValidationError):
            shift_service.create_shift(db, manager_actor, "10/10/2025", templates["evening"].template_id)

    def test_get_shift_not_found(self, db):
        with pytest.raises(NotFoundError):
            shift_service.get_shift(db, 42)

    def test_get_shift_non_numeric_id(self, db):
        with pytest.raises(ValidationError):
            shift_service.get_shift(db, "abc")

    def test_list_shifts_ordered_by_date_then_start(self, db, manager_actor, make_shift):
        make_shift(shift_date=date(2025, 10, 11), slot="night")
        make_shift(shift_date=date(2025, 10, 10), slot="evening")
        make_shift(shift_date=date(2025, 10, 10), slot="night")

        shifts = shift_service.list_shifts(db, manager_actor)
        assert [(s.shift_date.day, s.template.name.value) for s in shifts] == [
            (10, "night"),
            (10, "evening"),
            (11, "night"),
        ]

    def test_list_shifts_date_window_needs_both_ends(self, db, manager_actor, make_shift):
        make_shift(shift_date=date(2025, 10, 10))
        make_shift(shift_date=date(2025, 10, 20))

        windowed = shift_service.list_shifts(db, manager_actor, "2025-10-01", "2025-10-15")
        assert [s.shift_date for s in windowed] == [date(2025, 10, 10)]
        assert len(shift_service.list_shifts(db, manager_actor, start_date="2025-10-15")) == 2


class TestWeeklySchedule:
    def test_days_keyed_by_slot(self, db, manager_actor, make_shift):
        make_shift(shift_date=date(2025, 10, 10), slot="evening")
        make_shift(shift_date=date(2025, 10, 10), slot="early_morning")
        make_shift(shift_date=date(2025, 10, 12), slot="night")

        start, end, shifts = shift_service.weekly_schedule(db, manager_actor, "2025-10-06", "2025-10-12")
        payload = weekly_payload(shifts, start, end)

        assert payload["start_date"] == "2025-10-06"
        assert [d["date"] for d in payload["days"]] == ["2025-10-10", "2025-10-12"]
        first = payload["days"][0]
        assert first["night"] is None
        assert first["evening"]["template"]["start_time"] == "22:00:00"
        assert first["early_morning"]["requirements"][0]["assigned_count"] == 0

    def test_missing_dates_rejected(self, db, manager_actor):
        with pytest.raises(ValidationError):
            shift_service.weekly_schedule(db, manager_actor, None, "2025-10-12")

    def test_reversed_range_rejected(self, db, manager_actor):
        with pytest.raises(ValidationError):
            shift_service.weekly_schedule(db, manager_actor, "2025-10-12", "2025-10-06")


def test_shift_payload_for_new_shift(db, make_shift):
    payload = shift_payload(make_shift())
    assert payload["template"]["name"] == "evening"
    assert payload["requirements"][0]["fully_staffed"] is False
    assert payload["applications"] == []
    assert payload["assignments"] == []
