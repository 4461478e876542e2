"""
Direct assignment tests, including the capacity guard and assignment removal.
"""

from datetime import date

import pytest
from sqlalchemy import func, select, update

from conftest import actor_for, requirement_id
from shiftdesk.core.errors import AuthorizationError, ConflictError, NotFoundError
from shiftdesk.models.enums import ApplicationStatus, TimeOffStatus
from shiftdesk.models.shift_application import ShiftApplication
from shiftdesk.models.shift_assignment import ShiftAssignment
from shiftdesk.models.shift_requirement import ShiftRequirement
from shiftdesk.models.time_off import TimeOffRequest
from shiftdesk.services import workflow


def _assignment_count(db, req_id):
    return db.execute(
        select(func.count(ShiftAssignment.assignment_id)).where(ShiftAssignment.requirement_id == req_id)
    ).scalar_one()


class TestAssignStaff:
    def test_direct_assign(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        shift = make_shift()

        assignment = workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift))

        assert assignment.assignment_id is not None
        assert assignment.shift_id == shift.shift_id
        assert db.get(ShiftRequirement, requirement_id(shift)).filled_count == 1

    def test_time_off_scenario(self, db, manager_actor, make_staff, make_shift):
        """Approved time-off 2025-10-10..12 blocks a direct assign on 2025-10-11."""
        staff = make_staff()
        db.add(TimeOffRequest(
            staff_id=staff.staff_id,
            start_date=date(2025, 10, 10),
            end_date=date(2025, 10, 12),
            status=TimeOffStatus.approved,
        ))
        db.commit()
        shift = make_shift(shift_date=date(2025, 10, 11))

        with pytest.raises(ConflictError) as exc:
            workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift))
        assert exc.value.reason == "time_off"
        assert _assignment_count(db, requirement_id(shift)) == 0

    def test_capacity_of_two_rejects_third(self, db, manager_actor, make_staff, make_shift):
        shift = make_shift(requirements=[{"role_name": "server", "required_count": 2}])
        req_id = requirement_id(shift)
        workflow.assign_staff(db, manager_actor, shift.shift_id, make_staff().staff_id, req_id)
        workflow.assign_staff(db, manager_actor, shift.shift_id, make_staff().staff_id, req_id)

        with pytest.raises(ConflictError) as exc:
            workflow.assign_staff(db, manager_actor, shift.shift_id, make_staff().staff_id, req_id)
        assert exc.value.reason == "fully_staffed"
        assert _assignment_count(db, req_id) == 2

    def test_same_shift_under_another_role_rejected(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff(worker_roles=("server", "host"))
        shift = make_shift(requirements=[
            {"role_name": "server", "required_count": 1},
            {"role_name": "host", "required_count": 1},
        ])
        workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift, "server"))

        with pytest.raises(ConflictError) as exc:
            workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift, "host"))
        assert exc.value.reason == "already_assigned"

    def test_requirement_must_belong_to_shift(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        evening = make_shift(slot="evening")
        night = make_shift(slot="night")

        with pytest.raises(NotFoundError):
            workflow.assign_staff(db, manager_actor, evening.shift_id, staff.staff_id, requirement_id(night))

    def test_unknown_staff(self, db, manager_actor, make_shift):
        shift = make_shift()
        with pytest.raises(NotFoundError):
            workflow.assign_staff(db, manager_actor, shift.shift_id, 999, requirement_id(shift))

    def test_account_without_staff_role_rejected(self, db, manager_actor, make_staff, make_shift):
        guest = make_staff(roles=("guest",))
        shift = make_shift()

        with pytest.raises(ConflictError) as exc:
            workflow.assign_staff(db, manager_actor, shift.shift_id, guest.staff_id, requirement_id(shift))
        assert exc.value.reason == "not_staff"

    def test_staff_cannot_assign(self, db, make_staff, make_shift):
        staff = make_staff()
        shift = make_shift()
        with pytest.raises(AuthorizationError):
            workflow.assign_staff(db, actor_for(staff), shift.shift_id, staff.staff_id, requirement_id(shift))


class TestCapacityGuard:
    """The conditional UPDATE is the last word on capacity."""

    def test_reserve_stops_at_required_count(self, db, make_shift):
        shift = make_shift(requirements=[{"role_name": "server", "required_count": 2}])
        req_id = requirement_id(shift)

        assert workflow.reserve_requirement_slot(db, req_id)
        assert workflow.reserve_requirement_slot(db, req_id)
        assert not workflow.reserve_requirement_slot(db, req_id)
        db.commit()

        assert db.get(ShiftRequirement, req_id).filled_count == 2

    def test_slot_taken_by_concurrent_writer(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        shift = make_shift()
        req_id = requirement_id(shift)
        # another transaction reserved the last slot after our precheck would pass
        db.execute(update(ShiftRequirement).where(ShiftRequirement.requirement_id == req_id).values(filled_count=1))
        db.commit()

        with pytest.raises(ConflictError) as exc:
            workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, req_id)
        assert exc.value.reason == "fully_staffed"
        assert _assignment_count(db, req_id) == 0

    def test_failed_approval_leaves_application_pending(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        shift = make_shift()
        req_id = requirement_id(shift)
        app = workflow.apply_to_shift(db, actor_for(staff), shift.shift_id, req_id)
        db.execute(update(ShiftRequirement).where(ShiftRequirement.requirement_id == req_id).values(filled_count=1))
        db.commit()

        with pytest.raises(ConflictError):
            workflow.approve_and_assign(db, manager_actor, app.application_id)

        assert db.get(ShiftApplication, app.application_id).status == ApplicationStatus.applied
        assert _assignment_count(db, req_id) == 0

    def test_release_never_goes_below_zero(self, db, make_shift):
        shift = make_shift()
        req_id = requirement_id(shift)

        workflow.release_requirement_slot(db, req_id)
        db.commit()

        assert db.get(ShiftRequirement, req_id).filled_count == 0


class TestRemoveAssignment:
    def test_removal_frees_the_slot(self, db, manager_actor, make_staff, make_shift):
        shift = make_shift()
        req_id = requirement_id(shift)
        first = workflow.assign_staff(db, manager_actor, shift.shift_id, make_staff().staff_id, req_id)

        workflow.remove_assignment(db, manager_actor, first.assignment_id)

        assert db.get(ShiftRequirement, req_id).filled_count == 0
        replacement = workflow.assign_staff(db, manager_actor, shift.shift_id, make_staff().staff_id, req_id)
        assert replacement.requirement_id == req_id

    def test_removal_keeps_application_status(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        shift = make_shift()
        app = workflow.apply_to_shift(db, actor_for(staff), shift.shift_id, requirement_id(shift))
        _, assignment = workflow.approve_and_assign(db, manager_actor, app.application_id)

        workflow.remove_assignment(db, manager_actor, assignment.assignment_id)

        assert db.get(ShiftApplication, app.application_id).status == ApplicationStatus.approved
        # with the assignment gone the approved application can be released
        assert workflow.withdraw_application(db, actor_for(staff), app.application_id).status == ApplicationStatus.withdrawn

    def test_reassign_to_another_role_after_removal(self, db, manager_actor, make_staff, make_shift):
        """The approved application left behind by a removal does not block the same shift."""
        staff = make_staff(worker_roles=("server", "host"))
        shift = make_shift(requirements=[
            {"role_name": "server", "required_count": 1},
            {"role_name": "host", "required_count": 1},
        ])
        app = workflow.apply_to_shift(db, actor_for(staff), shift.shift_id, requirement_id(shift, "server"))
        _, assignment = workflow.approve_and_assign(db, manager_actor, app.application_id)
        workflow.remove_assignment(db, manager_actor, assignment.assignment_id)

        moved = workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift, "host"))

        assert moved.requirement_id == requirement_id(shift, "host")
        assert db.get(ShiftRequirement, requirement_id(shift, "server")).filled_count == 0
        assert db.get(ShiftRequirement, requirement_id(shift, "host")).filled_count == 1

    def test_unknown_assignment(self, db, manager_actor):
        with pytest.raises(NotFoundError):
            workflow.remove_assignment(db, manager_actor, 12345)


class TestAssignmentViews:
    def test_my_assignments_upcoming_only(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        past = make_shift(shift_date=date(2025, 10, 1))
        upcoming = make_shift(shift_date=date(2025, 10, 20))
        workflow.assign_staff(db, manager_actor, past.shift_id, staff.staff_id, requirement_id(past))
        workflow.assign_staff(db, manager_actor, upcoming.shift_id, staff.staff_id, requirement_id(upcoming))

        mine = workflow.my_assignments(db, actor_for(staff), today=date(2025, 10, 10))

        assert [a.shift_id for a in mine] == [upcoming.shift_id]

    def test_my_assignments_filtered_by_worker_roles(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff(worker_roles=("server",))
        shift = make_shift(shift_date=date(2025, 10, 20), requirements=[{"role_name": "cook", "required_count": 1}])
        workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift, "cook"))

        assert workflow.my_assignments(db, actor_for(staff), today=date(2025, 10, 10)) == []

    def test_list_assignments_manager_only(self, db, manager_actor, make_staff, make_shift):
        staff = make_staff()
        shift = make_shift()
        workflow.assign_staff(db, manager_actor, shift.shift_id, staff.staff_id, requirement_id(shift))

        assert len(workflow.list_assignments(db, manager_actor, shift_id=shift.shift_id)) == 1
        with pytest.raises(AuthorizationError):
            workflow.list_assignments(db, actor_for(staff))
