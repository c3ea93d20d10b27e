from datetime import date, datetime

import pytest

from pipeworks.services import attendance_service
from pipeworks.services.attendance_service import AttendanceError
from pipeworks.services.filter_service import AttendanceFilters
from pipeworks.validation import NotFoundError, ValidationError

DAY = date(2024, 1, 16)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 16, hour, minute)


def test_full_shift_derives_hours_and_overtime(make_staff):
    member = make_staff()
    record = attendance_service.clock_in(staff_id=member.id, location="Plant A", at=at(8))
    assert record.status == "present"
    assert record.total_hours == 0

    record = attendance_service.clock_out(staff_id=member.id, at=at(17))
    assert record.total_hours == 9.0
    assert record.overtime_hours == 1.0
    assert record.location == "Plant A"
    assert not record.is_manual_entry


def test_clock_in_after_shift_start_is_late(make_staff):
    member = make_staff(work_start_time="08:00")
    assert attendance_service.clock_in(staff_id=member.id, at=at(8, 1)).status == "late"


def test_cannot_clock_in_twice(make_staff):
    member = make_staff()
    attendance_service.clock_in(staff_id=member.id, at=at(8))
    with pytest.raises(AttendanceError):
        attendance_service.clock_in(staff_id=member.id, at=at(9))


def test_inactive_or_unknown_staff_cannot_clock_in(make_staff):
    member = make_staff(status="on_leave")
    with pytest.raises(AttendanceError):
        attendance_service.clock_in(staff_id=member.id, at=at(8))
    with pytest.raises(NotFoundError):
        attendance_service.clock_in(staff_id=999, at=at(8))


def test_clock_out_errors(make_staff):
    member = make_staff()
    with pytest.raises(AttendanceError):
        attendance_service.clock_out(staff_id=member.id, at=at(17))

    attendance_service.clock_in(staff_id=member.id, at=at(8))
    with pytest.raises(AttendanceError):
        attendance_service.clock_out(staff_id=member.id, at=at(7))


def test_break_flow(make_staff):
    member = make_staff()
    attendance_service.clock_in(staff_id=member.id, at=at(8))
    attendance_service.start_break(staff_id=member.id, at=at(12))

    status = attendance_service.get_current_status(member.id, at=at(12, 15))
    assert status["clocked_in"] is True
    assert status["on_break"] is True

    with pytest.raises(AttendanceError):
        attendance_service.clock_out(staff_id=member.id, at=at(12, 30))
    with pytest.raises(AttendanceError):
        attendance_service.start_break(staff_id=member.id, at=at(12, 30))

    attendance_service.end_break(staff_id=member.id, at=at(13))
    with pytest.raises(AttendanceError):
        attendance_service.start_break(staff_id=member.id, at=at(14))

    record = attendance_service.clock_out(staff_id=member.id, at=at(16))
    # breaks are tracked but not deducted
    assert record.total_hours == 8.0
    assert record.overtime_hours == 0.0

    status = attendance_service.get_current_status(member.id, at=at(17))
    assert status == {"staff_id": member.id, "clocked_in": False, "on_break": False, "record": None}


def test_end_break_without_break(make_staff):
    member = make_staff()
    attendance_service.clock_in(staff_id=member.id, at=at(8))
    with pytest.raises(AttendanceError):
        attendance_service.end_break(staff_id=member.id, at=at(9))


def test_manual_entry_status_derivation(make_staff):
    member = make_staff()
    absent = attendance_service.add_attendance_record(patch={"staff_id": member.id, "date": DAY})
    assert absent.status == "absent"
    assert absent.total_hours == 0
    assert absent.is_manual_entry

    late = attendance_service.add_attendance_record(
        patch={"staff_id": member.id, "date": date(2024, 1, 17),
               "clock_in": datetime(2024, 1, 17, 8, 30), "clock_out": datetime(2024, 1, 17, 17, 30)},
        approved_by="John Wilson",
    )
    assert late.status == "late"
    assert late.total_hours == 9.0
    assert late.approved_by == "John Wilson"

    explicit = attendance_service.add_attendance_record(
        patch={"staff_id": member.id, "date": date(2024, 1, 18), "status": "half_day"},
    )
    assert explicit.status == "half_day"


def test_manual_entry_rejects_reversed_times(make_staff):
    member = make_staff()
    with pytest.raises(ValidationError):
        attendance_service.add_attendance_record(
            patch={"staff_id": member.id, "date": DAY, "clock_in": at(17), "clock_out": at(8)},
        )


def test_update_rederives_hours(make_staff):
    member = make_staff()
    attendance_service.clock_in(staff_id=member.id, at=at(8))
    record = attendance_service.clock_out(staff_id=member.id, at=at(17))

    record = attendance_service.update_attendance_record(record.id, patch={"clock_out": at(19, 30)})
    assert record.total_hours == 11.5
    assert record.overtime_hours == 3.5

    with pytest.raises(ValidationError):
        attendance_service.update_attendance_record(record.id, patch={"clock_out": at(7)})
    with pytest.raises(NotFoundError):
        attendance_service.update_attendance_record(999, patch={"notes": "x"})


def test_queries(make_staff):
    ann = make_staff(first_name="Ann", department="production")
    bob = make_staff(first_name="Bob", department="warehouse")
    attendance_service.add_attendance_record(patch={"staff_id": ann.id, "date": DAY, "clock_in": at(8)})
    attendance_service.add_attendance_record(patch={"staff_id": bob.id, "date": DAY})
    attendance_service.add_attendance_record(patch={"staff_id": ann.id, "date": date(2024, 1, 10)})

    assert len(attendance_service.get_today_attendance(DAY)) == 2
    assert len(attendance_service.get_attendance_by_staff(ann.id)) == 2
    assert len(attendance_service.get_attendance_by_staff(ann.id, date_from=DAY)) == 1

    warehouse = attendance_service.list_attendance(AttendanceFilters(department=("warehouse",)))
    assert [r.staff_id for r in warehouse] == [bob.id]
