from datetime import date, datetime

import pytest

from pipeworks.services import attendance_service, timesheet_service
from pipeworks.services.timesheet_service import TimesheetError
from pipeworks.validation import NotFoundError, ValidationError

WEEK = date(2024, 1, 15)


@pytest.fixture
def worked_week(make_staff):
    member = make_staff()
    shifts = [
        (datetime(2024, 1, 15, 8, 0), datetime(2024, 1, 15, 17, 0)),
        (datetime(2024, 1, 16, 8, 30), datetime(2024, 1, 16, 16, 30)),
    ]
    for start, end in shifts:
        attendance_service.clock_in(staff_id=member.id, at=start)
        attendance_service.start_break(staff_id=member.id, at=start.replace(hour=12, minute=0))
        attendance_service.end_break(staff_id=member.id, at=start.replace(hour=12, minute=30))
        attendance_service.clock_out(staff_id=member.id, at=end)
    attendance_service.add_attendance_record(patch={"staff_id": member.id, "date": date(2024, 1, 17)})
    # Outside the week
    attendance_service.add_attendance_record(patch={"staff_id": member.id, "date": date(2024, 1, 22)})
    return member


def test_generate_rolls_up_the_week(worked_week):
    sheet = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    assert sheet.status == "draft"
    assert sheet.week_end_date == date(2024, 1, 21)
    assert sheet.total_overtime_hours == 1.0
    assert sheet.total_regular_hours == 16.0
    assert sheet.total_break_hours == 1.0
    assert sheet.days_present == 2
    assert sheet.days_absent == 1
    assert sheet.days_late == 1


def test_regenerating_a_draft_updates_in_place(worked_week):
    first = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    attendance_service.add_attendance_record(
        patch={"staff_id": worked_week.id, "date": date(2024, 1, 18),
               "clock_in": datetime(2024, 1, 18, 8, 0), "clock_out": datetime(2024, 1, 18, 12, 0)},
    )
    second = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    assert second.id == first.id
    assert second.total_regular_hours == 20.0
    assert len(timesheet_service.list_timesheets(staff_id=worked_week.id)) == 1


def test_submit_then_approve(worked_week):
    sheet = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    sheet = timesheet_service.submit_timesheet(sheet.id)
    assert sheet.status == "submitted"
    assert sheet.submitted_at is not None

    sheet = timesheet_service.approve_timesheet(sheet.id, approved_by="John Wilson")
    assert sheet.status == "approved"
    assert sheet.approved_by == "John Wilson"
    assert sheet.approved_at is not None

    with pytest.raises(TimesheetError):
        timesheet_service.reject_timesheet(sheet.id, reason="late")
    with pytest.raises(TimesheetError):
        timesheet_service.submit_timesheet(sheet.id)
    with pytest.raises(TimesheetError):
        timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)


def test_rejected_sheet_can_be_regenerated(worked_week):
    sheet = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    timesheet_service.submit_timesheet(sheet.id)
    sheet = timesheet_service.reject_timesheet(sheet.id, reason="  Missing Friday  ", rejected_by="John Wilson")
    assert sheet.status == "rejected"
    assert sheet.comments == "Missing Friday"

    sheet = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    assert sheet.status == "draft"
    assert sheet.approved_by is None


def test_review_requires_reviewer_details(worked_week):
    sheet = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    with pytest.raises(ValidationError):
        timesheet_service.approve_timesheet(sheet.id, approved_by="")
    with pytest.raises(ValidationError):
        timesheet_service.reject_timesheet(sheet.id, reason="   ")
    with pytest.raises(NotFoundError):
        timesheet_service.submit_timesheet(999)


def test_list_filters_by_status(worked_week, make_staff):
    other = make_staff(first_name="Ann")
    sheet = timesheet_service.generate_timesheet(staff_id=worked_week.id, week_start=WEEK)
    timesheet_service.generate_timesheet(staff_id=other.id, week_start=WEEK)
    timesheet_service.submit_timesheet(sheet.id)

    assert [s.id for s in timesheet_service.list_timesheets(status="submitted")] == [sheet.id]
    assert len(timesheet_service.list_timesheets(status="draft")) == 1
    with pytest.raises(ValidationError):
        timesheet_service.list_timesheets(status="archived")
    with pytest.raises(NotFoundError):
        timesheet_service.generate_timesheet(staff_id=999, week_start=WEEK)
