import asyncio
from datetime import date, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from checkin.db.database import AsyncSessionLocal
from checkin.models import Submission, Vote
from checkin.services.ledger import (
    clamp_page,
    submission_window,
    reject_identity_fields,
    submission_ledger,
    vote_ledger,
)
from checkin.utils.dates import server_today, utcnow
from checkin.utils.errors import (
    Conflict,
    Forbidden,
    IdentitySpoofAttempt,
    NotFound,
    Unauthenticated,
    ValidationError,
)

from tests.conftest import principal_of

SUBMISSION = {"attendanceClass": "Math 101", "fileAcademics": "notes.pdf", "qdOfficial": "QD-7"}


async def test_has_submitted_today_flow(db, user):
    principal = principal_of(user)

    assert await submission_ledger.has_submitted_today(db, principal) is False
    assert submission_ledger.status_message(False) == "Ready to submit"

    record = await submission_ledger.submit(db, principal, SUBMISSION)

    assert record.account_id == user.id
    assert record.record_date == server_today()
    assert record.attendance_class == "Math 101"
    assert record.qd_official == "QD-7"
    assert await submission_ledger.has_submitted_today(db, principal) is True
    assert submission_ledger.status_message(True) == "Already submitted today"


async def test_second_submission_same_day_conflicts(db, user):
    principal = principal_of(user)
    await submission_ledger.submit(db, principal, SUBMISSION)

    with pytest.raises(Conflict) as exc_info:
        await submission_ledger.submit(db, principal, {"attendanceClass": "Other"})

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "You have already submitted for today"
    assert await db.scalar(select(func.count()).select_from(Submission)) == 1


async def test_yesterdays_record_does_not_block_today(db, user):
    now = utcnow()
    db.add(
        Submission(
            account_id=user.id,
            record_date=server_today() - timedelta(days=1),
            attendance_class="Yesterday",
            created_at=now,
            updated_at=now,
        )
    )
    await db.commit()
    principal = principal_of(user)

    assert await submission_ledger.has_submitted_today(db, principal) is False
    await submission_ledger.submit(db, principal, SUBMISSION)


async def test_records_are_per_account(db, user, admin):
    await submission_ledger.submit(db, principal_of(user), SUBMISSION)
    await submission_ledger.submit(db, principal_of(admin), SUBMISSION)

    assert await db.scalar(select(func.count()).select_from(Submission)) == 2


async def test_concurrent_submissions_yield_exactly_one_record(user):
    principal = principal_of(user)

    async def attempt(n):
        async with AsyncSessionLocal() as session:
            try:
                await submission_ledger.submit(session, principal, {"attendanceClass": f"try {n}"})
                return "ok"
            except Conflict:
                return "conflict"

    outcomes = await asyncio.gather(*(attempt(n) for n in range(5)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 4
    async with AsyncSessionLocal() as session:
        assert await session.scalar(select(func.count()).select_from(Submission)) == 1


async def test_other_integrity_errors_are_not_reported_as_conflict(db, user, monkeypatch):
    async def failing_commit():
        raise IntegrityError(
            "INSERT INTO submissions", {}, Exception("FOREIGN KEY constraint failed")
        )

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(IntegrityError):
        await submission_ledger.submit(db, principal_of(user), SUBMISSION)

    monkeypatch.undo()
    assert await db.scalar(select(func.count()).select_from(Submission)) == 0


@pytest.mark.parametrize("field", ["userId", "user_id", "accountId", "account_id"])
async def test_identity_fields_are_rejected(db, user, field):
    payload = dict(SUBMISSION, **{field: user.id})

    with pytest.raises(IdentitySpoofAttempt) as exc_info:
        await submission_ledger.submit(db, principal_of(user), payload)

    assert exc_info.value.code == "IDENTITY_SPOOF_ATTEMPT"
    assert exc_info.value.status_code == 400
    assert await db.scalar(select(func.count()).select_from(Submission)) == 0


def test_reject_identity_fields_requires_object():
    with pytest.raises(ValidationError):
        reject_identity_fields(["attendanceClass"])
    assert reject_identity_fields({"vote": "yes"}) == {"vote": "yes"}


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"attendanceClass": ""},
        {"attendanceClass": "   "},
        {"fileAcademics": "notes.pdf"},
        {"attendanceClass": "Math", "extra": "field"},
        {"attendanceClass": "Math", "recordDate": "2020-01-01"},
    ],
)
async def test_submission_payload_validation(db, user, payload):
    with pytest.raises(ValidationError):
        await submission_ledger.submit(db, principal_of(user), payload)


async def test_missing_field_is_named_in_details(db, user):
    with pytest.raises(ValidationError) as exc_info:
        await submission_ledger.submit(db, principal_of(user), {"qdOfficial": "x"})

    assert "attendanceClass" in exc_info.value.details["fields"]


async def test_submit_requires_principal(db):
    with pytest.raises(Unauthenticated):
        await submission_ledger.submit(db, None, SUBMISSION)


async def test_votes_follow_the_same_daily_rule(db, user):
    principal = principal_of(user)

    assert await vote_ledger.has_submitted_today(db, principal) is False
    vote = await vote_ledger.submit(db, principal, {"vote": " yes "})
    assert vote.vote == "yes"
    assert await vote_ledger.has_submitted_today(db, principal) is True

    with pytest.raises(Conflict) as exc_info:
        await vote_ledger.submit(db, principal, {"vote": "no"})
    assert exc_info.value.message == "You have already voted today"


async def test_vote_and_submission_are_independent(db, user):
    principal = principal_of(user)
    await vote_ledger.submit(db, principal, {"vote": "yes"})

    assert await submission_ledger.has_submitted_today(db, principal) is False


async def test_votes_cannot_be_updated(db, user):
    principal = principal_of(user)
    vote = await vote_ledger.submit(db, principal, {"vote": "yes"})

    with pytest.raises(Forbidden):
        await vote_ledger.update_own(db, principal, vote.id, {"vote": "no"})


async def test_owner_updates_submission(db, user):
    principal = principal_of(user)
    record = await submission_ledger.submit(db, principal, SUBMISSION)

    updated = await submission_ledger.update_own(
        db, principal, record.id, {"fileAcademics": "revised.pdf"}
    )

    assert updated.file_academics == "revised.pdf"
    assert updated.attendance_class == "Math 101"
    assert updated.record_date == record.record_date


async def test_update_cannot_clear_attendance_class(db, user):
    principal = principal_of(user)
    record = await submission_ledger.submit(db, principal, SUBMISSION)

    with pytest.raises(ValidationError):
        await submission_ledger.update_own(db, principal, record.id, {"attendanceClass": None})


async def test_update_of_someone_elses_submission_is_not_found(db, user, admin):
    record = await submission_ledger.submit(db, principal_of(admin), SUBMISSION)

    with pytest.raises(NotFound):
        await submission_ledger.update_own(
            db, principal_of(user), record.id, {"fileAcademics": "mine.pdf"}
        )


async def test_update_rejects_identity_fields(db, user):
    principal = principal_of(user)
    record = await submission_ledger.submit(db, principal, SUBMISSION)

    with pytest.raises(IdentitySpoofAttempt):
        await submission_ledger.update_own(db, principal, record.id, {"userId": "other"})


async def test_list_mine_newest_first(db, user, admin):
    now = utcnow()
    today = server_today()
    for days_ago in (2, 0, 1):
        db.add(
            Submission(
                account_id=user.id,
                record_date=today - timedelta(days=days_ago),
                attendance_class=f"day -{days_ago}",
                created_at=now,
                updated_at=now,
            )
        )
    await submission_ledger.submit(db, principal_of(admin), SUBMISSION)

    records, total = await submission_ledger.list_mine(db, principal_of(user), limit=2, offset=0)

    assert total == 3
    assert [r.record_date for r in records] == [today, today - timedelta(days=1)]


async def test_list_all_requires_admin(db, user):
    with pytest.raises(Forbidden):
        await submission_ledger.list_all(db, principal_of(user), None, 10, 0)


async def test_list_all_filters_by_date_and_joins_account(db, user, admin):
    now = utcnow()
    db.add(
        Vote(
            account_id=user.id,
            record_date=date(2024, 1, 15),
            vote="old",
            created_at=now,
            updated_at=now,
        )
    )
    await db.commit()
    await vote_ledger.submit(db, principal_of(user), {"vote": "today"})

    rows, total = await vote_ledger.list_all(db, principal_of(admin), date(2024, 1, 15), 50, 0)

    assert total == 1
    record, account = rows[0]
    assert record.vote == "old"
    assert account.email == "user@example.com"

    rows, total = await vote_ledger.list_all(db, principal_of(admin), None, 50, 0)
    assert total == 2


async def test_recent_activity_window(db, user):
    now = utcnow()
    today = server_today()
    for days_ago in (0, 7, 30, 31, 90):
        db.add(
            Submission(
                account_id=user.id,
                record_date=today - timedelta(days=days_ago),
                attendance_class="x",
                created_at=now,
                updated_at=now,
            )
        )
    await db.commit()

    assert await submission_ledger.recent_activity_count(db, user.id) == 3
    assert await submission_ledger.recent_activity_count(db, user.id, window_days=0) == 1
    assert await submission_ledger.recent_activity_count(db, user.id, window_days=100) == 5
    with pytest.raises(ValidationError):
        await submission_ledger.recent_activity_count(db, user.id, window_days=-1)


def test_clamp_page():
    assert clamp_page(1000, 0) == (100, 0)
    assert clamp_page(0, -5) == (1, 0)
    assert clamp_page(20, 40) == (20, 40)


def test_submission_window_uses_server_date():
    window = submission_window()

    assert window.record_date == server_today()
    assert window.closed == (window.server_time.time() >= window.cutoff)
