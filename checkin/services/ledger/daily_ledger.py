"""Daily ledger: at most one record per account per calendar day.

The same rules apply to submissions and votes, so one service class is
instantiated per table. "Today" is the server's calendar date and is
computed once per call. Duplicate detection relies on the
``(account_id, record_date)`` unique constraint: an application-level
pre-check would leave a window between the check and the insert.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from checkin.config import settings
from checkin.models import Account, DailyRecordMixin, Submission, Vote
from checkin.schemas.ledger import SubmissionCreate, SubmissionUpdate, VoteCreate
from checkin.services.authority import Principal, Tier, require_tier
from checkin.utils.constants import IDENTITY_FIELDS, MAX_PAGE_SIZE
from checkin.utils.dates import parse_cutoff, server_now, server_today, utcnow, window_start
from checkin.utils.errors import (
    Conflict,
    Forbidden,
    IdentitySpoofAttempt,
    NotFound,
    Unauthenticated,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionWindow:
    """Where "now" sits relative to today's cutoff"""

    record_date: date
    server_time: datetime
    cutoff: time
    closed: bool


def submission_window() -> SubmissionWindow:
    """Today's date and whether the late cutoff has passed.

    The ledger does not enforce the cutoff; callers decide what a late
    record means.
    """
    now = server_now()
    cutoff = parse_cutoff(settings.submission_cutoff)
    return SubmissionWindow(
        record_date=now.date(),
        server_time=now,
        cutoff=cutoff,
        closed=now.time() >= cutoff,
    )


def clamp_page(limit: int, offset: int) -> tuple[int, int]:
    """Cap ``limit`` to the maximum page size and floor both at sane values."""
    return max(1, min(limit, MAX_PAGE_SIZE)), max(0, offset)


def reject_identity_fields(payload: Any) -> dict:
    """Refuse payloads that name an account.

    Raises:
        ValidationError: If the payload is not a JSON object
        IdentitySpoofAttempt: If any identity key is present, whatever its value
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    if IDENTITY_FIELDS.intersection(payload.keys()):
        raise IdentitySpoofAttempt()
    return payload


def parse_payload(schema: Type[BaseModel], payload: dict) -> BaseModel:
    """Validate a payload against a schema, translating pydantic errors."""
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise ValidationError(
            "Missing or invalid fields: " + ", ".join(fields),
            details={"fields": fields},
        )


class DailyLedgerService:
    """Per-day record operations for one record table."""

    def __init__(
        self,
        model: Type[DailyRecordMixin],
        create_schema: Type[BaseModel],
        kind: str,
        done_message: str,
        ready_message: str,
        conflict_message: str,
        update_schema: Type[BaseModel] | None = None,
    ):
        self.model = model
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.kind = kind
        self.done_message = done_message
        self.ready_message = ready_message
        self.conflict_message = conflict_message

    def today(self) -> date:
        return server_today()

    async def has_submitted_today(self, db: AsyncSession, principal: Principal) -> bool:
        """Whether the caller already has a record for today."""
        if principal is None:
            raise Unauthenticated()
        return await self._has_record(db, principal.account_id, self.today())

    async def _has_record(self, db: AsyncSession, account_id: str, record_date: date) -> bool:
        result = await db.execute(
            select(self.model.id)
            .where(
                self.model.account_id == account_id,
                self.model.record_date == record_date,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    def status_message(self, has_record: bool) -> str:
        return self.done_message if has_record else self.ready_message

    async def submit(
        self,
        db: AsyncSession,
        principal: Principal,
        payload: Any,
    ) -> DailyRecordMixin:
        """Create today's record for the caller.

        Raises:
            Unauthenticated: No principal
            IdentitySpoofAttempt: Payload carries an account/user id
            ValidationError: Required fields missing or invalid
            Conflict: A record for (account, today) already exists
            IntegrityError: Any other constraint failure, re-raised as is
        """
        if principal is None:
            raise Unauthenticated()

        try:
            reject_identity_fields(payload)
        except IdentitySpoofAttempt:
            logger.warning(
                f"Account {principal.account_id} sent an identity field in a {self.kind} payload"
            )
            raise

        data = parse_payload(self.create_schema, payload)
        today = self.today()
        now = utcnow()

        record = self.model(
            account_id=principal.account_id,
            record_date=today,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        db.add(record)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            # Only the (account_id, record_date) constraint means "already recorded"
            if not await self._has_record(db, principal.account_id, today):
                raise
            logger.info(
                f"Duplicate {self.kind} rejected for account {principal.account_id} on {today}"
            )
            raise Conflict(self.conflict_message)

        await db.refresh(record)
        logger.info(f"Recorded {self.kind} {record.id} for account {principal.account_id} on {today}")
        return record

    async def update_own(
        self,
        db: AsyncSession,
        principal: Principal,
        record_id: int,
        payload: Any,
    ) -> DailyRecordMixin:
        """Patch payload fields of one of the caller's own records.

        Raises:
            Forbidden: This record kind is immutable
            IdentitySpoofAttempt: Payload carries an account/user id
            ValidationError: Invalid fields
            NotFound: No such record owned by the caller
        """
        if principal is None:
            raise Unauthenticated()
        if self.update_schema is None:
            raise Forbidden(f"A {self.kind} cannot be changed once recorded")

        reject_identity_fields(payload)
        changes = parse_payload(self.update_schema, payload).model_dump(exclude_unset=True)
        if "attendance_class" in changes and changes["attendance_class"] is None:
            raise ValidationError("attendance_class cannot be empty")

        result = await db.execute(
            select(self.model).where(
                self.model.id == record_id,
                self.model.account_id == principal.account_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFound(f"{self.kind.capitalize()} not found")

        for field, value in changes.items():
            setattr(record, field, value)
        record.updated_at = utcnow()

        await db.commit()
        await db.refresh(record)
        return record

    async def list_mine(
        self,
        db: AsyncSession,
        principal: Principal,
        limit: int,
        offset: int,
    ) -> tuple[list[DailyRecordMixin], int]:
        """The caller's records, newest date first."""
        if principal is None:
            raise Unauthenticated()
        limit, offset = clamp_page(limit, offset)
        condition = self.model.account_id == principal.account_id

        total = await db.scalar(select(func.count()).select_from(self.model).where(condition))
        result = await db.execute(
            select(self.model)
            .where(condition)
            .order_by(self.model.record_date.desc(), self.model.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total or 0

    async def list_all(
        self,
        db: AsyncSession,
        principal: Principal,
        record_date: date | None,
        limit: int,
        offset: int,
    ) -> tuple[list[tuple[DailyRecordMixin, Account | None]], int]:
        """All records joined with their account (admin only)."""
        require_tier(principal, Tier.ADMIN)
        limit, offset = clamp_page(limit, offset)

        conditions = []
        if record_date is not None:
            conditions.append(self.model.record_date == record_date)

        count_query = select(func.count()).select_from(self.model)
        query = (
            select(self.model, Account)
            .outerjoin(Account, Account.id == self.model.account_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(limit)
            .offset(offset)
        )
        if conditions:
            count_query = count_query.where(*conditions)
            query = query.where(*conditions)

        total = await db.scalar(count_query)
        result = await db.execute(query)

        logger.info(f"Admin {principal.account_id} listed {self.kind} records")
        return [(row[0], row[1]) for row in result.all()], total or 0

    def _window_condition(self, account_id_column, today: date, window_days: int):
        return and_(
            self.model.account_id == account_id_column,
            self.model.record_date >= window_start(today, window_days),
            self.model.record_date <= today,
        )

    async def recent_activity_count(
        self,
        db: AsyncSession,
        account_id: str,
        window_days: int | None = None,
    ) -> int:
        """Records with ``record_date`` in ``[today - window_days, today]``."""
        if window_days is None:
            window_days = settings.activity_window_days
        if window_days < 0:
            raise ValidationError("window_days must be non-negative")
        count = await db.scalar(
            select(func.count())
            .select_from(self.model)
            .where(self._window_condition(account_id, self.today(), window_days))
        )
        return count or 0

    def activity_count_column(self, account_id_column, window_days: int | None = None):
        """Correlated scalar subquery counting recent records per account row."""
        if window_days is None:
            window_days = settings.activity_window_days
        return (
            select(func.count(self.model.id))
            .where(self._window_condition(account_id_column, self.today(), window_days))
            .correlate_except(self.model)
            .scalar_subquery()
        )


# Global instances
submission_ledger = DailyLedgerService(
    model=Submission,
    create_schema=SubmissionCreate,
    update_schema=SubmissionUpdate,
    kind="submission",
    done_message="Already submitted today",
    ready_message="Ready to submit",
    conflict_message="You have already submitted for today",
)

vote_ledger = DailyLedgerService(
    model=Vote,
    create_schema=VoteCreate,
    kind="vote",
    done_message="Already voted today",
    ready_message="Ready to vote",
    conflict_message="You have already voted today",
)
