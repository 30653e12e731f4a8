"""
Permission letter service
SQLAlchemy async CRUD, letter numbering and approval transitions
"""

import re
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.models import PermissionLetter, PermissionParticipant, utc_now
from app.schemas.letter_schemas import (
    LetterCreateRequest,
    LetterResponse,
    LetterUpdateRequest,
    ParticipantInput,
    ParticipantResponse,
    UserSummary,
)
from app.schemas.verify_schemas import VerifiableLetter
from app.utils.logger import logger
from app.utils.timestamp_policy import to_datetime_safe

LETTER_NUMBER_CODE = "IZIN"
_LEADING_NUMBER = re.compile(r"(\d+)")


class LetterNotFoundError(Exception):
    pass


class LetterValidationError(Exception):
    pass


def format_letter_number(sequence: int, month: int, year: int) -> str:
    return f"{sequence:03d}/{LETTER_NUMBER_CODE}/{month:02d}/{year}"


def _month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return start, end


def _build_participants(participants: List[ParticipantInput]) -> List[PermissionParticipant]:
    return [
        PermissionParticipant(
            PARTICIPANT_ID=str(uuid.uuid4()),
            NAME=p.name,
            CLASS_NAME=p.class_name,
            REASON=p.reason,
            POSITION=index,
        )
        for index, p in enumerate(participants)
    ]


class LetterService:
    async def generate_letter_number(self, session: AsyncSession, now: Optional[datetime] = None) -> str:
        """Next `NNN/IZIN/MM/YYYY` number for the month of `now`."""
        now = now or utc_now()
        start, end = _month_bounds(now)

        query = select(PermissionLetter.LETTER_NUMBER).where(
            PermissionLetter.CREATED_AT >= start,
            PermissionLetter.CREATED_AT < end,
        ).order_by(PermissionLetter.CREATED_AT.desc()).limit(1)
        result = await session.execute(query)
        last_number = result.scalar_one_or_none()

        next_sequence = 1
        if last_number:
            match = _LEADING_NUMBER.search(last_number)
            if match:
                next_sequence = int(match.group(1)) + 1

        return format_letter_number(next_sequence, now.month, now.year)

    async def create_letter(self, session: AsyncSession, request: LetterCreateRequest) -> PermissionLetter:
        required = [request.date, request.time_start, request.time_end, request.location,
                    request.activity, request.letter_type]
        if any(not value for value in required):
            raise LetterValidationError("Semua field wajib harus diisi")
        if not request.participants:
            raise LetterValidationError("Minimal harus ada satu peserta")

        now = utc_now()
        letter_number = await self.generate_letter_number(session, now)

        letter = PermissionLetter(
            LETTER_ID=str(uuid.uuid4()),
            LETTER_NUMBER=letter_number,
            DATE=request.date,
            TIME_START=request.time_start,
            TIME_END=request.time_end,
            LOCATION=request.location,
            ACTIVITY=request.activity,
            LETTER_TYPE=request.letter_type,
            REASON=request.reason or "",
            STATUS="pending",
            CREATED_BY=request.created_by,
            CREATED_AT=now,
            UPDATED_AT=now,
        )
        letter.participants = _build_participants(request.participants)

        session.add(letter)
        await session.commit()
        logger.info(f" Letter created: {letter_number} ({len(request.participants)} participants)")

        return await self.get_letter(session, letter.LETTER_ID)

    async def get_letter(self, session: AsyncSession, letter_id: str) -> PermissionLetter:
        query = select(PermissionLetter).where(
            PermissionLetter.LETTER_ID == letter_id
        ).execution_options(populate_existing=True)
        result = await session.execute(query)
        letter = result.scalar_one_or_none()
        if letter is None:
            raise LetterNotFoundError(letter_id)
        return letter

    async def list_letters(
        self,
        session: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        status: str = "",
    ) -> Tuple[List[PermissionLetter], int]:
        page = max(page, 1)
        limit = max(limit, 1)

        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(
                PermissionLetter.ACTIVITY.ilike(pattern),
                PermissionLetter.LOCATION.ilike(pattern),
                PermissionLetter.LETTER_TYPE.ilike(pattern),
            ))
        if status:
            conditions.append(PermissionLetter.STATUS == status)

        query = select(PermissionLetter).where(*conditions).order_by(
            PermissionLetter.CREATED_AT.desc()
        ).offset((page - 1) * limit).limit(limit)
        count_query = select(func.count()).select_from(PermissionLetter).where(*conditions)

        letters = (await session.execute(query)).scalars().all()
        total = (await session.execute(count_query)).scalar_one()
        return list(letters), total

    async def update_letter(
        self,
        session: AsyncSession,
        letter_id: str,
        request: LetterUpdateRequest,
    ) -> PermissionLetter:
        letter = await self.get_letter(session, letter_id)
        provided = request.model_fields_set

        if "status" in provided and request.status:
            letter.STATUS = request.status
            if request.status in ("approved", "rejected"):
                # A new approval time invalidates codes printed before it
                letter.APPROVED_AT = utc_now()
                if request.approved_by:
                    letter.APPROVED_BY = request.approved_by
            else:
                letter.APPROVED_AT = None
                letter.APPROVED_BY = None
            logger.info(f" Letter {letter.LETTER_NUMBER} status -> {request.status}")

        if "activity" in provided and request.activity is not None:
            letter.ACTIVITY = request.activity
        if "location" in provided and request.location is not None:
            letter.LOCATION = request.location
        if "date" in provided and request.date is not None:
            letter.DATE = request.date
        if "time_start" in provided and request.time_start is not None:
            letter.TIME_START = request.time_start
        if "time_end" in provided and request.time_end is not None:
            letter.TIME_END = request.time_end
        if "letter_type" in provided and request.letter_type is not None:
            letter.LETTER_TYPE = request.letter_type
        if "reason" in provided:
            letter.REASON = request.reason or None

        # null leaves participants untouched, a list (even empty) replaces them
        if "participants" in provided and request.participants is not None:
            letter.participants = _build_participants(request.participants)

        letter.UPDATED_AT = utc_now()
        await session.commit()

        return await self.get_letter(session, letter_id)

    async def delete_letter(self, session: AsyncSession, letter_id: str) -> None:
        letter = await self.get_letter(session, letter_id)
        await session.delete(letter)
        await session.commit()
        logger.info(f" Letter deleted: {letter.LETTER_NUMBER}")

    async def find_approved_by_number(self, session: AsyncSession, letter_number: str) -> Optional[VerifiableLetter]:
        """Exact number match restricted to approved letters."""
        query = select(PermissionLetter).where(
            PermissionLetter.LETTER_NUMBER == letter_number.strip(),
            PermissionLetter.STATUS == "approved",
        ).limit(1)
        result = await session.execute(query)
        letter = result.scalar_one_or_none()
        if letter is None:
            return None
        return self.to_verifiable(letter)

    def to_verifiable(self, letter: PermissionLetter) -> VerifiableLetter:
        return VerifiableLetter(
            id=letter.LETTER_ID,
            letter_number=letter.LETTER_NUMBER,
            status=letter.STATUS,
            activity=letter.ACTIVITY,
            location=letter.LOCATION,
            date=letter.DATE.isoformat() if letter.DATE else None,
            letter_type=letter.LETTER_TYPE,
            participant_count=len(letter.participants),
            creator_name=letter.creator.NAME if letter.creator else None,
            approver_name=letter.approver.NAME if letter.approver else None,
            approved_at=to_datetime_safe(letter.APPROVED_AT),
            created_at=to_datetime_safe(letter.CREATED_AT),
        )

    def to_response(self, letter: PermissionLetter) -> LetterResponse:
        def _user(user) -> Optional[UserSummary]:
            if user is None:
                return None
            return UserSummary(id=user.USER_ID, name=user.NAME, email=user.EMAIL)

        return LetterResponse(
            id=letter.LETTER_ID,
            letter_number=letter.LETTER_NUMBER,
            date=letter.DATE,
            time_start=letter.TIME_START,
            time_end=letter.TIME_END,
            location=letter.LOCATION,
            activity=letter.ACTIVITY,
            letter_type=letter.LETTER_TYPE,
            reason=letter.REASON,
            status=letter.STATUS,
            created_by=letter.CREATED_BY,
            approved_by=letter.APPROVED_BY,
            approved_at=to_datetime_safe(letter.APPROVED_AT),
            created_at=to_datetime_safe(letter.CREATED_AT),
            updated_at=to_datetime_safe(letter.UPDATED_AT),
            creator=_user(letter.creator),
            approver=_user(letter.approver),
            participants=[
                ParticipantResponse(
                    id=p.PARTICIPANT_ID,
                    name=p.NAME,
                    class_name=p.CLASS_NAME,
                    reason=p.REASON,
                )
                for p in letter.participants
            ],
        )


letter_service = LetterService()
