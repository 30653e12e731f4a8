"""
User service
Accounts that create and approve permission letters. No credentials are kept here.
"""

import uuid
from typing import List

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import settings
from app.models import PermissionLetter, User
from app.schemas.user_schemas import UserCreateRequest, UserResponse, UserUpdateRequest
from app.utils.logger import logger
from app.utils.timestamp_policy import to_datetime_safe


class UserNotFoundError(Exception):
    pass


class UserValidationError(Exception):
    pass


class UserService:
    async def list_users(self, session: AsyncSession) -> List[User]:
        """All users, newest first."""
        query = select(User).order_by(User.CREATED_AT.desc())
        result = await session.execute(query)
        return list(result.scalars().all())

    async def get_user(self, session: AsyncSession, user_id: str) -> User:
        result = await session.execute(select(User).where(User.USER_ID == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _email_taken(self, session: AsyncSession, email: str, exclude_id: str = None) -> bool:
        query = select(User.USER_ID).where(User.EMAIL == email)
        if exclude_id:
            query = query.where(User.USER_ID != exclude_id)
        result = await session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create_user(self, session: AsyncSession, request: UserCreateRequest) -> User:
        name = (request.name or "").strip()
        email = (request.email or "").strip()
        if not name or not email:
            raise UserValidationError("Name and email are required")

        if await self._email_taken(session, email):
            raise UserValidationError("User with this email already exists")

        user = User(
            USER_ID=str(uuid.uuid4()),
            NAME=name,
            EMAIL=email,
            ROLE=request.role,
            IS_ACTIVE=request.is_active,
        )
        session.add(user)
        await session.commit()
        logger.info(f" User created: {email} ({request.role})")

        return await self.get_user(session, user.USER_ID)

    async def update_user(self, session: AsyncSession, user_id: str, request: UserUpdateRequest) -> User:
        name = (request.name or "").strip()
        email = (request.email or "").strip()
        if not name or not email or not request.role:
            raise UserValidationError("Name, email, dan role wajib diisi")

        user = await self.get_user(session, user_id)
        if await self._email_taken(session, email, exclude_id=user_id):
            raise UserValidationError("Email sudah digunakan")

        user.NAME = name
        user.EMAIL = email
        user.ROLE = request.role
        user.IS_ACTIVE = bool(request.is_active)
        await session.commit()

        if not user.IS_ACTIVE:
            logger.info(f" User deactivated: {email}")
        return user

    async def delete_user(self, session: AsyncSession, user_id: str) -> None:
        user = await self.get_user(session, user_id)
        if user.EMAIL == settings.dev_admin_email:
            raise UserValidationError("Developer account cannot be deleted")

        # Letters keep their creator and approver, deactivate such users instead
        count_query = select(func.count()).select_from(PermissionLetter).where(
            or_(PermissionLetter.CREATED_BY == user_id, PermissionLetter.APPROVED_BY == user_id)
        )
        if (await session.execute(count_query)).scalar_one():
            raise UserValidationError("User masih tercatat pada surat izin, nonaktifkan saja")

        await session.delete(user)
        await session.commit()
        logger.info(f" User deleted: {user.EMAIL}")

    def to_response(self, user: User) -> UserResponse:
        return UserResponse(
            id=user.USER_ID,
            name=user.NAME,
            email=user.EMAIL,
            role=user.ROLE,
            is_active=user.IS_ACTIVE,
            created_at=to_datetime_safe(user.CREATED_AT),
        )


user_service = UserService()
