# app/api/user.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import get_async_session
from app.schemas.commons_schemas import MessageResponse
from app.schemas.user_schemas import UserCreateRequest, UserResponse, UserUpdateRequest
from app.services.user_service import user_service, UserNotFoundError, UserValidationError
from app.utils.logger import logger

router = APIRouter(tags=["users"])

NOT_FOUND_MESSAGE = "User not found"


@router.get("/users", response_model=List[UserResponse])
async def list_users(session: AsyncSession = Depends(get_async_session)):
    try:
        users = await user_service.list_users(session)
        return [user_service.to_response(user) for user in users]
    except Exception as e:
        logger.error(f" User list failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(request: UserCreateRequest, session: AsyncSession = Depends(get_async_session)):
    try:
        user = await user_service.create_user(session, request)
        return user_service.to_response(user)
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f" User creation failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, session: AsyncSession = Depends(get_async_session)):
    try:
        user = await user_service.get_user(session, user_id)
        return user_service.to_response(user)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.error(f" User fetch failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, request: UserUpdateRequest, session: AsyncSession = Depends(get_async_session)):
    """Replace name, email, role and active flag. `is_active: false` deactivates."""
    try:
        user = await user_service.update_user(session, user_id, request)
        return user_service.to_response(user)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f" User update failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, session: AsyncSession = Depends(get_async_session)):
    try:
        await user_service.delete_user(session, user_id)
        return MessageResponse(message="User deleted successfully")
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except UserValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f" User deletion failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
