# app/models/user.py
"""
User model (letter creators and approvers)
"""

from sqlalchemy import Boolean, Column, String
from sqlalchemy import Enum as SQLEnum
from .base import Base, PreciseDateTime, utc_now

class User(Base):
    __tablename__ = "user_TB"

    USER_ID = Column(String(36), primary_key=True)
    NAME = Column(String(100), nullable=False)
    EMAIL = Column(String(100), unique=True, nullable=False)
    ROLE = Column(SQLEnum('admin', 'teacher', 'staff', name='user_role'), default='staff', nullable=False)
    IS_ACTIVE = Column(Boolean, default=True, nullable=False)
    CREATED_AT = Column(PreciseDateTime, default=utc_now, nullable=False)
