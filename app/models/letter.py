# app/models/letter.py
"""
Permission letter and participant models
"""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship
from .base import Base, PreciseDateTime, utc_now

LETTER_TYPES = ('dispensasi', 'keterangan', 'surat_tugas', 'lomba')
LETTER_STATUSES = ('pending', 'approved', 'rejected')

class PermissionLetter(Base):
    __tablename__ = "permission_letter_TB"

    LETTER_ID = Column(String(36), primary_key=True)
    LETTER_NUMBER = Column(String(50), index=True, nullable=False)
    DATE = Column(Date, nullable=False)
    TIME_START = Column(String(10), nullable=False)
    TIME_END = Column(String(10), nullable=False)
    LOCATION = Column(String(200), nullable=False)
    ACTIVITY = Column(String(200), nullable=False)
    LETTER_TYPE = Column(SQLEnum(*LETTER_TYPES, name='letter_type'), nullable=False)
    REASON = Column(Text)
    STATUS = Column(SQLEnum(*LETTER_STATUSES, name='letter_status'), default='pending', nullable=False)
    CREATED_BY = Column(String(36), ForeignKey('user_TB.USER_ID'))
    APPROVED_BY = Column(String(36), ForeignKey('user_TB.USER_ID'))
    APPROVED_AT = Column(PreciseDateTime)
    CREATED_AT = Column(PreciseDateTime, default=utc_now, nullable=False)
    UPDATED_AT = Column(PreciseDateTime, default=utc_now, onupdate=utc_now, nullable=False)

    creator = relationship("User", foreign_keys=[CREATED_BY], lazy="selectin")
    approver = relationship("User", foreign_keys=[APPROVED_BY], lazy="selectin")
    participants = relationship(
        "PermissionParticipant",
        back_populates="letter",
        cascade="all, delete-orphan",
        order_by="PermissionParticipant.POSITION",
        lazy="selectin",
    )

class PermissionParticipant(Base):
    __tablename__ = "permission_participant_TB"

    PARTICIPANT_ID = Column(String(36), primary_key=True)
    LETTER_ID = Column(String(36), ForeignKey('permission_letter_TB.LETTER_ID', ondelete='CASCADE'), nullable=False)
    NAME = Column(String(100), nullable=False)
    CLASS_NAME = Column(String(50), nullable=False)
    REASON = Column(Text)
    POSITION = Column(Integer, default=0, nullable=False)
    CREATED_AT = Column(PreciseDateTime, default=utc_now, nullable=False)

    letter = relationship("PermissionLetter", back_populates="participants")
