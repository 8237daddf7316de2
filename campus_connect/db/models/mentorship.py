from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
    JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class MentorProfile(Base):
    __tablename__ = 'mentor_profiles'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    # List of skill names
    skills = Column(JSON().with_variant(JSONB(), 'postgresql'), nullable=False, default=list)
    experience_years = Column(Integer, nullable=True)
    # 'available'|'busy'|'unavailable'
    availability_status = Column(String(20), nullable=False, default='available')
    max_mentees = Column(Integer, nullable=False, default=5)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    user = relationship("User")

    __table_args__ = (
        CheckConstraint("availability_status in ('available','busy','unavailable')", name='ck_mentor_profiles_availability'),
        CheckConstraint("max_mentees >= 1", name='ck_mentor_profiles_max_mentees'),
    )


class MentorshipRequest(Base):
    __tablename__ = 'mentorship_requests'
    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    mentor_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    message = Column(Text, nullable=True)
    # 'pending'|'accepted'|'rejected'
    status = Column(String(20), nullable=False, default='pending')
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_mentorship_requests_mentor', 'mentor_id', 'status'),
        Index('idx_mentorship_requests_student', 'student_id', 'status'),
        CheckConstraint("status in ('pending','accepted','rejected')", name='ck_mentorship_requests_status'),
    )


class Mentorship(Base):
    __tablename__ = 'mentorships'
    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    mentor_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    request_id = Column(Integer, ForeignKey('mentorship_requests.id', ondelete='SET NULL'), nullable=True)
    # 'active'|'completed'
    status = Column(String(20), nullable=False, default='active')
    started_at = Column(DateTime(timezone=True), default=now_utc)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_mentorships_mentor_status', 'mentor_id', 'status'),
        Index('idx_mentorships_student_status', 'student_id', 'status'),
        CheckConstraint("status in ('active','completed')", name='ck_mentorships_status'),
    )
