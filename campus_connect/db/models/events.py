from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class EventCategory(Base):
    __tablename__ = 'event_categories'
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)


class Event(Base):
    __tablename__ = 'events'
    id = Column(Integer, primary_key=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    category_id = Column(Integer, ForeignKey('event_categories.id', ondelete='SET NULL'), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=True)
    event_date = Column(DateTime(timezone=True), nullable=False)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    max_participants = Column(Integer, nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    creator = relationship("User")
    category = relationship("EventCategory")
    registrations = relationship("EventRegistration", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_events_event_date', 'event_date'),
        Index('idx_events_approved_date', 'is_approved', 'event_date'),
    )


class EventRegistration(Base):
    __tablename__ = 'event_registrations'
    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    registered_at = Column(DateTime(timezone=True), default=now_utc)

    event = relationship("Event", back_populates="registrations")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_registrations_event_user'),
    )
