from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from .base import Base, now_utc
from campus_connect.utils.roles import ROLE_STUDENT


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    # 'student'|'mentor'|'admin'
    role = Column(String(20), nullable=False, default=ROLE_STUDENT)
    bio = Column(Text, nullable=True)
    profile_image_url = Column(String(500), nullable=True)
    # Lockout bookkeeping
    failed_login_attempts = Column(Integer, nullable=False, default=0)
    account_locked_until = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint("role in ('student','mentor','admin')", name='ck_users_role'),
    )
