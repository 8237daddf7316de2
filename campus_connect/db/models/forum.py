from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Question(Base):
    __tablename__ = 'questions'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    author = relationship("User")
    answers = relationship("Answer", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)
    question_tags = relationship("QuestionTag", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_questions_user_id', 'user_id'),
        Index('idx_questions_created_at', 'created_at'),
    )


class Answer(Base):
    __tablename__ = 'answers'
    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey('questions.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    content = Column(Text, nullable=False)
    is_accepted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    question = relationship("Question", back_populates="answers")
    author = relationship("User")

    __table_args__ = (
        Index('idx_answers_question_id', 'question_id'),
    )


class Vote(Base):
    __tablename__ = 'votes'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    # Polymorphic target: 'question'|'answer'
    votable_type = Column(String(20), nullable=False)
    votable_id = Column(Integer, nullable=False)
    # 'upvote'|'downvote'
    vote_type = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        UniqueConstraint('user_id', 'votable_type', 'votable_id', name='uq_votes_user_target'),
        Index('idx_votes_target', 'votable_type', 'votable_id'),
        CheckConstraint("votable_type in ('question','answer')", name='ck_votes_votable_type'),
        CheckConstraint("vote_type in ('upvote','downvote')", name='ck_votes_vote_type'),
    )


class Tag(Base):
    __tablename__ = 'tags'
    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    question_tags = relationship("QuestionTag", back_populates="tag")


class QuestionTag(Base):
    __tablename__ = 'question_tags'
    question_id = Column(Integer, ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True)
    tag_id = Column(Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True)

    question = relationship("Question", back_populates="question_tags")
    tag = relationship("Tag", back_populates="question_tags")

    __table_args__ = (
        Index('idx_question_tags_tag_id', 'tag_id'),
    )
