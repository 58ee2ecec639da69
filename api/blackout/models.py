import uuid
from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, String, Text, UniqueConstraint, func
from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class AppUser(Base):
    __tablename__ = "app_user"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="participant")
    status = Column(String, nullable=False, default="onboarding")
    gender = Column(String, nullable=True)
    preference = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("idx_app_user_status_role", "status", "role"),)


class WeeklyQuestionSet(Base):
    __tablename__ = "weekly_question_set"

    id = Column(String(36), primary_key=True, default=_uuid)
    week_start = Column(DateTime(timezone=True), nullable=False)
    week_end = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class QuestionAnswer(Base):
    __tablename__ = "question_answer"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(String, nullable=False)
    weekly_set_id = Column(String(36), ForeignKey("weekly_question_set.id", ondelete="CASCADE"), nullable=False)
    answer = Column(JSON, nullable=False)
    answered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "question_id", "weekly_set_id", name="uq_answer_user_question_set"),
        Index("idx_question_answer_set_user", "weekly_set_id", "user_id"),
    )


class WeeklyMatch(Base):
    __tablename__ = "weekly_match"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_a_id = Column(String(36), ForeignKey("app_user.id"), nullable=False)
    user_b_id = Column(String(36), ForeignKey("app_user.id"), nullable=False)
    week_start = Column(DateTime(timezone=True), nullable=False)
    week_end = Column(DateTime(timezone=True), nullable=False)
    compatibility = Column(Float, nullable=False, default=0.0)
    score_breakdown = Column(JSON, nullable=True)
    assigned_by = Column(String, nullable=False, default="algorithm")
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("idx_weekly_match_status_week_end", "status", "week_end"),)


class MatchSlot(Base):
    """One row per participant per week; the unique key is what keeps a
    participant in at most one match per week no matter who writes it."""

    __tablename__ = "match_slot"

    id = Column(String(36), primary_key=True, default=_uuid)
    match_id = Column(String(36), ForeignKey("weekly_match.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("app_user.id"), nullable=False)
    week_start = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("week_start", "user_id", name="uq_match_slot_week_user"),)


class ChatMessage(Base):
    __tablename__ = "chat_message"

    id = Column(String(36), primary_key=True, default=_uuid)
    match_id = Column(String(36), ForeignKey("weekly_match.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(String(36), ForeignKey("app_user.id"), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("idx_chat_message_match_id", "match_id"),)


class MatchEvent(Base):
    __tablename__ = "match_event"

    id = Column(String(36), primary_key=True, default=_uuid)
    match_id = Column(String(36), nullable=True)
    event_type = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
