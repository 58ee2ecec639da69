import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blackout import models
from blackout.database import Base
from blackout.domain import ASSIGNED_BY_ADMIN
from blackout.services import cycle, expiry

NOW = datetime(2026, 10, 21, 12, 0, tzinfo=timezone.utc)
WEEK_START = datetime(2026, 10, 19, 0, 0, tzinfo=timezone.utc)
WEEK_END = datetime(2026, 10, 25, 23, 59, 59, 999999, tzinfo=timezone.utc)


class StoreHelper:
    def __init__(self, factory):
        self.factory = factory

    def add_question_set(self, week_start=WEEK_START, week_end=WEEK_END) -> str:
        set_id = str(uuid.uuid4())
        with self.factory() as db:
            db.add(models.WeeklyQuestionSet(id=set_id, week_start=week_start, week_end=week_end, created_at=week_start))
            db.commit()
        return set_id

    def add_user(
        self,
        user_id: str | None = None,
        *,
        gender: str | None = None,
        preference: str | None = None,
        status: str = "active",
        role: str = "participant",
        joined_days_ago: int = 60,
        lat: float | None = None,
        lon: float | None = None,
    ) -> str:
        user_id = user_id or str(uuid.uuid4())
        with self.factory() as db:
            db.add(
                models.AppUser(
                    id=user_id,
                    name=user_id,
                    role=role,
                    status=status,
                    gender=gender,
                    preference=preference,
                    latitude=lat,
                    longitude=lon,
                    created_at=NOW - timedelta(days=joined_days_ago),
                )
            )
            db.commit()
        return user_id

    def add_answer(self, user_id: str, set_id: str, question_id: str, kind: str, value) -> None:
        with self.factory() as db:
            db.add(
                models.QuestionAnswer(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    question_id=question_id,
                    weekly_set_id=set_id,
                    answer={"type": kind, "value": value},
                )
            )
            db.commit()

    def add_match(
        self,
        user_a: str,
        user_b: str,
        *,
        week_start=WEEK_START,
        week_end=WEEK_END,
        status: str = "active",
        assigned_by: str = ASSIGNED_BY_ADMIN,
        with_slots: bool = True,
    ) -> str:
        match_id = str(uuid.uuid4())
        with self.factory() as db:
            db.add(
                models.WeeklyMatch(
                    id=match_id,
                    user_a_id=user_a,
                    user_b_id=user_b,
                    week_start=week_start,
                    week_end=week_end,
                    compatibility=0.0,
                    assigned_by=assigned_by,
                    status=status,
                )
            )
            db.flush()
            if with_slots:
                for uid in (user_a, user_b):
                    db.add(models.MatchSlot(id=str(uuid.uuid4()), match_id=match_id, user_id=uid, week_start=week_start))
            db.commit()
        return match_id

    def add_messages(self, match_id: str, sender_id: str, count: int) -> None:
        with self.factory() as db:
            for i in range(count):
                db.add(models.ChatMessage(id=str(uuid.uuid4()), match_id=match_id, sender_id=sender_id, body=f"msg {i}"))
            db.commit()

    def count_messages(self, match_id: str) -> int:
        with self.factory() as db:
            return int(db.execute(select(func.count()).select_from(models.ChatMessage).where(models.ChatMessage.match_id == match_id)).scalar_one())

    def matches(self) -> list[models.WeeklyMatch]:
        with self.factory() as db:
            rows = db.execute(select(models.WeeklyMatch).order_by(models.WeeklyMatch.created_at)).scalars().all()
            db.expunge_all()
            return list(rows)

    def match_status(self, match_id: str) -> str:
        with self.factory() as db:
            return db.get(models.WeeklyMatch, match_id).status

    def events(self, event_type: str | None = None) -> list[models.MatchEvent]:
        with self.factory() as db:
            stmt = select(models.MatchEvent)
            if event_type:
                stmt = stmt.where(models.MatchEvent.event_type == event_type)
            rows = db.execute(stmt).scalars().all()
            db.expunge_all()
            return list(rows)


@pytest.fixture
def session_factory(monkeypatch):
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    monkeypatch.setattr(cycle, "SessionLocal", factory)
    monkeypatch.setattr(expiry, "SessionLocal", factory)
    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory) -> StoreHelper:
    return StoreHelper(session_factory)
