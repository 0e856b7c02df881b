"""
Run-related database models.

Models:
- Run: one Strava running activity mapped locally
- RunAnalysis: AI coaching analysis, at most one per run
- Conversation: follow-up chat about a run, one per (user, run)
"""

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Integer,
    Float,
    ForeignKey,
    Text,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, utcnow


class Run(Base):
    """
    Strava running activity.

    Keyed by strava_activity_id, which is unique across all users.
    Only the columns produced by the activity transformer are written
    by sync; cadence may also be backfilled before analysis.
    """

    __tablename__ = "runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)

    # Strava identifiers
    strava_activity_id = Column(String(20), unique=True, nullable=False)

    # Activity info
    name = Column(String(255), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Core metrics
    distance = Column(Integer, nullable=True)  # meters
    duration = Column(Integer, nullable=True)  # moving time, seconds
    pace = Column(Float, nullable=True)  # min/km
    avg_heart_rate = Column(Integer, nullable=True)
    cadence = Column(Integer, nullable=True)  # steps per minute
    elevation_gain = Column(Integer, nullable=True)  # meters

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    analysis = relationship(
        "RunAnalysis",
        back_populates="run",
        uselist=False,
        cascade="all, delete-orphan"
    )
    conversations = relationship(
        "Conversation",
        back_populates="run",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Run {self.strava_activity_id} user={self.user_id} {self.distance}m>"


class RunAnalysis(Base):
    """
    Coaching analysis for a run.

    insights: [{"title", "detail", "type": tip|positive|warning}, ...]
    recommendations: [{"title", "detail"}, ...]
    """

    __tablename__ = "run_analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(
        Integer,
        ForeignKey("runs.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    user_id = Column(String(64), nullable=False, index=True)

    summary = Column(Text, nullable=False)
    insights = Column(JSON, nullable=False, default=list)
    recommendations = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    run = relationship("Run", back_populates="analysis")

    def __repr__(self):
        return f"<RunAnalysis run_id={self.run_id}>"


class Conversation(Base):
    """
    Chat history about one run.

    messages is append-only: [{"role": user|assistant, "content", "timestamp"}, ...]
    """

    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("user_id", "run_id", name="uq_conversations_user_run"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    run_id = Column(
        Integer,
        ForeignKey("runs.id", ondelete="CASCADE"),
        nullable=False
    )

    messages = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    run = relationship("Run", back_populates="conversations")

    def __repr__(self):
        return f"<Conversation user={self.user_id} run_id={self.run_id} ({len(self.messages or [])} msgs)>"
