"""SQLAlchemy ORM models for circuit logs."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Text, ForeignKey
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class CircuitLog(Base):
    """One finished circuit block (AMRAP, EMOM, Tabata, For Time, Circuit)."""

    __tablename__ = "circuit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    block_id = Column(Integer, nullable=False)
    block_type = Column(String(20), nullable=False)   # amrap | emom | tabata | for_time | circuit
    block_name = Column(String(255), nullable=True)
    rounds_completed = Column(Integer, nullable=False, default=0)
    target_rounds = Column(Integer, nullable=True)
    time_cap_minutes = Column(Integer, nullable=True)
    actual_time_minutes = Column(Float, nullable=False, default=0.0)
    total_duration_seconds = Column(Integer, nullable=False, default=0)
    total_reps = Column(Integer, nullable=False, default=0)
    score = Column(String(32), nullable=False, default="")
    completed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    logged_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    rounds = relationship(
        "RoundLog",
        back_populates="circuit",
        cascade="all, delete-orphan",
        order_by="RoundLog.round_number",
    )

    def __repr__(self) -> str:
        return (
            f"<CircuitLog id={self.id} type={self.block_type} "
            f"score={self.score} completed={self.completed}>"
        )


class RoundLog(Base):
    """A round inside a logged circuit."""

    __tablename__ = "round_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    circuit_id = Column(Integer, ForeignKey("circuit_logs.id"), nullable=False)
    round_number = Column(Integer, nullable=False)
    round_time_seconds = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    skipped = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    circuit = relationship("CircuitLog", back_populates="rounds")
    sets = relationship(
        "ExerciseSetLog",
        back_populates="round",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<RoundLog circuit={self.circuit_id} round={self.round_number} "
            f"time={self.round_time_seconds}s>"
        )


class ExerciseSetLog(Base):
    """Reps and weight for one exercise in one round."""

    __tablename__ = "exercise_set_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    round_id = Column(Integer, ForeignKey("round_logs.id"), nullable=False)
    exercise_id = Column(Integer, nullable=False)
    plan_day_exercise_id = Column(Integer, nullable=False)
    set_number = Column(Integer, nullable=False)       # the round number
    target_reps = Column(Integer, nullable=False, default=0)
    actual_reps = Column(Integer, nullable=False, default=0)
    weight = Column(Float, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    skipped = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    round = relationship("RoundLog", back_populates="sets")

    def __repr__(self) -> str:
        return (
            f"<ExerciseSetLog exercise={self.exercise_id} set={self.set_number} "
            f"reps={self.actual_reps} weight={self.weight}>"
        )
