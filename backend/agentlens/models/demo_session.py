import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from agentlens.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DemoSession(Base):
    __tablename__ = "demo_sessions"

    id               = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name             = Column(String(200), nullable=False)
    email            = Column(String(320), nullable=False, index=True)
    company          = Column(String(200), nullable=False)
    role             = Column(String(100), nullable=False)
    evaluation_notes = Column(Text, nullable=True)
    run_count        = Column(Integer, nullable=False, default=0)
    created_at       = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    expires_at       = Column(DateTime(timezone=True), nullable=False)

    runs = relationship("AgentRun", back_populates="demo_session", cascade="all, delete-orphan")
