import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.config import get_settings
from agentlens.exceptions import QuotaExceededError, SessionError, ValidationError
from agentlens.models.demo_session import DemoSession

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "company", "role")


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SessionService:
    async def create_session(
        self,
        db: AsyncSession,
        *,
        name: Optional[str],
        email: Optional[str],
        company: Optional[str],
        role: Optional[str],
        evaluation_notes: Optional[str] = None,
    ) -> DemoSession:
        fields = {"name": _clean(name), "email": _clean(email), "company": _clean(company), "role": _clean(role)}
        if not all(fields.values()):
            raise ValidationError(f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")

        settings = get_settings()
        now = datetime.now(timezone.utc)
        session = DemoSession(
            **fields,
            evaluation_notes=_clean(evaluation_notes),
            run_count=0,
            created_at=now,
            expires_at=now + timedelta(hours=settings.demo_session_ttl_hours),
        )
        db.add(session)
        await db.flush()

        logger.info("Demo session created for %s at %s", session.email, session.company)
        return session

    async def resolve_session(
        self,
        db: AsyncSession,
        session_id: Optional[str],
        *,
        require_active: bool = True,
    ) -> DemoSession:
        if not session_id:
            raise SessionError("Missing X-Demo-Session header")

        session = await db.scalar(select(DemoSession).where(DemoSession.id == session_id))
        if session is None:
            raise SessionError("Invalid demo session")

        if require_active and as_utc(session.expires_at) < datetime.now(timezone.utc):
            raise SessionError("Demo session expired")
        return session

    def check_run_quota(self, session: DemoSession) -> None:
        limit = get_settings().max_runs_per_session
        if session.run_count >= limit:
            raise QuotaExceededError(f"Maximum {limit} runs per demo session reached")

    async def reserve_run(self, db: AsyncSession, session: DemoSession) -> None:
        """Consume one run from the session quota with a single conditional update."""
        limit = get_settings().max_runs_per_session
        result = await db.execute(
            update(DemoSession)
            .where(DemoSession.id == session.id, DemoSession.run_count < limit)
            .values(run_count=DemoSession.run_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise QuotaExceededError(f"Maximum {limit} runs per demo session reached")

    async def record_replay(self, db: AsyncSession, session: DemoSession) -> None:
        # Replays count toward usage but are not gated by the run quota
        await db.execute(
            update(DemoSession)
            .where(DemoSession.id == session.id)
            .values(run_count=DemoSession.run_count + 1)
            .execution_options(synchronize_session=False)
        )


session_service = SessionService()
