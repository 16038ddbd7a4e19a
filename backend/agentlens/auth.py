"""
Demo-session auth: FastAPI dependencies resolving the X-Demo-Session header.

There are no user accounts. A demo session id is the whole credential, so
both dependencies raise 401 when the header is absent or unknown. Write
endpoints additionally reject expired sessions; read endpoints let an
expired visitor keep looking at the runs they already made.
"""

from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.database import get_db
from agentlens.models.demo_session import DemoSession
from agentlens.services.session_service import session_service


async def get_demo_session(
    x_demo_session: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> DemoSession:
    return await session_service.resolve_session(db, x_demo_session, require_active=False)


async def get_active_demo_session(
    x_demo_session: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> DemoSession:
    return await session_service.resolve_session(db, x_demo_session, require_active=True)
