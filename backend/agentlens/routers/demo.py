from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.config import get_settings
from agentlens.database import get_db
from agentlens.schemas.demo import DemoAccessRequest, DemoAccessResponse
from agentlens.services.session_service import session_service

router = APIRouter()


@router.post("/demo-access", response_model=DemoAccessResponse)
async def request_demo_access(req: DemoAccessRequest, db: AsyncSession = Depends(get_db)):
    """Issue a time-limited demo session. Body: {name, email, company, role, evaluation_notes?}"""
    session = await session_service.create_session(
        db,
        name=req.name,
        email=req.email,
        company=req.company,
        role=req.role,
        evaluation_notes=req.evaluation_notes,
    )
    ttl_hours = get_settings().demo_session_ttl_hours
    return DemoAccessResponse(
        demo_session_id=session.id,
        expires_at=session.expires_at,
        message=f"Demo access granted. Session valid for {ttl_hours} hours.",
    )
