from pydantic import BaseModel, Field, AliasChoices
from datetime import datetime
from typing import Optional


class DemoAccessRequest(BaseModel):
    # Required fields are checked by the session service so the error text stays stable
    name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    evaluation_notes: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("evaluation_notes", "notes"),
    )


class DemoAccessResponse(BaseModel):
    demo_session_id: str
    expires_at: datetime
    message: str
