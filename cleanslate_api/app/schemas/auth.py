"""
Pydantic models for token issuance.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    role: Literal["customer", "worker", "admin"]
    user_id: Optional[str] = Field(None, description="Customer or worker id; not used for admins")
    admin_secret: Optional[str] = Field(None, description="Required for admin tokens unless running in debug mode")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
