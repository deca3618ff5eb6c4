from typing import Dict, Any
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login body. Both fields default to admin, matching the cloud function."""
    username: str = "admin"
    password: str = "admin"


class LoginResponse(BaseModel):
    objectId: str
    sessionToken: str


class ParseErrorResponse(BaseModel):
    """Error body in Parse Server's {code, error} shape."""
    code: int
    error: str


class TooManyAttemptsResponse(ParseErrorResponse):
    code: int = 155
    error: str = "Too many login attempts. Try again later."
    retryAfter: int = Field(..., ge=1)


class HealthResponse(BaseModel):
    status: str = "ok"
    authenticator: str
    store: str
    config: Dict[str, Any] = {}
