from typing import Optional
from pydantic import BaseModel


class AccessCodeModel(BaseModel):
    code: str


class MessageResponse(BaseModel):
    message: str


class MeResponse(BaseModel):
    authenticated: bool
    name: Optional[str] = None
    showWelcome: bool = False
