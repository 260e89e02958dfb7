from pydantic import BaseModel, EmailStr
from typing import Optional


class GoogleProfile(BaseModel):
    sub: str
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    picture: Optional[str] = None
