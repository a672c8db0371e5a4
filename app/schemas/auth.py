from pydantic import BaseModel


class AuthUser(BaseModel):
    id: str
    email: str | None = None
    role: str | None = None
