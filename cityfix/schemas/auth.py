from typing import Optional

from pydantic import BaseModel

# ======================
# LOGIN
# ======================

class LoginRequest(BaseModel):
    # Plain optional strings: an absent field is a 400 from the route, and
    # any other bad address is just a failed sign-in
    email: Optional[str] = None
    password: Optional[str] = None


# ======================
# IDENTITY
# ======================

class AuthUser(BaseModel):
    id: str
    email: str
    role: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"


class SessionTokens(BaseModel):
    access_token: str
    refresh_token: str


class AuthSession(BaseModel):
    user: AuthUser
    session: SessionTokens
