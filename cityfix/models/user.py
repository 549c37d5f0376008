import uuid

from sqlalchemy import Column, String, TIMESTAMP, func

from cityfix.database import Base


def _new_user_id() -> str:
    return str(uuid.uuid4())


# ---------------- USER (AUTH TABLE) ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())


# ---------------- SIGNED-OUT TOKENS ----------------
class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti = Column(String(36), primary_key=True)
    revoked_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
