import re
import sys

from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from cityfix import models  # noqa: F401 - register tables before create_all
from cityfix.bootstrap import run_bootstrap
from cityfix.config import settings
from cityfix.database import Base, SessionLocal, engine


def _validate_admin_settings() -> None:
    try:
        validate_email(settings.ADMIN_EMAIL)
    except PydanticCustomError as exc:
        raise ValueError("ADMIN_EMAIL is not a valid email format.") from exc
    password = settings.ADMIN_PASSWORD
    if len(password) < 8:
        raise ValueError("ADMIN_PASSWORD must be at least 8 characters.")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("ADMIN_PASSWORD must be <= 72 bytes (bcrypt limit).")
    if not re.search(r"[A-Z]", password):
        raise ValueError("ADMIN_PASSWORD must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", password):
        raise ValueError("ADMIN_PASSWORD must contain at least one lowercase letter.")
    if not re.search(r"\d", password):
        raise ValueError("ADMIN_PASSWORD must contain at least one digit.")


def bootstrap() -> int:
    try:
        _validate_admin_settings()
    except ValueError as exc:
        print(f"Bootstrap failed: {exc}", file=sys.stderr)
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        results = run_bootstrap(db)
    finally:
        db.close()

    for step, ok in results.items():
        print(f"{step}: {'ok' if ok else 'FAILED'}")
    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    raise SystemExit(bootstrap())
