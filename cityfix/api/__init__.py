# cityfix/api/__init__.py
# Import all routers for easy access

from . import auth
from . import health
from . import reports
from . import upload

__all__ = ["auth", "health", "reports", "upload"]
