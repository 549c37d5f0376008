# cityfix/models/__init__.py
from .kv import KVEntry
from .user import User, RevokedToken
from .storage import StorageBucket

__all__ = ["KVEntry", "User", "RevokedToken", "StorageBucket"]
