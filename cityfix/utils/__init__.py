__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "get_bearer_token",
]


def __getattr__(name):
    if name in __all__:
        from . import security as _security
        return getattr(_security, name)
    raise AttributeError(f"module 'cityfix.utils' has no attribute '{name}'")
