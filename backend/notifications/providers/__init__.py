from .base import InvalidTokenError, PushProvider

__all__ = ["InvalidTokenError", "PushProvider"]
