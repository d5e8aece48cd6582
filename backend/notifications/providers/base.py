from abc import ABC, abstractmethod
from typing import Dict, Optional


class InvalidTokenError(Exception):
    """The provider no longer accepts this device token (uninstalled app, expired, malformed)."""


class PushProvider(ABC):
    @abstractmethod
    def send(self, token: str, title: str, body: str, data: Optional[Dict[str, str]] = None) -> str:
        """
        Returns the provider message id.
        Raises InvalidTokenError when the token should be dropped; anything else is retryable.
        """
        raise NotImplementedError
