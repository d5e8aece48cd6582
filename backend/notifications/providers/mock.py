import logging
import uuid

from .base import PushProvider

log = logging.getLogger(__name__)


class MockProvider(PushProvider):
    def send(self, token, title, body, data=None):
        # pretend it's delivered
        log.debug("mock push to %s…: %s", token[:8], title)
        return f"mock-{uuid.uuid4()}"
