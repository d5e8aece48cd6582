import json
import logging

import firebase_admin
from django.conf import settings
from firebase_admin import credentials, exceptions, messaging

from .base import InvalidTokenError, PushProvider

log = logging.getLogger(__name__)


def ensure_firebase_initialized():
    """Initialize the default Firebase app once per process."""
    if firebase_admin._apps:
        return
    raw = settings.FIREBASE_CREDENTIALS
    if raw and raw.lstrip().startswith("{"):
        cred = credentials.Certificate(json.loads(raw))
    elif raw:
        cred = credentials.Certificate(raw)
    else:
        # GOOGLE_APPLICATION_CREDENTIALS / metadata server
        cred = credentials.ApplicationDefault()
    firebase_admin.initialize_app(cred)


class FCMProvider(PushProvider):
    def __init__(self):
        ensure_firebase_initialized()

    def send(self, token, title, body, data=None):
        msg = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data={str(k): str(v) for k, v in (data or {}).items()},
        )
        try:
            return messaging.send(msg)
        except (messaging.UnregisteredError, messaging.SenderIdMismatchError) as e:
            raise InvalidTokenError(str(e)) from e
        except exceptions.InvalidArgumentError as e:
            log.info("fcm rejected token %s…: %s", token[:8], e)
            raise InvalidTokenError(str(e)) from e
