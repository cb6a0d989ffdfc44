"""
tinynotify: client leggero per le notifiche desktop (org.freedesktop.Notifications).

Uso tipico::

    session = NotifySession('myapp', 'web-browser')
    notification = Notification('foo', 'bar')
    if notification.send(session):
        print(session.error_message)
"""

import logging

__version__ = '0.3.0'

from .errors import NotifyError
from .protocol import CloseReason, Event, Urgency
from .notification import (
    DEFAULT_APP_ICON,
    EXPIRES_DEFAULT,
    EXPIRES_NEVER,
    NO_APP_ICON,
    NO_URGENCY,
    Notification,
)
from .session import NotifySession

logging.getLogger(__name__).addHandler(logging.NullHandler())
