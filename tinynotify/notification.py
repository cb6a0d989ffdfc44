"""
Notification: contenuto di una notifica e id assegnato dal demone.

Una Notification non possiede connessioni: viene inviata attraverso una
NotifySession, e fra le due passa solo l'id numerico. La stessa istanza
puo' quindi essere riusata, in sequenza, con sessioni diverse.
"""

import logging
from collections import OrderedDict, namedtuple

from . import protocol
from .errors import FormatError, NotifyError, ReplyError
from .protocol import Urgency

logger = logging.getLogger(__name__)

# Valori speciali di app_icon.
DEFAULT_APP_ICON = None     # usa l'icona della sessione
NO_APP_ICON = ''            # nessuna icona, anche se la sessione ne ha una

# Valori speciali di expire_timeout (ms).
EXPIRES_DEFAULT = -1
EXPIRES_NEVER = 0

NO_URGENCY = None

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

Action = namedtuple('Action', ['label', 'handler'])


def _check_summary(summary):
    if not isinstance(summary, str) or not summary:
        raise ValueError('notification summary must be a non-empty string')
    return summary


def _check_optional_str(name, value):
    if value is not None and not isinstance(value, str):
        raise TypeError('notification %s must be a string or None' % (name,))
    return value


class Notification:
    """
    Una notifica desktop.

    summary e' obbligatorio. Gli altri campi partono "non impostati":
    nessun body, icona ereditata dalla sessione, timeout deciso dal server,
    nessuna urgenza ne' categoria. message_id vale 0 finche' la notifica
    non viene inviata con successo.

    Con ``formatting`` attivo, summary e body sono template printf-style:
    gli argomenti passati a send()/update() riempiono prima i segnaposto di
    summary, poi quelli di body.
    """

    def __init__(self, summary, body=None):
        self._summary = _check_summary(summary)
        self._body = _check_optional_str('body', body)
        self.app_icon = DEFAULT_APP_ICON
        self._expire_timeout = EXPIRES_DEFAULT
        self._urgency = NO_URGENCY
        self._category = None
        self.formatting = False
        self.close_callback = None
        self._actions = OrderedDict()
        self._message_id = 0

    def __repr__(self):
        return '<Notification %r id=%d>' % (self._summary, self._message_id)

    @property
    def summary(self):
        return self._summary

    @summary.setter
    def summary(self, value):
        self._summary = _check_summary(value)

    @property
    def body(self):
        return self._body

    @body.setter
    def body(self, value):
        self._body = _check_optional_str('body', value)

    @property
    def expire_timeout(self):
        return self._expire_timeout

    @expire_timeout.setter
    def expire_timeout(self, value):
        # Sul filo e' un int32.
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError('expire_timeout must be an integer (ms)')
        if not INT32_MIN <= value <= INT32_MAX:
            raise ValueError('expire_timeout out of int32 range: %d' % (value,))
        self._expire_timeout = value

    @property
    def category(self):
        return self._category

    @category.setter
    def category(self, value):
        self._category = _check_optional_str('category', value) or None

    @property
    def urgency(self):
        return self._urgency

    @urgency.setter
    def urgency(self, value):
        self._urgency = NO_URGENCY if value is None else Urgency(value)

    @property
    def message_id(self):
        return self._message_id

    @property
    def actions(self):
        """Azioni legate, come lista piatta [chiave, etichetta, ...]."""
        flat = []
        for key, action in self._actions.items():
            flat.extend((key, action.label))
        return flat

    @property
    def needs_events(self):
        return bool(self._actions) or self.close_callback is not None

    def bind_action(self, key, label, handler):
        """
        Associa *handler* all'azione *key*, mostrata dal demone come *label*.

        L'handler riceve (notification, key) e viene chiamato da
        NotifySession.dispatch(). Vale dal prossimo send()/update().
        """
        if not key:
            raise ValueError('action key must be a non-empty string')
        if not callable(handler):
            raise TypeError('action handler must be callable')
        self._actions[key] = Action(label, handler)

    def bind_default_action(self, handler, label='Default'):
        self.bind_action(protocol.DEFAULT_ACTION, label, handler)

    def unbind_action(self, key):
        self._actions.pop(key, None)

    def _render(self, args):
        if self.formatting:
            return protocol.render(self._summary, self._body, args)
        return self._summary, self._body

    def _deliver(self, session, args):
        if session.connect():
            return session.error

        if self.app_icon is DEFAULT_APP_ICON:
            app_icon = session.app_icon
        else:
            app_icon = self.app_icon

        try:
            summary, body = self._render(args)
        except FormatError as e:
            return session._set_error(NotifyError.FORMAT_ERROR, str(e))

        call = protocol.notify_call(
            session.app_name,
            self._message_id,
            app_icon,
            summary,
            body,
            self.actions,
            protocol.build_hints(self._urgency, self._category),
            self._expire_timeout,
        )

        reply = session._call(call)
        if reply is None:
            return session.error

        try:
            message_id = protocol.parse_notify_reply(reply)
        except ReplyError as e:
            return session._set_error(NotifyError.INVALID_REPLY, str(e))

        logger.debug("Notifica %r inviata con id %d", summary, message_id)
        if self._message_id != message_id:
            session._forget(self._message_id)
        self._message_id = message_id
        session._watch(self)
        return session._set_error(NotifyError.NO_ERROR)

    def send(self, session, *args):
        """Mostra la notifica come nuova (replaces_id = 0)."""
        session._forget(self._message_id)
        self._message_id = 0
        return self._deliver(session, args)

    def update(self, session, *args):
        """Aggiorna la notifica gia' mostrata, riusando message_id."""
        return self._deliver(session, args)

    def close(self, session):
        """Chiede al demone di chiudere la notifica."""
        if not self._message_id:
            return session._set_error(NotifyError.NO_NOTIFICATION_ID)

        if session.connect():
            return session.error

        reply = session._call(protocol.close_call(self._message_id))
        if reply is None:
            return session.error

        try:
            protocol.parse_close_reply(reply)
        except ReplyError as e:
            return session._set_error(NotifyError.INVALID_REPLY, str(e))

        # Resta osservata finche' non arriva NotificationClosed.
        self._message_id = 0
        return session._set_error(NotifyError.NO_ERROR)

    def _handle_event(self, event):
        if event.kind == protocol.SIGNAL_ACTION:
            action = self._actions.get(event.value)
            if action is not None:
                action.handler(self, event.value)
        elif event.kind == protocol.SIGNAL_CLOSED:
            if self.close_callback is not None:
                self.close_callback(self, event.value)
