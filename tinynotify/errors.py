"""
Codici di errore di tinynotify.

Gli errori sono legati alla sessione: ogni operazione del protocollo
sovrascrive l'errore precedente, anche in caso di successo.
"""

from enum import IntEnum


class NotifyError(IntEnum):
    """
    Codice di errore di una NotifySession.

    NO_ERROR vale sempre 0, quindi il codice si puo' usare direttamente
    come booleano: ``if notification.send(session): ...`` significa errore.
    """
    NO_ERROR = 0
    CONNECT_FAILED = 1
    SEND_FAILED = 2
    INVALID_REPLY = 3
    NO_NOTIFICATION_ID = 4
    FORMAT_ERROR = 5

    def format_message(self, detail=None):
        """Restituisce il messaggio leggibile, con il dettaglio sostituito."""
        template = _MESSAGES[self]
        if '%s' in template:
            return template % (detail or _UNKNOWN_DETAIL)
        return template

    def detail_for(self, detail):
        """Dettaglio da conservare: mai vuoto per un errore, mai gia' formattato."""
        if '%s' in _MESSAGES[self]:
            return detail or _UNKNOWN_DETAIL
        return _MESSAGES[self]


_UNKNOWN_DETAIL = 'unknown error'

_MESSAGES = {
    NotifyError.NO_ERROR: 'No error',
    NotifyError.CONNECT_FAILED: 'Connecting to D-Bus failed: %s',
    NotifyError.SEND_FAILED: 'Sending message over D-Bus failed: %s',
    NotifyError.INVALID_REPLY: 'Invalid reply received: %s',
    NotifyError.NO_NOTIFICATION_ID: 'No notification-id set (notification not sent yet?)',
    NotifyError.FORMAT_ERROR: 'Formatting notification failed: %s',
}


class ReplyError(ValueError):
    """La risposta del demone non ha la forma attesa."""


class FormatError(ValueError):
    """Il numero di argomenti non corrisponde ai segnaposto di summary/body."""


class TransportError(Exception):
    """Errore del bus: connessione fallita o chiamata senza risposta."""
