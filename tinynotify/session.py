"""
NotifySession: connessione al bus, identita' di default dell'applicazione
e stato dell'ultimo errore.
"""

import logging
import weakref

from . import protocol
from .errors import NotifyError, ReplyError, TransportError

logger = logging.getLogger(__name__)


def _unset_if_empty(value):
    return value or None


class NotifySession:
    """
    Sessione tinynotify.

    Possiede in esclusiva la connessione D-Bus, creata alla prima
    operazione che ne ha bisogno (o con connect()). app_name e app_icon sono
    i valori di default usati dalle notifiche che non li sovrascrivono.

    Ogni operazione del protocollo registra il proprio esito in ``error``:
    NO_ERROR in caso di successo, altrimenti il codice con il dettaglio.
    La sessione non e' thread-safe.
    """

    def __init__(self, app_name=None, app_icon=None, bus=None):
        if bus is None:
            from .bus import SessionBusClient
            bus = SessionBusClient()

        self._bus = bus
        self._connection = None
        self._app_name = _unset_if_empty(app_name)
        self._app_icon = _unset_if_empty(app_icon)
        self._error = NotifyError.NO_ERROR
        self._error_detail = None
        # Notifiche con azioni o callback di chiusura, indicizzate per id.
        self._watched = weakref.WeakValueDictionary()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.disconnect()

    def __repr__(self):
        return '<NotifySession app_name=%r connected=%s error=%s>' % (
            self._app_name, self.connected, self._error.name)

    @property
    def app_name(self):
        return self._app_name

    @app_name.setter
    def app_name(self, value):
        self._app_name = _unset_if_empty(value)

    @property
    def app_icon(self):
        return self._app_icon

    @app_icon.setter
    def app_icon(self, value):
        self._app_icon = _unset_if_empty(value)

    @property
    def connected(self):
        return self._connection is not None

    @property
    def error(self):
        return self._error

    @property
    def error_message(self):
        return self._error.format_message(self._error_detail)

    def _set_error(self, error, detail=None):
        self._error = NotifyError(error)
        self._error_detail = self._error.detail_for(detail) if error else None
        if error:
            logger.warning("%s", self.error_message)
        return self._error

    def connect(self):
        """Si connette al bus di sessione, se non e' gia' connessa."""
        if self._connection is not None:
            return self._set_error(NotifyError.NO_ERROR)

        try:
            connection = self._bus.connect()
        except TransportError as e:
            return self._set_error(NotifyError.CONNECT_FAILED, str(e))

        try:
            connection.subscribe(protocol.OBJECT_INTERFACE)
        except TransportError as e:
            connection.close()
            return self._set_error(NotifyError.CONNECT_FAILED, str(e))

        logger.debug("Connessione al bus stabilita")
        self._connection = connection
        return self._set_error(NotifyError.NO_ERROR)

    def disconnect(self):
        """Chiude la connessione; sicura da chiamare anche se non connessa."""
        if self._connection is None:
            return

        self._connection.close()
        self._connection = None
        self._watched.clear()
        logger.debug("Connessione al bus chiusa")
        self._set_error(NotifyError.NO_ERROR)

    def _call(self, call):
        """
        Invia *call* e attende la risposta per CALL_TIMEOUT ms.

        Restituisce la Reply, oppure None dopo aver registrato SEND_FAILED.
        La sessione deve essere gia' connessa.
        """
        try:
            return self._connection.call_blocking(call, protocol.CALL_TIMEOUT)
        except TransportError as e:
            self._set_error(NotifyError.SEND_FAILED, str(e))
            return None

    def _query(self, call, parse):
        if self.connect():
            return None

        reply = self._call(call)
        if reply is None:
            return None

        try:
            result = parse(reply)
        except ReplyError as e:
            self._set_error(NotifyError.INVALID_REPLY, str(e))
            return None

        self._set_error(NotifyError.NO_ERROR)
        return result

    def get_capabilities(self):
        """Elenco delle capacita' del demone (es. "body", "actions"), o None."""
        return self._query(protocol.capabilities_call(), protocol.parse_capabilities_reply)

    def get_server_information(self):
        """Dizionario con name, vendor, version e spec_version, o None."""
        return self._query(protocol.server_information_call(),
                           protocol.parse_server_information_reply)

    def _watch(self, notification):
        if notification.needs_events:
            self._watched[notification.message_id] = notification
        else:
            self._watched.pop(notification.message_id, None)

    def _forget(self, message_id):
        self._watched.pop(message_id, None)

    def dispatch(self, timeout=-1):
        """
        Attende un evento del demone (chiusura o azione) e lo gestisce.

        Gli handler della notifica a cui appartiene l'evento vengono invocati
        qui. Restituisce l'Event, oppure None se il timeout (in ms) scade o
        la connessione non riesce.
        """
        if self.connect():
            return None

        signal = self._connection.wait_signal(timeout)
        self._set_error(NotifyError.NO_ERROR)
        if signal is None:
            return None

        event = protocol.parse_signal(signal)
        if event is None:
            return None

        notification = self._watched.get(event.message_id)
        if event.kind == protocol.SIGNAL_CLOSED:
            self._forget(event.message_id)
        if notification is not None:
            notification._handle_event(event)
        return event
