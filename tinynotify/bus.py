"""
Client D-Bus usato dalle sessioni.

Fornisce le tre capacita' di cui il protocollo ha bisogno: connessione
privata al bus di sessione, chiamata bloccante con timeout, ricezione dei
segnali tramite il main loop di GLib.
"""

import collections
import logging

import dbus
import dbus.bus
import dbus.lowlevel
from dbus.mainloop.glib import DBusGMainLoop
from gi.repository import GLib

from .errors import TransportError
from .message import Reply, Signal, Variant

logger = logging.getLogger(__name__)

_VARIANT_TYPES = {
    'y': dbus.Byte,
    'b': dbus.Boolean,
    'i': dbus.Int32,
    'u': dbus.UInt32,
    's': dbus.String,
}


def _to_dbus(value):
    if isinstance(value, Variant):
        return _VARIANT_TYPES[value.signature](value.value)
    if isinstance(value, dict):
        return {key: _to_dbus(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_dbus(item) for item in value]
    return value


def _error_text(error):
    return error.get_dbus_message() or str(error)


class Connection:
    """Connessione privata al bus, posseduta da una sola NotifySession."""

    def __init__(self, bus):
        self._bus = bus
        self._signals = collections.deque()

    def call_blocking(self, call, timeout_ms):
        message = dbus.lowlevel.MethodCallMessage(
            call.destination, call.path, call.interface, call.member)
        if call.args:
            message.append(*[_to_dbus(arg) for arg in call.args], signature=call.signature)

        logger.debug("Chiamata %s.%s%r", call.interface, call.member, call.args)
        try:
            reply = self._bus.send_message_with_reply_and_block(message, timeout_ms / 1000.0)
        except dbus.exceptions.DBusException as e:
            raise TransportError(_error_text(e)) from e

        return Reply(str(reply.get_signature() or ''), reply.get_args_list())

    def subscribe(self, interface):
        """Accoda tutti i segnali emessi su *interface*."""
        try:
            self._bus.add_signal_receiver(
                self._signal_received,
                dbus_interface=interface,
                member_keyword='member',
                interface_keyword='interface')
        except dbus.exceptions.DBusException as e:
            raise TransportError(_error_text(e)) from e

    def _signal_received(self, *args, member=None, interface=None):
        logger.debug("Segnale ricevuto: %s.%s%r", interface, member, args)
        self._signals.append(Signal(interface, member, args))

    def wait_signal(self, timeout_ms=-1):
        """
        Attende il prossimo segnale iterando il main context di GLib.

        Con timeout_ms negativo attende indefinitamente. Restituisce None
        se il timeout scade prima dell'arrivo di un segnale.
        """
        context = GLib.MainContext.default()
        expired = []
        source_id = None

        if not self._signals and timeout_ms >= 0:
            def _expire():
                expired.append(True)
                return False
            source_id = GLib.timeout_add(timeout_ms, _expire)

        while not self._signals and not expired:
            context.iteration(True)

        if source_id is not None and not expired:
            GLib.source_remove(source_id)

        if self._signals:
            return self._signals.popleft()
        return None

    def close(self):
        self._bus.close()


def connect_session_bus(address=None):
    """
    Apre una connessione privata al bus di sessione (o a *address*).

    La connessione non termina il processo se il bus viene perso.
    """
    target = address or dbus.bus.BusConnection.TYPE_SESSION
    try:
        bus = dbus.bus.BusConnection(target, mainloop=DBusGMainLoop())
    except dbus.exceptions.DBusException as e:
        raise TransportError(_error_text(e)) from e

    bus.set_exit_on_disconnect(False)
    return Connection(bus)


class SessionBusClient:
    """Factory di connessioni usata di default da NotifySession."""

    def __init__(self, address=None):
        self.address = address

    def connect(self):
        return connect_session_bus(self.address)
