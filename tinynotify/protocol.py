"""
Codec del protocollo org.freedesktop.Notifications.

Qui si costruiscono le chiamate Notify / CloseNotification con la firma
esatta richiesta dai demoni di notifica, e si decodificano risposte e
segnali. Il modulo non dipende dal trasporto: produce e consuma i tipi
definiti in tinynotify.message.
"""

import re
from collections import OrderedDict, namedtuple
from enum import IntEnum

from .errors import FormatError, ReplyError
from .message import MethodCall, Variant

BUS_NAME = 'org.freedesktop.Notifications'
OBJECT_PATH = '/org/freedesktop/Notifications'
OBJECT_INTERFACE = 'org.freedesktop.Notifications'

# Timeout (ms) delle chiamate bloccanti.
CALL_TIMEOUT = 5000

NOTIFY_SIGNATURE = 'susssasa{sv}i'

SIGNAL_CLOSED = 'NotificationClosed'
SIGNAL_ACTION = 'ActionInvoked'

DEFAULT_ACTION = 'default'

# Evento ricevuto dal demone: kind e' SIGNAL_CLOSED o SIGNAL_ACTION,
# value e' il CloseReason oppure la chiave dell'azione.
Event = namedtuple('Event', ['kind', 'message_id', 'value'])


class Urgency(IntEnum):
    LOW = 0
    NORMAL = 1
    CRITICAL = 2


class CloseReason(IntEnum):
    """Motivo di chiusura (1=expired, 2=dismissed by user, 3=closed by call, 4=undefined)."""
    EXPIRED = 1
    DISMISSED = 2
    CLOSED = 3
    UNDEFINED = 4


def _call(member, signature='', args=()):
    return MethodCall(BUS_NAME, OBJECT_PATH, OBJECT_INTERFACE, member, signature, tuple(args))


def notify_call(app_name, replaces_id, app_icon, summary, body, actions, hints, expire_timeout):
    """
    Costruisce la chiamata Notify.

    L'ordine degli argomenti e' quello della specifica Desktop Notifications:
    app_name, replaces_id, app_icon, summary, body, actions, hints,
    expire_timeout. Nessun campo stringa viene mai inviato come None.
    """
    args = (
        app_name or '',
        int(replaces_id),
        app_icon or '',
        summary,
        body or '',
        list(actions),
        OrderedDict(hints),
        int(expire_timeout),
    )
    return _call('Notify', NOTIFY_SIGNATURE, args)


def close_call(message_id):
    return _call('CloseNotification', 'u', (int(message_id),))


def capabilities_call():
    return _call('GetCapabilities')


def server_information_call():
    return _call('GetServerInformation')


def build_hints(urgency=None, category=None):
    """Dizionario degli hint, in ordine fisso: urgency, poi category."""
    hints = OrderedDict()
    if urgency is not None:
        hints['urgency'] = Variant('y', int(urgency))
    if category is not None:
        hints['category'] = Variant('s', category)
    return hints


def parse_notify_reply(reply):
    """Restituisce l'id assegnato dal demone (un singolo uint32)."""
    if reply.signature != 'u' or len(reply.args) != 1:
        raise ReplyError('expected a single uint32, got signature %r' % (reply.signature,))
    message_id = reply.args[0]
    if not isinstance(message_id, int) or not 0 <= message_id <= 0xFFFFFFFF:
        raise ReplyError('notification id out of range: %r' % (message_id,))
    return int(message_id)


def parse_close_reply(reply):
    if reply.signature or reply.args:
        raise ReplyError('expected an empty reply, got signature %r' % (reply.signature,))


def parse_capabilities_reply(reply):
    if reply.signature != 'as' or len(reply.args) != 1:
        raise ReplyError('expected a string array, got signature %r' % (reply.signature,))
    return [str(cap) for cap in reply.args[0]]


def parse_server_information_reply(reply):
    if reply.signature != 'ssss' or len(reply.args) != 4:
        raise ReplyError('expected four strings, got signature %r' % (reply.signature,))
    keys = ('name', 'vendor', 'version', 'spec_version')
    return {key: str(value) for key, value in zip(keys, reply.args)}


def parse_signal(signal):
    """Decodifica NotificationClosed / ActionInvoked; None per tutto il resto."""
    if signal.interface != OBJECT_INTERFACE:
        return None
    args = signal.args
    if signal.member == SIGNAL_CLOSED and len(args) == 2:
        try:
            reason = CloseReason(args[1])
        except ValueError:
            reason = CloseReason.UNDEFINED
        return Event(SIGNAL_CLOSED, int(args[0]), reason)
    if signal.member == SIGNAL_ACTION and len(args) == 2:
        return Event(SIGNAL_ACTION, int(args[0]), str(args[1]))
    return None


# Segnaposto in stile printf, come li interpreta l'operatore % di Python.
_PLACEHOLDER = re.compile(
    r'%(?:\([^)]*\))?[#0 +-]*(\*|\d+)?(?:\.(\*|\d*))?[hlL]?([diouxXeEfFgGcrsa%])')


def count_placeholders(template):
    """Numero di argomenti consumati da *template* (``*`` conta come argomento)."""
    count = 0
    for width, precision, conversion in _PLACEHOLDER.findall(template):
        if conversion == '%':
            continue
        count += 1 + (width == '*') + (precision == '*')
    return count


def render(summary, body, args):
    """
    Applica gli argomenti ai template di summary e body.

    Gli argomenti vengono consumati in ordine: prima tutti i segnaposto di
    summary, poi quelli di body. Se il numero non torna solleva FormatError.
    """
    args = tuple(args)
    in_summary = count_placeholders(summary)
    in_body = count_placeholders(body) if body is not None else 0

    if in_summary + in_body != len(args):
        raise FormatError('%d argument(s) given, summary and body expect %d'
                          % (len(args), in_summary + in_body))

    try:
        summary = summary % args[:in_summary]
        if body is not None:
            body = body % args[in_summary:]
    except (TypeError, ValueError, KeyError) as e:
        raise FormatError(str(e)) from e

    return summary, body
