"""tinynotify-send: invia una notifica desktop dalla riga di comando."""

import argparse
import logging
import sys
from collections import namedtuple

from . import __version__
from .notification import Notification
from .protocol import Urgency
from .session import NotifySession

PROG = 'tinynotify-send'

CLIFlags = namedtuple('CLIFlags', ['system_wide', 'local', 'foreground', 'verbose'])

_URGENCIES = {
    'low': Urgency.LOW,
    'normal': Urgency.NORMAL,
    'critical': Urgency.CRITICAL,
}


def _build_parser():
    parser = argparse.ArgumentParser(
        prog=PROG, description='Send a desktop notification.')
    parser.add_argument('-i', '--icon', metavar='ICON',
                        help='icon name or path ("" to send no icon)')
    parser.add_argument('-c', '--category', metavar='TYPE',
                        help='notification category')
    parser.add_argument('-u', '--urgency', choices=sorted(_URGENCIES),
                        help='urgency level')
    parser.add_argument('-t', '--expire-time', type=int, metavar='MS',
                        help='timeout in milliseconds (0 = never expire)')
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument('-s', '--system-wide', action='store_true',
                       help='send the notification to all users')
    scope.add_argument('-l', '--local', action='store_true',
                       help='send the notification to the current session only')
    parser.add_argument('-f', '--foreground', action='store_true',
                        help='wait until the notification is closed')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log protocol activity to stderr')
    parser.add_argument('-V', '--version', action='version',
                        version='%s %s' % (PROG, __version__))
    parser.add_argument('summary', help='notification summary')
    parser.add_argument('body', nargs='?', help='notification body')
    return parser


def notification_from_cmdline(argv=None):
    """
    Interpreta la riga di comando e costruisce la Notification.

    --help, --version e argomenti non validi vengono gestiti da argparse,
    che stampa l'output e termina il processo.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.summary:
        parser.error('summary must not be empty')

    notification = Notification(args.summary, args.body)
    if args.icon is not None:
        notification.app_icon = args.icon
    if args.category:
        notification.category = args.category
    if args.urgency:
        notification.urgency = _URGENCIES[args.urgency]
    if args.expire_time is not None:
        try:
            notification.expire_timeout = args.expire_time
        except ValueError as e:
            parser.error(str(e))

    flags = CLIFlags(args.system_wide, args.local, args.foreground, args.verbose)
    return notification, flags


def _configure_logging():
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s: %(message)s'))
    root = logging.getLogger('tinynotify')
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv=None, session=None):
    notification, flags = notification_from_cmdline(argv)

    if flags.verbose:
        _configure_logging()

    if flags.system_wide:
        print('System-wide notification not supported.', file=sys.stderr)
        return 1

    closed = []
    if flags.foreground:
        notification.close_callback = lambda n, reason: closed.append(reason)

    if session is None:
        session = NotifySession(PROG)

    with session:
        if notification.send(session):
            print(session.error_message, file=sys.stderr)
            return 1

        # In foreground si resta in attesa della chiusura della notifica.
        while flags.foreground and not closed:
            session.dispatch()
            if session.error:
                print(session.error_message, file=sys.stderr)
                return 1

    return 0
