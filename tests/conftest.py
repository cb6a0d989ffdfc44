import collections
import shutil
import subprocess

import pytest

from tinynotify import NotifySession
from tinynotify.errors import TransportError
from tinynotify.message import Reply, Signal
from tinynotify.protocol import OBJECT_INTERFACE


class FakeConnection:

    def __init__(self, bus):
        self.bus = bus
        self.closed = False
        self.subscriptions = []

    def call_blocking(self, call, timeout_ms):
        self.bus.calls.append(call)
        self.bus.timeouts.append(timeout_ms)
        reply = self.bus.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def subscribe(self, interface):
        self.subscriptions.append(interface)

    def wait_signal(self, timeout_ms=-1):
        self.bus.waits.append(timeout_ms)
        if self.bus.signals:
            return self.bus.signals.popleft()
        return None

    def close(self):
        self.closed = True


class FakeBus:
    """ Stand-in for tinynotify.bus.SessionBusClient: records every
        outgoing call and hands back scripted replies and signals.
    """

    def __init__(self):
        self.calls = []
        self.timeouts = []
        self.waits = []
        self.connections = []
        self.replies = collections.deque()
        self.signals = collections.deque()
        self.connect_error = None

    def connect(self):
        if self.connect_error is not None:
            raise TransportError(self.connect_error)
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    def reply(self, signature='', *args):
        self.replies.append(Reply(signature, list(args)))

    def fail(self, message):
        self.replies.append(TransportError(message))

    def emit(self, member, *args, interface=OBJECT_INTERFACE):
        self.signals.append(Signal(interface, member, tuple(args)))


@pytest.fixture
def bus():
    return FakeBus()


@pytest.fixture
def session(bus):
    return NotifySession('foobar', 'web-browser', bus=bus)


@pytest.fixture(scope="session")
def dbus_address():
    """ Run a private dbus-daemon for the live tests, so that they never
        touch (or depend on) the desktop session bus.
    """

    executable = shutil.which('dbus-daemon')
    if executable is None:
        pytest.skip('dbus-daemon is not available')

    arguments = list()
    arguments.append(executable)
    arguments.append('--session')
    arguments.append('--nofork')
    arguments.append('--print-address')

    pipe = subprocess.PIPE
    daemon = subprocess.Popen(arguments, stdout=pipe, stderr=pipe)

    address = daemon.stdout.readline().decode().strip()
    if not address:
        daemon.terminate()
        daemon.wait()
        pytest.skip('dbus-daemon did not report an address')

    yield address

    daemon.terminate()
    daemon.wait()


@pytest.fixture(scope="module")
def notifyd(dbus_address):
    pytest.importorskip('dbus_next')
    from notifyd import NotificationDaemon

    daemon = NotificationDaemon(dbus_address)
    daemon.start()

    yield daemon

    daemon.stop()
