"""
Demone org.freedesktop.Notifications di prova, basato su dbus-next.

Gira in un thread con il proprio event loop asyncio e registra ogni
chiamata ricevuta, cosi' i test possono verificare cosa e' arrivato sul bus.
"""

import asyncio
import threading

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal

BUS_NAME = 'org.freedesktop.Notifications'
OBJECT_PATH = '/org/freedesktop/Notifications'


class NotificationRecorder(ServiceInterface):
    def __init__(self):
        super().__init__(BUS_NAME)
        self.received = []
        self.closed = []
        self.next_id = 1

    @method()
    def Notify(self, app_name: 's', replaces_id: 'u', app_icon: 's', summary: 's',
               body: 's', actions: 'as', hints: 'a{sv}', expire_timeout: 'i') -> 'u':

        self.received.append({
            'app_name': app_name,
            'replaces_id': replaces_id,
            'app_icon': app_icon,
            'summary': summary,
            'body': body,
            'actions': list(actions),
            'hints': {key: (value.signature, value.value) for key, value in hints.items()},
            'expire_timeout': expire_timeout,
        })

        # Sostituzione: si riusa l'id ricevuto
        if replaces_id:
            return replaces_id

        nid = self.next_id
        self.next_id += 1
        return nid

    @method()
    def GetServerInformation(self) -> 'ssss':
        return ['notifyd', 'tinynotify', '1.0', '1.2']

    @method()
    def GetCapabilities(self) -> 'as':
        return ['body', 'actions']

    @method()
    def CloseNotification(self, id: 'u'):
        self.closed.append(id)
        self.NotificationClosed(id, 3)  # 3 = closed by call

    @signal()
    def NotificationClosed(self, id, reason) -> 'uu':
        return [id, reason]


class NotificationDaemon:
    """Avvia NotificationRecorder sul bus *address* in un thread separato."""

    def __init__(self, address):
        self.address = address
        self.interface = NotificationRecorder()
        self._bus = None
        self._loop = asyncio.new_event_loop()
        self._ready = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self, timeout=5):
        self._thread.start()
        if not self._ready.wait(timeout):
            raise RuntimeError('notifyd did not come up on %s' % (self.address,))

    def stop(self):
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)

    def _run(self):
        asyncio.set_event_loop(self._loop)
        self._loop.run_until_complete(self._serve())
        self._loop.run_forever()
        self._bus.disconnect()

    async def _serve(self):
        self._bus = await MessageBus(bus_address=self.address).connect()

        # Esporta l'interfaccia al path corretto, poi richiede il nome
        self._bus.export(OBJECT_PATH, self.interface)
        await self._bus.request_name(BUS_NAME)
        self._ready.set()
