"""Tipi di valore scambiati tra il codec del protocollo e il client D-Bus."""

from collections import namedtuple

# Una chiamata di metodo in uscita, con la firma D-Bus degli argomenti.
MethodCall = namedtuple(
    'MethodCall', ['destination', 'path', 'interface', 'member', 'signature', 'args'])

# Risposta a una chiamata bloccante: firma e argomenti ricevuti.
Reply = namedtuple('Reply', ['signature', 'args'])

# Segnale ricevuto dal bus.
Signal = namedtuple('Signal', ['interface', 'member', 'args'])

# Valore tipizzato per il dizionario degli hint (a{sv}).
Variant = namedtuple('Variant', ['signature', 'value'])
