"""Bus transports: Linux spidev and an in-memory simulated chip."""

from .base import Phase, Transport
from .linux import DEFAULT_DEVICE, SpidevTransport, parse_device
from .sim import SimulatedEeprom

__all__ = [
    "DEFAULT_DEVICE",
    "Phase",
    "SimulatedEeprom",
    "SpidevTransport",
    "Transport",
    "parse_device",
]
