"""Tests for Session transaction primitives and completion polling."""

import itertools
from collections.abc import Sequence

import pytest

from eeprom_93cxx.errors import BusyTimeoutError, TransportError
from eeprom_93cxx.geometry.resolve import GeometrySelection, resolve
from eeprom_93cxx.protocol.command import OP_READ, OP_WRITE, encode_command
from eeprom_93cxx.protocol.session import PollPolicy, Session
from eeprom_93cxx.transport.base import Phase
from eeprom_93cxx.transport.sim import SimulatedEeprom


class RecordingTransport:
    """Records phases and answers every rx phase with a fixed byte."""

    def __init__(self, reply: int = 0xFF, error: Exception | None = None) -> None:
        self.calls: list[list[Phase]] = []
        self.reply = reply
        self.error = error
        self.closed = False

    def exchange(self, phases: Sequence[Phase]) -> list[bytes]:
        self.calls.append(list(phases))
        if self.error is not None:
            raise self.error
        return [bytes([self.reply]) * p.rx_len for p in phases]

    def close(self) -> None:
        self.closed = True


def _geometry(name: str = "93c66", x16: bool = False):
    return resolve(GeometrySelection(profile=name, x16=x16))


class TestPrimitives:
    """Frames produced by each primitive."""

    def test_read_status(self) -> None:
        transport = RecordingTransport(reply=0x5A)
        session = Session(transport, _geometry())
        assert session.read_status() == 0x5A
        (phases,) = transport.calls
        assert phases == [Phase(rx_len=1, speed_hz=100_000)]

    def test_read_words_frames(self) -> None:
        geometry = _geometry(x16=True)
        transport = RecordingTransport(reply=0x11)
        session = Session(transport, geometry, speed_hz=50_000)
        assert session.read_words(7, 2) == b"\x11\x11"
        header, data = transport.calls[0]
        expected = encode_command(geometry, OP_READ, 7 << 1, dummy_bits=1)
        assert header.tx == expected.tx
        assert header.speed_hz == 50_000
        assert data.tx is None
        assert data.rx_len == 2

    def test_read_words_x8_header(self) -> None:
        """x8 reads put the word address above the dummy bit."""
        transport = RecordingTransport()
        Session(transport, _geometry("93c46")).read_words(5, 1)
        assert transport.calls[0][0].tx == bytes([0x06, 0x0A])

    def test_read_words_x16_matches_byte_offset(self) -> None:
        """In x16 mode the read field equals the byte offset of the word."""
        geometry = _geometry(x16=True)
        transport = RecordingTransport()
        Session(transport, geometry).read_words(0x40, 2)
        header = transport.calls[0][0]
        assert int.from_bytes(header.tx, "big") & 0x1FF == 0x80

    def test_write_words_frames(self) -> None:
        geometry = _geometry()
        transport = RecordingTransport()
        Session(transport, geometry).write_words(0x1F, b"\x42")
        header, data = transport.calls[0]
        assert header.tx == encode_command(geometry, OP_WRITE, 0x1F).tx
        assert data.tx == b"\x42"

    def test_write_words_wrong_length(self) -> None:
        transport = RecordingTransport()
        session = Session(transport, _geometry(x16=True))
        with pytest.raises(ValueError, match="2 byte"):
            session.write_words(0, b"\x00")
        assert transport.calls == []

    def test_control_header_only(self) -> None:
        transport = RecordingTransport()
        Session(transport, _geometry()).enable_write()
        (phases,) = transport.calls
        assert len(phases) == 1
        assert phases[0].tx == bytes([0x09, 0x80])

    def test_disable_and_erase(self) -> None:
        transport = RecordingTransport()
        session = Session(transport, _geometry())
        session.disable_write()
        session.erase_chip()
        assert transport.calls[0][0].tx == bytes([0x08, 0x00])
        assert transport.calls[1][0].tx == bytes([0x09, 0x00])


class TestTransportErrors:
    """Bus failures surface as TransportError without retry."""

    def test_os_error_wrapped(self) -> None:
        transport = RecordingTransport(error=OSError(5, "Input/output error"))
        session = Session(transport, _geometry())
        with pytest.raises(TransportError, match="eeprom read") as exc:
            session.read_words(0, 1)
        assert isinstance(exc.value.__cause__, OSError)
        assert len(transport.calls) == 1

    def test_transport_error_passes_through(self) -> None:
        original = TransportError("bus gone")
        session = Session(RecordingTransport(error=original), _geometry())
        with pytest.raises(TransportError) as exc:
            session.read_status()
        assert exc.value is original


class TestWaitReady:
    """Bounded completion polling."""

    def test_ready_immediately(self) -> None:
        sleeps: list[float] = []
        session = Session(RecordingTransport(reply=0xFF), _geometry(), sleep=sleeps.append)
        assert session.wait_ready() == 1
        assert sleeps == []

    def test_sleeps_between_polls(self) -> None:
        sim = SimulatedEeprom(_geometry("93c46"), busy_polls=3)
        sleeps: list[float] = []
        session = Session(sim, sim.geometry, poll=PollPolicy(interval=0.002),
                          sleep=sleeps.append)
        session.enable_write()
        session.write_words(0, b"\x00")
        assert session.wait_ready() == 4
        assert sleeps == [0.002] * 3

    def test_timeout(self) -> None:
        clock = itertools.count(0.0, 0.1)
        session = Session(
            RecordingTransport(reply=0x00), _geometry(),
            poll=PollPolicy(timeout=0.35, interval=0.01),
            sleep=lambda _s: None, clock=lambda: next(clock),
        )
        with pytest.raises(BusyTimeoutError, match="still busy") as exc:
            session.wait_ready()
        assert exc.value.polls == 4

    def test_max_polls(self) -> None:
        transport = RecordingTransport(reply=0x7F)
        session = Session(
            transport, _geometry(),
            poll=PollPolicy(timeout=60.0, max_polls=5),
            sleep=lambda _s: None,
        )
        with pytest.raises(BusyTimeoutError) as exc:
            session.wait_ready()
        assert exc.value.polls == 5
        assert len(transport.calls) == 5

    def test_busy_timeout_distinct_from_bus_fault(self) -> None:
        """A hung part is not caught by handlers for bus faults."""
        session = Session(
            RecordingTransport(reply=0x00), _geometry(),
            poll=PollPolicy(max_polls=1), sleep=lambda _s: None,
        )
        with pytest.raises(BusyTimeoutError) as exc:
            try:
                session.wait_ready()
            except TransportError:
                pytest.fail("busy timeout reported as a transport error")
        assert isinstance(exc.value, TimeoutError)
        assert not issubclass(BusyTimeoutError, TransportError)


class TestSessionLifetime:

    def test_context_manager_closes(self) -> None:
        transport = RecordingTransport()
        with Session(transport, _geometry()) as session:
            session.read_status()
        assert transport.closed
