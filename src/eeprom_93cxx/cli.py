"""Command-line interface for programming 93Cxx Microwire EEPROMs."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn
from rich.table import Table

from .errors import EepromError, FileSizeMismatchError
from .geometry.profiles import PROFILES, Organization
from .geometry.resolve import GeometrySelection, ResolvedGeometry, resolve
from .hexdump import format_hex_dump
from .protocol.session import DEFAULT_SPEED_HZ, PollPolicy, Session
from .protocol.workflows import erase_all, read_all, write_all
from .transport.base import Transport
from .transport.linux import DEFAULT_DEVICE, SpidevTransport
from .transport.sim import SimulatedEeprom

SIM_DEVICE = "sim"

EPILOG = """\
examples:
  %(prog)s -D /dev/spidev2.0 -r eeprom.bin -t 93c66 --x16
  %(prog)s -D /dev/spidev2.0 -e -b8 -s 512 --x16
"""

console = Console(stderr=True)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eeprom-93cxx",
        description="Read, write, and erase 93Cxx Microwire EEPROMs over spidev",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-D", "--spi-device", default=DEFAULT_DEVICE,
        help=f"SPI device (default {DEFAULT_DEVICE}); "
             f"'{SIM_DEVICE}' uses an in-memory simulated part",
    )
    parser.add_argument("-t", "--eeprom-type", help="EEPROM type/part number")
    parser.add_argument(
        "--x16", action="store_true", help="EEPROM is in x16 configuration",
    )
    parser.add_argument(
        "-b", "--addr-bits", type=int,
        help="Number of address bits in command header",
    )
    parser.add_argument("-s", "--eeprom-size", type=int, help="EEPROM size in bytes")

    action = parser.add_mutually_exclusive_group()
    action.add_argument("-r", "--read", metavar="FILE", help="Save EEPROM contents to FILE")
    action.add_argument("-w", "--write", metavar="FILE", help="Write FILE to EEPROM")
    action.add_argument("-e", "--erase", action="store_true", help="Erase EEPROM")
    action.add_argument(
        "--list-types", action="store_true", help="List known EEPROM types",
    )

    parser.add_argument(
        "--burst-read", action="store_true",
        help="(advanced) Read EEPROM in a single read command",
    )
    parser.add_argument(
        "--hexdump", action="store_true", help="Print a hex dump after reading",
    )
    parser.add_argument(
        "--lock", action="store_true",
        help="Send write-disable after writing or erasing",
    )
    parser.add_argument(
        "--no-erase-wait", action="store_true",
        help="Do not poll for completion after erase",
    )
    parser.add_argument(
        "--speed-hz", type=int, default=DEFAULT_SPEED_HZ,
        help=f"SPI clock (default {DEFAULT_SPEED_HZ})",
    )
    parser.add_argument(
        "--timeout", type=float, default=PollPolicy.timeout,
        help=f"Seconds to wait for a write cycle (default {PollPolicy.timeout})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug output")
    return parser


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def open_transport(device: str, geometry: ResolvedGeometry) -> Transport:
    """Open the bus named on the command line."""
    if device == SIM_DEVICE:
        return SimulatedEeprom(geometry)
    return SpidevTransport.open(device)


def list_types() -> None:
    """Print the known parts."""
    table = Table(title="Known EEPROM types")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Addr bits (x8)", justify="right")
    table.add_column("Organizations")
    for profile in PROFILES:
        orgs = [o.name.lower() for o in (Organization.X8, Organization.X16)
                if profile.organizations & o]
        table.add_row(
            profile.name, str(profile.size_bytes), str(profile.addr_bits),
            ", ".join(orgs),
        )
    Console().print(table)


def _progress() -> Progress:
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        console=console,
        transient=True,
    )


def _do_read(session: Session, args: argparse.Namespace) -> None:
    size = session.geometry.size_bytes
    with _progress() as progress:
        task = progress.add_task("Reading", total=size)
        data = read_all(
            session, burst=args.burst_read,
            progress=lambda done, _total: progress.update(task, completed=done),
        )
    with open(args.read, "wb") as f:
        f.write(data)
    console.print(f"Read {len(data)} bytes into {args.read}")
    if args.hexdump:
        print(format_hex_dump(bytes(data), word_size=session.geometry.word_size))


def _do_write(session: Session, image: bytes, args: argparse.Namespace) -> None:
    with _progress() as progress:
        task = progress.add_task("Writing", total=len(image))
        written = write_all(
            session, image, lock=args.lock,
            progress=lambda done, _total: progress.update(task, completed=done),
        )
    console.print(f"Wrote {written} bytes from {args.write}")


def run(args: argparse.Namespace) -> int:
    """Execute the parsed command line. Returns the process exit code."""
    if args.list_types:
        list_types()
        return 0

    selection = GeometrySelection(
        profile=args.eeprom_type,
        size_bytes=args.eeprom_size,
        addr_bits=args.addr_bits,
        x16=args.x16,
    )
    geometry = resolve(selection)
    console.print(f"EEPROM config: {geometry.describe()}")

    image = None
    if args.write is not None:
        with open(args.write, "rb") as f:
            image = f.read()
        # Checked again by write_all; failing here avoids opening the bus
        if len(image) != geometry.size_bytes:
            raise FileSizeMismatchError(len(image), geometry.size_bytes)

    transport = open_transport(args.spi_device, geometry)
    poll = PollPolicy(timeout=args.timeout)
    with Session(transport, geometry, speed_hz=args.speed_hz, poll=poll) as session:
        if args.read is not None:
            _do_read(session, args)
        elif image is not None:
            _do_write(session, image, args)
        elif args.erase:
            erase_all(session, wait=not args.no_erase_wait, lock=args.lock)
            console.print("Erase complete.")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the eeprom-93cxx CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if not (args.read or args.write or args.erase or args.list_types):
        parser.print_help()
        sys.exit(1)

    try:
        code = run(args)
    except (EepromError, OSError) as e:
        console.print(f"Error: {e}", markup=False)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
