"""Command-line interface for labswitch.

Drives a 34980A switch mainframe by fixture pin number. Every invocation
resets the mainframe and rebuilds the pin/relay table, so relays closed by one
invocation are open again at the start of the next.

Usage:
    # Show the installed modules
    labswitch --config station.yaml slots

    # Close pins 1001 and 2001 on a mainframe given by address
    labswitch --address TCPIP0::192.168.1.10::INSTR --pins 64 close 1001 2001

    # Try commands against an emulated mainframe with two matrix modules
    labswitch --emulate 2 map

    # Read voltage and current from the station's Keithley 2400
    labswitch --config station.yaml smu-read
"""

from __future__ import annotations

import argparse
import logging
import sys

from labswitch_agilent import (
    PINS_PER_MODULE,
    SLOT_COUNT,
    Agilent34980A,
    create_instrument,
    make_34980a_emulator,
)
from labswitch_core.errors import LabswitchError
from labswitch_keithley import Keithley2400, Keithley2400Emulator
from labswitch_keithley import create_instrument as create_smu
from labswitch_scpi import ScpiConnection

from labswitch_station.config import load_station_config

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def open_switch(args: argparse.Namespace) -> Agilent34980A:
    """Connect to and initialize the switch selected by the global options.

    Raises:
        ValueError: If no address or pin count can be resolved.
        FileNotFoundError: If ``--config`` names a missing file.
    """
    if args.pins is not None and args.pins < 1:
        raise ValueError(f"--pins must be a positive integer, got {args.pins}")
    if args.emulate is not None:
        if not 1 <= args.emulate <= SLOT_COUNT:
            raise ValueError(f"--emulate must be between 1 and {SLOT_COUNT}")
        emulator = make_34980a_emulator(range(1, args.emulate + 1))
        switch = Agilent34980A(ScpiConnection(emulator))
        switch.initialize(args.pins if args.pins is not None else args.emulate * PINS_PER_MODULE)
        return switch

    address = args.address
    pin_count = args.pins
    timeout_ms = 5000
    if args.config:
        station = load_station_config(args.config)
        if station.switch is not None:
            address = address or station.switch.visa_address
            if pin_count is None:
                pin_count = station.switch.pin_count
            timeout_ms = station.switch.timeout_ms
    if not address:
        raise ValueError("No switch address: use --address, --config or --emulate")
    if pin_count is None:
        raise ValueError("No pin count: use --pins or a config with switch.pin_count")
    return create_instrument(address, pin_count, timeout_ms=timeout_ms)


def open_smu(args: argparse.Namespace) -> Keithley2400:
    """Connect to and reset the SMU from the station configuration.

    With ``--emulate`` an in-process Keithley 2400 emulator is used instead.

    Raises:
        ValueError: If no config with an ``smu`` section is given.
        FileNotFoundError: If ``--config`` names a missing file.
    """
    if args.emulate is not None:
        smu = Keithley2400(ScpiConnection(Keithley2400Emulator()))
        smu.initialize()
        return smu
    if not args.config:
        raise ValueError("No SMU address: use --config with an smu section or --emulate")
    station = load_station_config(args.config)
    if station.smu is None:
        raise ValueError(f"Config {args.config} has no smu section")
    return create_smu(station.smu.visa_address, timeout_ms=station.smu.timeout_ms)


def cmd_smu_read(smu: Keithley2400) -> int:
    """Print the SMU identity and one voltage/current reading."""
    print(smu.get_identity())
    reading = smu.read_source_data()
    print(f"Voltage: {reading.voltage:+.6e} V")
    print(f"Current: {reading.current:+.6e} A")
    return 0


def cmd_slots(switch: Agilent34980A, args: argparse.Namespace) -> int:
    """List the module in every slot."""
    for module in switch.modules:
        if module.is_usable:
            status = "matrix"
        elif module.model:
            status = "unsupported"
        else:
            status = "empty"
        print(f"Slot {module.slot}: {module.model or '-'} ({status})")
    return 0


def cmd_map(switch: Agilent34980A, args: argparse.Namespace) -> int:
    """Print the pin-to-relay table."""
    table = switch.table
    print(f"{len(table)} pins on slots {','.join(str(s) for s in table.slots)}")
    for pin, relay in sorted(table.pin_to_relay.items()):
        print(f"  {pin} -> {relay}")
    return 0


def cmd_close(switch: Agilent34980A, args: argparse.Namespace) -> int:
    """Close the relays behind the given pins."""
    channels = switch.pins_to_channel_list(args.pin)
    switch.close_pins(args.pin)
    print(f"Closed (@{channels})")
    return 0


def cmd_open(switch: Agilent34980A, args: argparse.Namespace) -> int:
    """Open the relays behind the given pins."""
    channels = switch.pins_to_channel_list(args.pin)
    switch.open_pins(args.pin)
    print(f"Opened (@{channels})")
    return 0


def cmd_state(switch: Agilent34980A, args: argparse.Namespace) -> int:
    """Show whether the relays behind the given pins are closed."""
    states = switch.get_commutation(args.pin)
    for pin, closed in zip(args.pin, states):
        print(f"{pin}: {'closed' if closed else 'open'}")
    return 0


def cmd_open_all(switch: Agilent34980A, args: argparse.Namespace) -> int:
    """Open every relay."""
    switch.open_all()
    print("All relays open")
    return 0


_COMMANDS = {
    "slots": cmd_slots,
    "map": cmd_map,
    "close": cmd_close,
    "open": cmd_open,
    "state": cmd_state,
    "open-all": cmd_open_all,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="labswitch",
        description="34980A relay matrix control by fixture pin number",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", "-c", help="Station YAML configuration file")
    parser.add_argument("--address", "-a", help="VISA address of the 34980A (overrides config)")
    parser.add_argument(
        "--pins", "-p", type=int,
        help="Pins per row required by the fixture (overrides config)"
    )
    parser.add_argument(
        "--emulate", type=int, metavar="N",
        help="Use an in-process emulator with N matrix modules in slots 1..N"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("slots", help="List installed modules")
    subparsers.add_parser("map", help="Print the pin-to-relay table")
    for name, help_text in (
        ("close", "Close relays for the given pins"),
        ("open", "Open relays for the given pins"),
        ("state", "Show relay state for the given pins"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("pin", type=int, nargs="+", help="Fixture pin number (row*1000+column)")
    subparsers.add_parser("open-all", help="Open every relay in every slot")
    subparsers.add_parser("smu-read", help="Show the SMU identity and one reading")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.debug)

    if args.command == "smu-read":
        return _run_smu(args)

    try:
        switch = open_switch(args)
    except (LabswitchError, FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        advisory = switch.table.advisory
        if advisory is not None:
            print(f"Warning: {advisory}", file=sys.stderr)
        return _COMMANDS[args.command](switch, args)
    except LabswitchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        switch.close()



def _run_smu(args: argparse.Namespace) -> int:
    try:
        smu = open_smu(args)
    except (LabswitchError, FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        return cmd_smu_read(smu)
    except (LabswitchError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        smu.close()

if __name__ == "__main__":
    sys.exit(main())
