# main.py
import argparse
import asyncio
import logging
import sys

from . import config
from .api_client import HttpPositionSink
from .ble_scanner import BleBeaconScanner
from .mqtt_client import MqttPositionSink
from .permissions import always_granted, check_bluetooth_permissions
from .session import ScanningSession
from .simulator import simulated_advertisements

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Estimate position from 3 BLE beacons and report it")
    parser.add_argument("--beacons", help="CSV file 'Name;X;Y' with the 3 beacon positions")
    parser.add_argument("--url", help=f"Server URL (default {config.SERVER_URL})")
    parser.add_argument("--mqtt", action="store_true", help="Publish to MQTT instead of HTTP")
    parser.add_argument("--interval", type=float, help="Report interval, seconds")
    parser.add_argument("--name-filter", help="Only devices whose name contains this string")
    parser.add_argument("--simulate", action="store_true", help="Use simulated beacons instead of Bluetooth")
    parser.add_argument("--target", type=float, nargs=2, default=(1.0, 1.0), metavar=("X", "Y"),
                        help="Simulated receiver position")
    parser.add_argument("--noise", type=float, default=0.0, help="Simulated RSSI noise (dBm)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def print_snapshot(snapshot):
    print(snapshot.status)
    if snapshot.result_text:
        print(f"--> {snapshot.result_text}")
    for beacon in snapshot.beacons:
        print(f"    {beacon.display_name} [{beacon.identity}] RSSI: {beacon.rssi}")


def build_session(args, settings):
    if args.mqtt:
        sink = MqttPositionSink(settings.mqtt_broker, settings.mqtt_port, settings.mqtt_topic)
    else:
        sink = HttpPositionSink(settings.server_url, timeout=settings.report_interval)

    if args.simulate:
        source = simulated_advertisements(
            settings.reference_positions, tuple(args.target),
            settings.reference_rssi, settings.path_loss_exponent, noise=args.noise,
        )
        gate = always_granted
    else:
        source = BleBeaconScanner()
        gate = check_bluetooth_permissions

    return ScanningSession(settings, source, sink, permission_gate=gate), sink


async def run(args):
    settings = config.load_settings(
        args.beacons,
        server_url=args.url,
        report_interval=args.interval,
        name_filter=args.name_filter,
    )
    session, sink = build_session(args, settings)
    session.subscribe(print_snapshot)
    try:
        await session.run()
    finally:
        if isinstance(sink, MqttPositionSink):
            sink.close()
    return 1 if session.error else 0


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nStopped.")
        return 0


if __name__ == '__main__':
    sys.exit(main())
