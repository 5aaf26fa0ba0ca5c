import asyncio
import random
from types import SimpleNamespace

from bleak.exc import BleakError

from beacon_locator.ble_scanner import Advertisement, BleBeaconScanner
from beacon_locator.permissions import always_granted, check_bluetooth_permissions
from beacon_locator.positioning import ReferencePosition, distance_to_rssi
from beacon_locator.simulator import simulated_advertisements, simulated_beacons

REFERENCES = (ReferencePosition(0, 0), ReferencePosition(5, 0), ReferencePosition(0, 5))


class FakeBleakScanner:
    instances = []

    def __init__(self, detection_callback=None, fail_on_start=False):
        self.detection_callback = detection_callback
        self.fail_on_start = fail_on_start
        self.started = False
        self.stopped = False
        FakeBleakScanner.instances.append(self)

    async def start(self):
        if self.fail_on_start:
            raise BleakError("No Bluetooth adapters found.")
        self.started = True
        if self.detection_callback is None:
            return
        device = SimpleNamespace(address="24:0A:C4:00:00:01", name="ESP32")
        self.detection_callback(device, SimpleNamespace(local_name="ESP32_beacon_1", rssi=-61))
        self.detection_callback(SimpleNamespace(address="11:22", name="Phone"), SimpleNamespace(local_name=None, rssi=-80))

    async def stop(self):
        self.stopped = True


def test_scanner_yields_advertisements_and_stops():
    async def scenario():
        iterator = BleBeaconScanner(scanner_factory=FakeBleakScanner).__aiter__()
        first = await iterator.__anext__()
        second = await iterator.__anext__()
        await iterator.aclose()
        return first, second

    first, second = asyncio.run(scenario())
    assert first == Advertisement("24:0A:C4:00:00:01", "ESP32_beacon_1", -61)
    assert second == Advertisement("11:22", "Phone", -80)
    assert FakeBleakScanner.instances[-1].stopped


def test_permissions_granted_when_scanner_starts():
    assert asyncio.run(check_bluetooth_permissions(FakeBleakScanner)) is True
    assert asyncio.run(always_granted()) is True


def test_permissions_denied_without_adapter():
    def factory():
        return FakeBleakScanner(fail_on_start=True)

    assert asyncio.run(check_bluetooth_permissions(factory)) is False


async def collect(source):
    return [adv async for adv in source]


def test_simulator_emits_beacons_in_slot_order():
    advertisements = asyncio.run(collect(
        simulated_advertisements(REFERENCES, target=(1, 1), decoys=False, rounds=1, interval=0)
    ))
    assert [a.name for a in advertisements] == ["ESP32_beacon_1", "ESP32_beacon_2", "ESP32_beacon_3"]
    assert [a.rssi for a in advertisements] == [
        round(distance_to_rssi(2 ** 0.5)), round(distance_to_rssi(17 ** 0.5)), round(distance_to_rssi(17 ** 0.5))
    ]


def test_simulator_decoys_do_not_match_beacon_filter():
    advertisements = asyncio.run(collect(
        simulated_advertisements(REFERENCES, rounds=2, interval=0, noise=2.0, rng=random.Random(7))
    ))
    assert len(advertisements) == 12
    decoys = [a for a in advertisements if "ESP32" not in a.name]
    assert len(decoys) == 6
    assert all(-90 <= a.rssi <= -40 for a in decoys)
    assert len({a.identity for a in advertisements if "ESP32" in a.name}) == 3


def test_simulated_beacon_at_reference_point_is_finite():
    beacons = simulated_beacons(REFERENCES, target=(0, 0))
    assert beacons[0][2] == distance_to_rssi(0.1)
