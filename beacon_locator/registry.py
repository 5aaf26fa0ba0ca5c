# registry.py
from dataclasses import dataclass


@dataclass(frozen=True)
class BeaconObservation:
    identity: str
    display_name: str
    rssi: int
    discovery_order: int


@dataclass(frozen=True)
class ObserveResult:
    added: bool
    size: int


class BeaconRegistry:
    """Маячки, увиденные за сессию, в порядке обнаружения. Только добавление."""

    def __init__(self):
        self._beacons = []
        self._identities = set()

    def observe(self, identity, display_name, rssi):
        # Повторное появление маячка игнорируется, первое RSSI остаётся
        if identity in self._identities:
            return ObserveResult(False, len(self._beacons))

        self._beacons.append(BeaconObservation(identity, display_name, rssi, len(self._beacons)))
        self._identities.add(identity)
        return ObserveResult(True, len(self._beacons))

    def first(self, n):
        return tuple(self._beacons[:n])

    def snapshot(self):
        return tuple(self._beacons)

    def __len__(self):
        return len(self._beacons)
