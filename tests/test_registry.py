from beacon_locator.registry import BeaconRegistry


def test_first_sighting_is_added():
    registry = BeaconRegistry()
    result = registry.observe("AA:01", "ESP32_1", -60)
    assert result.added is True
    assert result.size == 1
    assert [b.identity for b in registry.snapshot()] == ["AA:01"]


def test_duplicate_identity_is_ignored_and_first_rssi_wins():
    registry = BeaconRegistry()
    registry.observe("AA:01", "ESP32_1", -60)
    result = registry.observe("AA:01", "ESP32_1 renamed", -40)
    assert result.added is False
    assert result.size == 1
    (beacon,) = registry.snapshot()
    assert beacon.rssi == -60
    assert beacon.display_name == "ESP32_1"


def test_discovery_order_is_preserved():
    registry = BeaconRegistry()
    for identity in ["C", "A", "B", "A", "D", "C"]:
        registry.observe(identity, f"ESP32_{identity}", -70)
    assert [b.identity for b in registry.snapshot()] == ["C", "A", "B", "D"]
    assert [b.discovery_order for b in registry.snapshot()] == [0, 1, 2, 3]
    assert [b.identity for b in registry.first(3)] == ["C", "A", "B"]
    assert len(registry) == 4


def test_snapshot_is_not_affected_by_later_growth():
    registry = BeaconRegistry()
    registry.observe("A", "ESP32_A", -70)
    snapshot = registry.snapshot()
    registry.observe("B", "ESP32_B", -71)
    assert len(snapshot) == 1
    assert len(registry.snapshot()) == 2
