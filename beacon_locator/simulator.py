# simulator.py
"""Имитация BLE-сканера для запуска без железа."""
import asyncio
import math
import random

from .ble_scanner import Advertisement
from .positioning import A, N, distance_to_rssi

DECOY_NAMES = ["Pixel 9", "JBL Flip", "Mi Band"]


def simulated_beacons(references, target, reference_rssi=A, path_loss_exponent=N, name_prefix="ESP32_beacon"):
    """Маячки в опорных точках и их "идеальное" RSSI для приёмника в точке target."""
    beacons = []
    for i, (bx, by) in enumerate(references):
        distance = max(math.hypot(target[0] - bx, target[1] - by), 0.1)
        rssi = float(distance_to_rssi(distance, reference_rssi, path_loss_exponent))
        beacons.append((f"SIM:00:00:00:00:{i + 1:02X}", f"{name_prefix}_{i + 1}", rssi))
    return beacons


async def simulated_advertisements(references, target=(1.0, 1.0), reference_rssi=A, path_loss_exponent=N,
                                   noise=0.0, interval=0.5, decoys=True, rounds=None, rng=None):
    """
    Бесконечный (или rounds раз) поток рекламных пакетов. Маячки идут в
    порядке слотов, между ними - посторонние устройства со случайным RSSI.
    """
    rng = rng or random.Random()
    beacons = simulated_beacons(references, target, reference_rssi, path_loss_exponent)

    done = 0
    while rounds is None or done < rounds:
        for identity, name, rssi in beacons:
            yield Advertisement(identity, name, round(rssi + rng.gauss(0, noise)) if noise else round(rssi))
            if decoys:
                decoy = rng.randrange(len(DECOY_NAMES))
                yield Advertisement(f"DECOY:{decoy:02X}", DECOY_NAMES[decoy], rng.randint(-90, -40))
        done += 1
        await asyncio.sleep(interval)
