# ble_scanner.py
import asyncio
import logging
from dataclasses import dataclass

from bleak import BleakScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Advertisement:
    identity: str
    name: str
    rssi: int


class BleBeaconScanner:
    """
    Непрерывное сканирование BLE. Каждый рекламный пакет превращается в
    Advertisement; фильтрация по имени и дубликаты - забота сессии.
    """

    def __init__(self, scanner_factory=BleakScanner, **scanner_kwargs):
        self._scanner_factory = scanner_factory
        self._scanner_kwargs = scanner_kwargs

    async def __aiter__(self):
        queue = asyncio.Queue()

        def detection_callback(device, advertisement_data):
            # bleak вызывает колбэк в потоке цикла событий
            name = advertisement_data.local_name or device.name or ""
            queue.put_nowait(Advertisement(device.address, name, advertisement_data.rssi))

        scanner = self._scanner_factory(detection_callback=detection_callback, **self._scanner_kwargs)
        await scanner.start()
        logger.info("BLE scan started")
        try:
            while True:
                yield await queue.get()
        finally:
            await scanner.stop()
            logger.info("BLE scan stopped")
