# permissions.py
import logging

from bleak import BleakScanner
from bleak.exc import BleakError

logger = logging.getLogger(__name__)


async def check_bluetooth_permissions(scanner_factory=BleakScanner):
    """
    Пробует коротко запустить сканер. Нет адаптера или нет прав на
    Bluetooth - считаем, что разрешения не выданы.
    """
    try:
        scanner = scanner_factory()
        await scanner.start()
        await scanner.stop()
    except (BleakError, OSError) as e:
        logger.warning(f"Bluetooth is not available: {e}")
        return False
    return True


async def always_granted():
    return True
