# config.py
"""
Настройки приёмника. Значения по умолчанию можно переопределить
переменными окружения LOCATOR_* или файлом с координатами маячков.
"""
import csv
import logging
import os
from dataclasses import dataclass

from .positioning import ReferencePosition

logger = logging.getLogger(__name__)

# --- Координаты маячков (в метрах), по одной на слот обнаружения ---
# Замените на реальные координаты ваших ESP32
REFERENCE_POSITIONS = (
    ReferencePosition(0.0, 0.0),  # Маячок 1
    ReferencePosition(5.0, 0.0),  # Маячок 2
    ReferencePosition(0.0, 5.0),  # Маячок 3
)

# --- Калибровка log-distance модели ---
REFERENCE_RSSI = float(os.getenv("LOCATOR_REFERENCE_RSSI", "-59"))  # RSSI на 1 метре
PATH_LOSS_EXPONENT = float(os.getenv("LOCATOR_PATH_LOSS_EXPONENT", "2.0"))

# --- Сканирование ---
BEACON_NAME_FILTER = os.getenv("LOCATOR_NAME_FILTER", "ESP32")

# --- Отправка позиции ---
REPORT_INTERVAL_S = float(os.getenv("LOCATOR_REPORT_INTERVAL", "5"))
SERVER_URL = os.getenv("LOCATOR_SERVER_URL", "https://your-server-url.com/api/update_position")
MQTT_BROKER = os.getenv("LOCATOR_MQTT_BROKER", "localhost")
MQTT_PORT = int(os.getenv("LOCATOR_MQTT_PORT", "1883"))
MQTT_TOPIC = os.getenv("LOCATOR_MQTT_TOPIC", "locator/position")


@dataclass(frozen=True)
class Settings:
    reference_positions: tuple = REFERENCE_POSITIONS
    reference_rssi: float = REFERENCE_RSSI
    path_loss_exponent: float = PATH_LOSS_EXPONENT
    name_filter: str = BEACON_NAME_FILTER
    report_interval: float = REPORT_INTERVAL_S
    server_url: str = SERVER_URL
    mqtt_broker: str = MQTT_BROKER
    mqtt_port: int = MQTT_PORT
    mqtt_topic: str = MQTT_TOPIC

    def __post_init__(self):
        if len(self.reference_positions) != 3:
            raise ValueError(f"Exactly 3 reference positions required, got {len(self.reference_positions)}")
        if self.path_loss_exponent <= 0:
            raise ValueError("Path loss exponent must be positive")
        if self.report_interval <= 0:
            raise ValueError("Report interval must be positive")


def load_reference_positions(filename):
    """
    Загружает координаты маячков из CSV файла вида "Name;X;Y".

    Первые три строки задают слоты 0, 1, 2. Имена только для наглядности:
    маячки сопоставляются со слотами по порядку обнаружения.
    """
    positions = []
    with open(filename, mode='r', encoding='utf-8') as infile:
        reader = csv.DictReader(infile, delimiter=';')
        for row in reader:
            positions.append((row['Name'], ReferencePosition(float(row['X']), float(row['Y']))))

    if len(positions) < 3:
        raise ValueError(f"{filename}: need 3 beacon positions, found {len(positions)}")
    if len(positions) > 3:
        logger.warning(f"{filename}: {len(positions)} beacons listed, only the first 3 are used")

    logger.info(f"Loaded beacon positions from {filename}: {positions[:3]}")
    return tuple(position for _, position in positions[:3])


def load_settings(beacons_file=None, **overrides):
    """Собирает Settings из констант модуля, файла маячков и явных параметров."""
    if beacons_file:
        overrides.setdefault("reference_positions", load_reference_positions(beacons_file))
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
