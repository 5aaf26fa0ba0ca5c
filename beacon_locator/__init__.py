"""Определение позиции приёмника по RSSI трёх BLE-маячков."""

__version__ = "0.1.0"
