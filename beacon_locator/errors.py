# errors.py


class LocatorError(Exception):
    """Базовая ошибка конвейера позиционирования."""


class PermissionDenied(LocatorError):
    """Нет разрешений на сканирование, сессия не запускается."""


class ScanError(LocatorError):
    """Источник обнаружения завершился с ошибкой."""


class InsufficientBeacons(LocatorError):
    """Маячков меньше трёх, считать позицию рано."""

    def __init__(self, found, required=3):
        super().__init__(f"Need at least {required} beacons, found {found}")
        self.found = found
        self.required = required


class DegenerateGeometry(LocatorError):
    """Опорные точки лежат на одной прямой или совпадают (знаменатель = 0)."""


class ReportTransportFailure(LocatorError):
    """Не удалось отправить позицию: плохой статус или сетевая ошибка."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
