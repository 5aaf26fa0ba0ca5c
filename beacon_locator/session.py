# session.py
"""
Сессия сканирования: реестр маячков, расчёт позиции и расписание отправки.

Всё работает в одном цикле событий asyncio: пакеты от сканера обрабатываются
по одному, а таймер отправки не выполняется одновременно с ними, поэтому
блокировки не нужны.
"""
import asyncio
import contextlib
import logging
import math
from dataclasses import dataclass
from typing import Optional

from .errors import DegenerateGeometry, PermissionDenied, ScanError
from .permissions import always_granted
from .positioning import PositionCalculator, PositionEstimate
from .registry import BeaconRegistry
from .reporter import PositionReportScheduler

logger = logging.getLogger(__name__)

STATUS_INITIALIZING = 'Initializing beacon scanning...'
STATUS_SCANNING = 'Scanning for beacons...'
STATUS_PERMISSIONS_DENIED = 'Permissions not granted. Please enable them to scan for beacons.'


@dataclass(frozen=True)
class SessionSnapshot:
    status: str
    beacons: tuple
    position: Optional[PositionEstimate]
    result_text: str


class ScanningSession:
    def __init__(self, settings, source, sink, permission_gate=always_granted, scheduler=None):
        self.settings = settings
        self.registry = BeaconRegistry()
        self.calculator = PositionCalculator(
            settings.reference_positions, settings.reference_rssi, settings.path_loss_exponent
        )
        self.scheduler = scheduler or PositionReportScheduler()

        self._source = source
        self._sink = sink
        self._permission_gate = permission_gate
        self._observers = []
        self._consumer = None
        self._stopped = asyncio.Event()

        self.status = STATUS_INITIALIZING
        self.position = None
        self.result_text = ''
        self.error = None

    # --- Подписка на изменения состояния ---

    def subscribe(self, callback):
        """callback(SessionSnapshot) вызывается после каждого значимого изменения."""
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def snapshot(self):
        return SessionSnapshot(self.status, self.registry.snapshot(), self.position, self.result_text)

    def _emit(self):
        snapshot = self.snapshot()
        for callback in list(self._observers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Status observer failed")

    def _set_status(self, status):
        self.status = status
        self._emit()

    # --- Жизненный цикл ---

    async def start(self):
        if self._consumer is not None:
            raise RuntimeError("Session already started")

        if not await self._permission_gate():
            self.error = PermissionDenied(STATUS_PERMISSIONS_DENIED)
            logger.warning("Bluetooth permissions not granted, scanning is not started")
            self._set_status(STATUS_PERMISSIONS_DENIED)
            return False

        self._set_status(STATUS_SCANNING)
        self._consumer = asyncio.get_running_loop().create_task(self._consume(), name="beacon-discovery")
        return True

    async def _consume(self):
        advertisements = aiter(self._source)
        while True:
            try:
                advertisement = await anext(advertisements)
            except StopAsyncIteration:
                logger.info("Discovery source finished")
                return
            except Exception as e:
                # Ошибка источника останавливает обработку, но не расписание отправки
                self.error = ScanError(str(e))
                logger.error(f"Beacon scan failed: {e!r}")
                self._set_status(f"Error: {e}")
                return

            try:
                self.handle_advertisement(advertisement)
            except Exception:
                logger.exception(f"Failed to process advertisement from {advertisement.identity}")

    async def stop(self):
        if self._consumer is not None and not self._consumer.done():
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
        self.scheduler.shutdown()
        self._stopped.set()

    async def run(self):
        """
        Работает до stop(). Конец потока маячков или ошибка сканирования
        останавливают только обнаружение, отправка позиции продолжается.
        Сразу возвращается лишь при отказе в разрешениях.
        """
        try:
            if await self.start():
                await self._stopped.wait()
        finally:
            await self.stop()
        return self.snapshot()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    # --- Обработка обнаруженных маячков ---

    def handle_advertisement(self, advertisement):
        if self.settings.name_filter not in advertisement.name:
            return None

        result = self.registry.observe(advertisement.identity, advertisement.name, advertisement.rssi)
        if not result.added:
            return result

        logger.info(f"New beacon {advertisement.name} ({advertisement.identity}), RSSI {advertisement.rssi}")
        self.status = f"Found {result.size} beacons!"
        # Пересчитываем на каждом новом маячке, всегда по первым трём
        if result.size >= 3:
            self._locate()
        self._emit()
        return result

    def locate(self):
        """Считает позицию по первым трём маячкам; InsufficientBeacons, если их меньше."""
        position = self._locate()
        self._emit()
        return position

    def _locate(self):
        try:
            position = self.calculator.calculate_position(self.registry.first(3))
        except DegenerateGeometry as e:
            logger.warning(f"Degenerate beacon geometry: {e}")
            self.result_text = f"Error: {e}"
            return None

        if not (math.isfinite(position.x) and math.isfinite(position.y)):
            logger.warning(f"Distance out of range, position is ({position.x}, {position.y})")
            self.result_text = "Error: Unable to calculate position (distance out of range)"
            return None

        self.position = position
        self.result_text = str(position)
        logger.info(self.result_text)
        self.scheduler.schedule(position, self.settings.report_interval, self._sink)
        return position
