# reporter.py
"""
Периодическая отправка последней позиции на сервер.

Таймер работает в цикле событий asyncio, а сама отправка уходит в пул
потоков: медленная сеть не сдвигает расписание, и несколько запросов
могут быть в полёте одновременно (порядок доставки не гарантируется).
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

from .errors import ReportTransportFailure

logger = logging.getLogger(__name__)


class PositionReportScheduler:
    def __init__(self, executor=None, max_workers=4):
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="position-push"
        )
        self._task = None
        self._in_flight = set()
        self._closed = False

    @property
    def active(self):
        return self._task is not None and not self._task.done()

    @property
    def in_flight(self):
        return len(self._in_flight)

    def schedule(self, position, interval, sink):
        """
        Отменяет текущее расписание и запускает новое: sink.push(x, y)
        через interval секунд и далее каждые interval секунд с той же позицией.
        """
        if self._closed:
            raise RuntimeError("Scheduler has been shut down")
        if interval <= 0:
            raise ValueError("Report interval must be positive")

        self.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self._run(position, interval, sink), name="position-report"
        )
        logger.debug(f"Reporting ({position.x:.2f}, {position.y:.2f}) every {interval}s to {sink!r}")
        return self._task

    async def _run(self, position, interval, sink):
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(interval)
            self._dispatch(loop, position, sink)

    def _dispatch(self, loop, position, sink):
        future = loop.run_in_executor(self._executor, sink.push, position.x, position.y)
        self._in_flight.add(future)
        future.add_done_callback(self._push_done)

    def _push_done(self, future):
        self._in_flight.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if isinstance(exc, ReportTransportFailure):
            logger.warning(str(exc))
        elif exc is not None:
            logger.error(f"Unexpected error sending position: {exc!r}", exc_info=exc)

    def cancel(self):
        # Отмена не прерывает уже отправленные запросы, только будущие
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def drain(self):
        """Ждёт завершения запросов, которые уже в полёте."""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def shutdown(self, wait=False):
        self.cancel()
        self._closed = True
        self._executor.shutdown(wait=wait)
