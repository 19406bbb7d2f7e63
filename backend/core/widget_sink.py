"""
Fire-and-forget hand-off of generated charts to an external widget store.

The store may be slow or down; submit() never blocks the chart response and
write failures are only logged.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from models.base import CamelModel
from models.chart import Analysis

logger = logging.getLogger(__name__)


class WidgetRecord(CamelModel):
    prompt: str
    sql_query: str
    chart_spec: dict[str, Any]
    analysis: Analysis
    is_last_widget: bool = True


class FireAndForgetSink:
    def __init__(self, write: Callable[[WidgetRecord], Any], max_workers: int = 2):
        self._write = write
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="widget-sink")

    def submit(self, record: WidgetRecord) -> Optional[Future]:
        try:
            future = self._pool.submit(self._write, record)
        except RuntimeError as e:
            # Pool already shut down
            logger.warning("Widget sink unavailable, dropping record: %s", e)
            return None
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future: Future) -> None:
        err = future.exception()
        if err is not None:
            logger.warning("Widget persistence failed: %s", err)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)
