"""Message sinks that carry protocol records from the pipeline to a consumer."""

import logging
import queue
import threading
from typing import Callable, Dict, Iterator, List, Optional

from .protocol import encode_message

logger = logging.getLogger(__name__)

_CLOSE = object()


class ListSink:
    """Collects records in memory, optionally forwarding each one as it arrives."""

    def __init__(self, on_emit: Optional[Callable[[Dict], None]] = None):
        self.messages: List[Dict] = []
        self.on_emit = on_emit
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, message: Dict) -> bool:
        if self._closed:
            return False
        self.messages.append(message)
        if self.on_emit is not None:
            self.on_emit(message)
        return True

    def close(self) -> None:
        self._closed = True


class QueueSink:
    """Thread-safe sink read by a single consumer through `iter_lines`.

    The producer runs in its own thread. When the consumer stops reading
    (for example the HTTP client disconnected), the sink is closed and the
    producer sees `closed` become true on its next check.
    """

    def __init__(self):
        self._queue: "queue.Queue" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def emit(self, message: Dict) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._queue.put(message)
            return True

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSE)

    def iter_messages(self) -> Iterator[Dict]:
        try:
            while True:
                item = self._queue.get()
                if item is _CLOSE:
                    return
                yield item
        finally:
            # Reached on normal end and when the consumer abandons the generator.
            self.close()

    def iter_lines(self) -> Iterator[bytes]:
        try:
            for message in self.iter_messages():
                yield encode_message(message)
        finally:
            self.close()


def start_producer(target: Callable[[], None], name: str = "sharedmatch-run") -> threading.Thread:
    """Run a pipeline function in a daemon thread and return the thread."""

    def runner():
        try:
            target()
        except Exception:
            logger.exception("Pipeline thread %s crashed", name)

    thread = threading.Thread(target=runner, name=name, daemon=True)
    thread.start()
    return thread
