"""In-memory channels between callers and the watch loop."""

import logging
import queue
import threading
from typing import Callable, List, Optional

from .exceptions import ChannelClosedError
from .models import RedirectRequest

logger = logging.getLogger(__name__)


class RedirectChannel:
    """
    Single-slot channel carrying redirect requests to the watch loop.

    Features:
    - Non-blocking take of the latest request
    - Undelivered requests are coalesced; only the newest survives
    - Thread-safe send from any caller thread
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: Optional[RedirectRequest] = None
        self._ready = threading.Event()
        self._closed = False

    def send(self, request: RedirectRequest) -> None:
        """
        Publish a redirect request, replacing any undelivered one.

        Args:
            request: The request to deliver

        Raises:
            ChannelClosedError: If the receiver has shut down
        """
        with self._lock:
            if self._closed:
                raise ChannelClosedError("Redirect channel is closed")
            if self._pending is not None:
                logger.debug(f"Coalescing redirect to {self._pending.directory} into {request.directory}")
            self._pending = request
            self._ready.set()

    def take_latest(self) -> Optional[RedirectRequest]:
        """
        Take the most recent undelivered request without blocking.

        Returns:
            The request, or None if nothing is pending
        """
        with self._lock:
            request = self._pending
            self._pending = None
            if not self._closed:
                self._ready.clear()
            return request

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until a request is pending, the channel is closed, or the
        timeout expires.

        Returns:
            False if the timeout expired
        """
        return self._ready.wait(timeout)

    def open(self) -> None:
        """Reopen a closed channel for a restarted receiver."""
        with self._lock:
            self._closed = False
            self._ready.clear()

    def close(self) -> None:
        """Close the channel and wake any waiter; later sends raise ChannelClosedError."""
        with self._lock:
            self._closed = True
            self._pending = None
            self._ready.set()

    @property
    def closed(self) -> bool:
        return self._closed


class _ListenerWorker:
    """Feeds job ids to one listener callback on its own daemon thread."""

    def __init__(self, listener: Callable[[str], None], maxsize: int):
        self.listener = listener
        self.queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name="SessionListener", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                job_id = self.queue.get(timeout=0.5)
            except queue.Empty:
                continue
            if self._stop_event.is_set():
                return
            try:
                self.listener(job_id)
            except Exception as e:
                logger.warning(f"Session listener failed: {e}")

    def stop(self) -> None:
        self._stop_event.set()


class SessionBroadcaster:
    """
    Fan-out of job id changes to subscribers.

    Delivery is fire-and-forget: a full subscriber queue drops the
    notification. Listener callbacks run on a thread per listener, so a
    slow or failing callback never blocks the publisher.
    """

    def __init__(self, default_maxsize: int = 64):
        self.default_maxsize = default_maxsize
        self._queues: List[queue.Queue] = []
        self._listeners: List[_ListenerWorker] = []
        self._lock = threading.Lock()

    def subscribe(self, maxsize: Optional[int] = None) -> queue.Queue:
        """
        Register a new subscriber queue.

        Args:
            maxsize: Queue capacity (defaults to default_maxsize)

        Returns:
            Queue that receives each new job id
        """
        q: queue.Queue = queue.Queue(maxsize=maxsize if maxsize is not None else self.default_maxsize)
        with self._lock:
            self._queues.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> bool:
        with self._lock:
            if q in self._queues:
                self._queues.remove(q)
                return True
            return False

    def add_listener(self, listener: Callable[[str], None]) -> None:
        """
        Register a callback for job id changes.

        The callback runs on a dedicated background thread and sees job ids
        in publication order. Changes beyond default_maxsize that it has not
        yet handled are dropped.
        """
        worker = _ListenerWorker(listener, self.default_maxsize)
        with self._lock:
            self._listeners.append(worker)

    def remove_listener(self, listener: Callable[[str], None]) -> bool:
        with self._lock:
            for worker in self._listeners:
                if worker.listener == listener:
                    self._listeners.remove(worker)
                    worker.stop()
                    return True
            return False

    def publish(self, job_id: str) -> int:
        """
        Deliver a job id to every subscriber without blocking.

        Args:
            job_id: The new job id

        Returns:
            Number of subscribers and listeners it was queued for
        """
        with self._lock:
            queues = list(self._queues)
            queues.extend(worker.queue for worker in self._listeners)

        delivered = 0
        for q in queues:
            try:
                q.put_nowait(job_id)
                delivered += 1
            except queue.Full:
                logger.debug(f"Subscriber queue full, dropping job id {job_id}")

        return delivered

    def __len__(self) -> int:
        with self._lock:
            return len(self._queues) + len(self._listeners)
