"""
livebox_client.events
=====================
Event subscriptions on top of :meth:`Client.request`.

An :class:`EventListener` thread long-polls the router with the event
content type.  The router hands out a channel id with the first answer; the
listener sends it back with every following poll.  When the router forgets
the channel ("channel does not exist" / "Function execution failed") the
listener silently asks for a new one.  Any other failure is passed to the
consumer as an :class:`EventItem` with ``error`` set, then the listener
waits a second and subscribes again.

While at least one listener runs, a shared :class:`KeepAlive` thread sends a
harmless call every 30 seconds so the session is renewed before the event
polls start failing.
"""

from __future__ import annotations

import queue
import threading
from typing import TYPE_CHECKING

from .api.request import Request
from .api.response import EventItem, EventsResponse
from .config import (
    CONTENT_TYPE_EVENT,
    EVENT_QUEUE_SIZE,
    EVENT_RETRY_INTERVAL,
    KEEPALIVE_INTERVAL,
    KEEPALIVE_METHOD,
    KEEPALIVE_SERVICE,
)
from .errors import ApiError, is_channel_stale
from .logging_setup import log

if TYPE_CHECKING:
    from .client import Client

# How often blocked queue operations look at the cancel token
_POLL_INTERVAL = 0.1

_CLOSED = object()


class EventStream:
    """
    Iterator over the items produced by one listener.

    Items are buffered in a bounded queue.  Iteration ends once the listener
    has stopped and every buffered item was consumed.  ``close()`` (or
    setting the ``cancel`` event) stops the listener.
    """

    def __init__(self, cancel: threading.Event, maxsize: int = EVENT_QUEUE_SIZE) -> None:
        self.cancel = cancel
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    def __iter__(self) -> "EventStream":
        return self

    def __next__(self) -> EventItem:
        while True:
            try:
                item = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                if self._closed.is_set() and self._queue.empty():
                    raise StopIteration
                continue
            if item is _CLOSED:
                raise StopIteration
            return item

    def __enter__(self) -> "EventStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        """True once the listener has finished its teardown."""
        return self._closed.is_set()

    def close(self) -> None:
        self.cancel.set()

    def wait_closed(self, timeout: float | None = None) -> bool:
        return self._closed.wait(timeout)

    def emit(self, item: EventItem) -> bool:
        """
        Queue *item* for the consumer.  Returns False, without queueing,
        as soon as cancellation is observed.
        """
        while not self.cancel.is_set():
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def finish(self) -> None:
        self._closed.set()
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass


class EventListener(threading.Thread):
    """Polls the router for *names* and feeds the results into *stream*."""

    def __init__(
        self,
        client: "Client",
        names: list[str],
        stream: EventStream,
        retry_interval: float = EVENT_RETRY_INTERVAL,
    ) -> None:
        super().__init__(name="livebox-events", daemon=True)
        self.client = client
        self.names = names
        self.stream = stream
        self.retry_interval = retry_interval
        self.channel_id = 0

    def run(self) -> None:
        log.debug("Listening for events %s", self.names)
        try:
            self._listen()
        finally:
            self.client.keepalive.release()
            self.stream.finish()
            log.debug("Stopped listening for events %s", self.names)

    def _listen(self) -> None:
        cancel = self.stream.cancel
        while not cancel.is_set():
            try:
                resp = self._poll()
            except Exception as exc:
                if cancel.is_set():
                    return
                log.warning("Event poll failed: %s", exc)
                if not self.stream.emit(EventItem(error=exc)):
                    return
                self.channel_id = 0
                if cancel.wait(self.retry_interval):
                    return
                continue

            if resp is None:
                return
            self.channel_id = resp.channel_id
            for event in resp.events:
                if not self.stream.emit(EventItem(event=event)):
                    return

    def _poll(self) -> EventsResponse | None:
        """
        Poll once, resubscribing while the router reports a stale channel.
        Returns None when cancelled in between.
        """
        while not self.stream.cancel.is_set():
            try:
                return self.client.request(
                    {"channelid": self.channel_id, "events": self.names},
                    content_type=CONTENT_TYPE_EVENT,
                    decoder=EventsResponse.from_dict,
                )
            except ApiError as exc:
                if not is_channel_stale(exc):
                    raise
                log.debug("Event channel %d is gone, resubscribing", self.channel_id)
                self.channel_id = 0
        return None


class KeepAlive:
    """
    Reference-counted background task that keeps the session alive while
    event listeners run.  The first ``acquire()`` starts the thread, the
    last ``release()`` stops it and waits for it to exit.
    """

    def __init__(self, client: "Client", interval: float = KEEPALIVE_INTERVAL) -> None:
        self.client = client
        self.interval = interval
        self._lock = threading.Lock()
        self._count = 0
        self._thread: threading.Thread | None = None
        self._stop: queue.Queue | None = None

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def active(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def acquire(self) -> None:
        with self._lock:
            self._count += 1
            if self._count == 1:
                log.debug("Starting event session keepalive thread")
                self._stop = queue.Queue(maxsize=1)
                self._thread = threading.Thread(
                    target=self._run,
                    args=(self._stop,),
                    name="livebox-keepalive",
                    daemon=True,
                )
                self._thread.start()

    def release(self) -> None:
        with self._lock:
            if self._count == 0:
                raise RuntimeError("keepalive released more often than acquired")
            self._count -= 1
            if self._count == 0:
                self._stop.put(None)
                self._thread.join()
                self._thread = None
                self._stop = None

    def _run(self, stop: queue.Queue) -> None:
        while True:
            try:
                self.client.request(Request(KEEPALIVE_SERVICE, KEEPALIVE_METHOD))
            except Exception as exc:
                log.debug("Failed to send session keepalive request: %s", exc)

            try:
                stop.get(timeout=self.interval)
            except queue.Empty:
                continue
            log.debug("Stopped event session keepalive thread")
            return
