"""
Tests for the event listener, the event stream and the session keepalive.
"""

import threading
import time
import unittest
from unittest.mock import MagicMock, patch

from livebox_client import Client, Request
from livebox_client.api.response import Event, EventItem, EventObject, EventsResponse
from livebox_client.errors import ApiError, TransportError
from livebox_client.events import EventStream

ADDRESS = "http://192.168.1.1"


def _event(handler, reason="changed"):
    return Event(handler, EventObject(reason, {}))


class ScriptedPolls:
    """
    Replacement for Client.request.  Event polls are answered from *script*
    in order; once it is exhausted polls block until *release* is set.
    Keepalive calls (plain Requests) succeed.
    """

    def __init__(self, script, release=None):
        self.script = list(script)
        self.release = release or threading.Event()
        self.channel_ids = []
        self.keepalive_calls = 0

    def __call__(self, req, content_type=None, decoder=None):
        if isinstance(req, Request):
            self.keepalive_calls += 1
            return {"status": True}

        self.channel_ids.append(req["channelid"])
        if not self.script:
            self.release.wait()
            time.sleep(0.01)
            return EventsResponse(req["channelid"], [])
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


def _client():
    return Client(ADDRESS, "admin", "secret", http=MagicMock(), keepalive_interval=60)


class TestEventListener(unittest.TestCase):
    def test_event_sequencing(self):
        e1, e2 = _event("Devices.Device.A"), _event("Devices.Device.B")
        transport_error = TransportError("connection reset")
        polls = ScriptedPolls([
            ApiError(1, "Function execution failed", ""),
            EventsResponse(5, [e1]),
            transport_error,
            EventsResponse(5, [e2]),
        ])
        client = _client()

        with patch.object(client, "request", side_effect=polls):
            stream = client.events(["Devices.Device"], retry_interval=0.01)
            items = [next(stream) for _ in range(3)]
            stream.close()
            polls.release.set()
            self.assertTrue(stream.wait_closed(5))

        self.assertIs(items[0].event, e1)
        self.assertIsNone(items[1].event)
        self.assertIs(items[1].error, transport_error)
        self.assertIs(items[2].event, e2)
        # stale channel: 0 then 0 again, error resets the channel to 0
        self.assertEqual(polls.channel_ids[:4], [0, 0, 5, 0])
        self.assertTrue(all(c == 5 for c in polls.channel_ids[4:]))

    def test_stale_channel_is_invisible(self):
        e1 = _event("Devices.Device.A")
        polls = ScriptedPolls([
            ApiError(196618, "Object not found", "channel does not exist"),
            ApiError(1, "Function execution failed", ""),
            EventsResponse(3, [e1]),
        ])
        client = _client()

        with patch.object(client, "request", side_effect=polls):
            stream = client.events(["Devices.Device"], retry_interval=0.01)
            first = next(stream)
            stream.close()
            polls.release.set()
            stream.wait_closed(5)

        self.assertIs(first.event, e1)
        self.assertEqual(polls.channel_ids[:3], [0, 0, 0])

    def test_events_are_delivered_in_order(self):
        events = [_event(f"Devices.Device.{i}") for i in range(5)]
        polls = ScriptedPolls([EventsResponse(8, events[:3]), EventsResponse(8, events[3:])])
        client = _client()

        with patch.object(client, "request", side_effect=polls):
            stream = client.events(["Devices.Device"])
            received = [next(stream).event for _ in range(5)]
            stream.close()
            polls.release.set()
            stream.wait_closed(5)

        self.assertEqual(received, events)

    def test_iteration_ends_after_close(self):
        polls = ScriptedPolls([])
        client = _client()

        with patch.object(client, "request", side_effect=polls):
            stream = client.events(["Devices.Device"])
            stream.close()
            polls.release.set()
            self.assertEqual(list(stream), [])
        self.assertTrue(stream.closed)

    def test_poll_sends_watched_names(self):
        client = _client()
        seen = []
        release = threading.Event()

        def fake(req, content_type=None, decoder=None):
            if not isinstance(req, Request):
                seen.append((req, content_type))
                release.wait()
            return EventsResponse(1, [])

        with patch.object(client, "request", side_effect=fake):
            stream = client.events(["Devices.Device", "NMC"])
            while not seen:
                time.sleep(0.01)
            stream.close()
            release.set()
            stream.wait_closed(5)

        req, content_type = seen[0]
        self.assertEqual(req, {"channelid": 0, "events": ["Devices.Device", "NMC"]})
        self.assertEqual(content_type, "application/x-sah-event-4-call+json")


    def test_close_stops_endless_resubscribing(self):
        client = _client()
        polls = []

        def always_stale(req, content_type=None, decoder=None):
            if isinstance(req, Request):
                return {}
            polls.append(req["channelid"])
            time.sleep(0.001)
            raise ApiError(1, "Function execution failed", "")

        with patch.object(client, "request", side_effect=always_stale):
            stream = client.events(["Devices.Device"])
            deadline = time.monotonic() + 5
            while len(polls) < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
            self.assertGreaterEqual(len(polls), 3)

            stream.close()
            self.assertTrue(stream.wait_closed(5))

        self.assertEqual(list(stream), [])
        self.assertEqual(client.keepalive.count, 0)
        self.assertFalse(client.keepalive.active)


class TestEventStream(unittest.TestCase):
    def test_emit_refused_after_cancel(self):
        cancel = threading.Event()
        stream = EventStream(cancel, maxsize=1)
        self.assertTrue(stream.emit(EventItem(event=_event("a"))))
        cancel.set()
        self.assertFalse(stream.emit(EventItem(event=_event("b"))))

    def test_emit_gives_up_on_full_queue_when_cancelled(self):
        cancel = threading.Event()
        stream = EventStream(cancel, maxsize=1)
        stream.emit(EventItem(event=_event("a")))
        threading.Timer(0.05, cancel.set).start()
        self.assertFalse(stream.emit(EventItem(event=_event("b"))))

    def test_buffered_items_survive_finish(self):
        stream = EventStream(threading.Event(), maxsize=4)
        stream.emit(EventItem(event=_event("a")))
        stream.finish()
        self.assertEqual([i.event.handler for i in stream], ["a"])


class TestKeepAlive(unittest.TestCase):
    def test_reference_counting(self):
        client = _client()
        polls = ScriptedPolls([])
        keepalive = client.keepalive

        with patch.object(client, "request", side_effect=polls):
            keepalive.acquire()
            thread = keepalive._thread
            keepalive.acquire()
            keepalive.acquire()
            keepalive.release()
            keepalive.release()

            self.assertEqual(keepalive.count, 1)
            self.assertTrue(keepalive.active)
            self.assertIs(keepalive._thread, thread)

            keepalive.release()

        self.assertEqual(keepalive.count, 0)
        self.assertFalse(keepalive.active)
        self.assertFalse(thread.is_alive())
        self.assertGreaterEqual(polls.keepalive_calls, 1)

    def test_listeners_share_one_keepalive(self):
        client = _client()
        polls = ScriptedPolls([])

        with patch.object(client, "request", side_effect=polls):
            streams = [client.events(["Devices.Device"]) for _ in range(3)]
            thread = client.keepalive._thread

            for stream in streams[:2]:
                stream.close()
            polls.release.set()
            for stream in streams[:2]:
                self.assertTrue(stream.wait_closed(5))

            self.assertEqual(client.keepalive.count, 1)
            self.assertTrue(client.keepalive.active)

            streams[2].close()
            self.assertTrue(streams[2].wait_closed(5))

        self.assertEqual(client.keepalive.count, 0)
        self.assertFalse(client.keepalive.active)
        self.assertFalse(thread.is_alive())

    def test_keepalive_errors_are_only_logged(self):
        client = _client()
        calls = []

        def failing(req, content_type=None, decoder=None):
            calls.append(req)
            raise TransportError("router unreachable")

        with patch.object(client, "request", side_effect=failing):
            with self.assertLogs("livebox-client", level="DEBUG") as logs:
                client.keepalive.acquire()
                while not calls:
                    time.sleep(0.01)
                client.keepalive.release()

        self.assertFalse(client.keepalive.active)
        self.assertTrue(any("keepalive" in line for line in logs.output))

    def test_keepalive_survives_unexpected_errors(self):
        client = _client()
        client.keepalive.interval = 0.05
        calls = []

        def broken(req, content_type=None, decoder=None):
            calls.append(req)
            raise ValueError("invalid literal for int() with base 10: 'oops'")

        with patch.object(client, "request", side_effect=broken):
            client.keepalive.acquire()
            deadline = time.monotonic() + 5
            while len(calls) < 2 and time.monotonic() < deadline:
                time.sleep(0.01)
            self.assertGreaterEqual(len(calls), 2)
            self.assertTrue(client.keepalive.active)
            client.keepalive.release()

        self.assertFalse(client.keepalive.active)

    def test_keepalive_call(self):
        client = _client()
        calls = []

        def record(req, content_type=None, decoder=None):
            calls.append(req)
            return {}

        with patch.object(client, "request", side_effect=record):
            client.keepalive.acquire()
            while not calls:
                time.sleep(0.01)
            client.keepalive.release()

        self.assertEqual(calls[0], Request("IoTService", "getStatus"))

    def test_release_without_acquire(self):
        with self.assertRaises(RuntimeError):
            _client().keepalive.release()


if __name__ == "__main__":
    unittest.main()
