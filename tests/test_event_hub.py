"""Tests for the per-topic publish/subscribe hub."""
import asyncio

from sensorhub.core.event_hub import EventHub, reading_topic
from sensorhub.core.models.sensor_enum import SensorKind


class TestEventHub:

    def test_reading_topic(self) -> None:
        assert reading_topic(SensorKind.LIGHT) == "sensor.light"

    def test_handlers_called_in_registration_order(self) -> None:
        hub = EventHub()
        calls = []
        hub.subscribe("sensor.light", lambda topic, msg: calls.append(("first", msg)))
        hub.subscribe("sensor.light", lambda topic, msg: calls.append(("second", msg)))

        hub.send_all_on_topic("sensor.light", 1)
        assert calls == [("first", 1), ("second", 1)]

    def test_topics_are_isolated(self) -> None:
        hub = EventHub()
        calls = []
        hub.subscribe("sensor.light", lambda topic, msg: calls.append(topic))

        hub.send_all_on_topic("sensor.battery", 1)
        assert calls == []

    def test_no_replay_for_late_subscribers(self) -> None:
        hub = EventHub()
        hub.send_all_on_topic("sensor.light", "early")

        calls = []
        hub.subscribe("sensor.light", lambda topic, msg: calls.append(msg))
        hub.send_all_on_topic("sensor.light", "late")
        assert calls == ["late"]

    def test_duplicate_subscription_ignored(self) -> None:
        hub = EventHub()
        calls = []

        def handler(topic, msg):
            calls.append(msg)

        hub.subscribe("t", handler)
        hub.subscribe("t", handler)
        hub.send_all_on_topic("t", 1)
        assert calls == [1]

    def test_unsubscribe(self) -> None:
        hub = EventHub()
        calls = []

        def handler(topic, msg):
            calls.append(msg)

        hub.subscribe("t", handler)
        hub.unsubscribe("t", handler)
        hub.unsubscribe("t", handler)
        hub.send_all_on_topic("t", 1)
        assert calls == []

    def test_unsubscribe_all(self) -> None:
        hub = EventHub()
        calls = []
        hub.subscribe("sensor.light", lambda topic, msg: calls.append(topic))
        hub.subscribe("sensor.battery", lambda topic, msg: calls.append(topic))

        hub.unsubscribe_all()
        hub.send_all_on_topic("sensor.light", 1)
        hub.send_all_on_topic("sensor.battery", 1)
        assert calls == []

    def test_failing_handler_does_not_stop_delivery(self) -> None:
        hub = EventHub()
        calls = []

        def broken(topic, msg):
            raise RuntimeError("boom")

        hub.subscribe("t", broken)
        hub.subscribe("t", lambda topic, msg: calls.append(msg))
        hub.send_all_on_topic("t", "ok")
        assert calls == ["ok"]

    def test_handler_may_unsubscribe_during_dispatch(self) -> None:
        hub = EventHub()
        calls = []

        def once(topic, msg):
            calls.append(msg)
            hub.unsubscribe(topic, once)

        hub.subscribe("t", once)
        hub.send_all_on_topic("t", 1)
        hub.send_all_on_topic("t", 2)
        assert calls == [1]

    def test_async_handler_runs_on_loop(self) -> None:
        received = []

        async def handler(topic, msg):
            received.append(msg)

        async def scenario():
            hub = EventHub()
            hub.init(asyncio.get_running_loop())
            hub.subscribe("t", handler)
            hub.send_all_on_topic("t", "async")
            await asyncio.sleep(0)

        asyncio.run(scenario())
        assert received == ["async"]
