from __future__ import annotations

import asyncio

import pytest

from pybattmon._mqtt import MqttBootstrap, PowerStateMqttRuntime, decode_power_state_payload
from pybattmon.config import MonitorConfig
from pybattmon.models.power_state import BatteryState, PowerStateEvent


def test_decode_power_state_payload() -> None:
    event = decode_power_state_payload(b'{"batteryState": "unplugged", "batteryLevel": 0.31}')

    assert event.battery_state == BatteryState.UNPLUGGED
    assert event.battery_level == pytest.approx(0.31)


@pytest.mark.parametrize("payload", [b"[1, 2]", b"charging", b""])
def test_decode_rejects_non_objects(payload: bytes) -> None:
    with pytest.raises(ValueError):
        decode_power_state_payload(payload)


@pytest.mark.asyncio
async def test_runtime_hops_events_onto_loop() -> None:
    events: list[PowerStateEvent] = []
    runtime = PowerStateMqttRuntime(loop=asyncio.get_running_loop(), on_event=events.append)

    runtime.handle_payload("battmon/power_state", b'{"batteryState": "charging"}')
    runtime.handle_payload("battmon/power_state", b"not json")
    assert events == []

    await asyncio.sleep(0)
    assert [event.battery_state for event in events] == [BatteryState.CHARGING]
    assert not runtime.is_running


def test_bootstrap_from_config() -> None:
    config = MonitorConfig(mqtt_host="broker.local", mqtt_port=8883, mqtt_topic="home/phone/power")

    bootstrap = MqttBootstrap.from_config(config, client_id="test-client")

    assert bootstrap.broker_host == "broker.local"
    assert bootstrap.broker_port == 8883
    assert bootstrap.topic == "home/phone/power"
    assert bootstrap.client_id == "test-client"
    assert not bootstrap.use_tls
