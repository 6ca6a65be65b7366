"""Power-state events over MQTT.

paho runs its network loop on its own thread. Messages are decoded there
and each parsed :class:`PowerStateEvent` is handed to the asyncio loop with
``call_soon_threadsafe``; nothing else crosses the thread boundary.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from pybattmon.config import MonitorConfig
from pybattmon.models.power_state import PowerStateEvent

EventSink = Callable[[PowerStateEvent], None]


@dataclass(frozen=True)
class MqttBootstrap:
    """Where to subscribe for power-state payloads."""

    broker_host: str
    broker_port: int
    topic: str
    client_id: str
    username: str | None = None
    password: str | None = None
    use_tls: bool = False

    @classmethod
    def from_config(cls, config: MonitorConfig, *, client_id: str = "pybattmon") -> MqttBootstrap:
        return cls(
            broker_host=config.mqtt_host,
            broker_port=config.mqtt_port,
            topic=config.mqtt_topic,
            client_id=client_id,
        )


def decode_power_state_payload(payload: bytes) -> PowerStateEvent:
    """Parse a JSON power-state payload.

    Raises ``ValueError`` for non-JSON or non-object payloads and
    ``pydantic.ValidationError`` for objects that do not validate.
    """
    document = json.loads(payload.decode("utf-8", errors="replace").strip())
    if not isinstance(document, dict):
        raise ValueError(f"expected a JSON object, got {type(document).__name__}")
    return PowerStateEvent.model_validate(document)


class PowerStateMqttRuntime:
    """Subscribe to one topic and forward decoded events to *on_event* on *loop*."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_event: EventSink,
        keepalive: int = 60,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._sink = on_event
        self._keepalive = keepalive
        self._log = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._bootstrap: MqttBootstrap | None = None

    @property
    def is_running(self) -> bool:
        return self._client is not None

    def handle_payload(self, topic: str, payload: bytes) -> None:
        """Decode one message and schedule delivery. Bad payloads are dropped."""
        try:
            event = decode_power_state_payload(payload)
        except (ValueError, ValidationError):
            self._log.debug("Dropping unparsable power-state payload on %s", topic, exc_info=True)
            return
        self._log.debug("Power-state %s on %s", event.battery_state.value, topic)
        self._loop.call_soon_threadsafe(self._sink, event)

    # paho callbacks, run on the network thread

    def _on_connect(self, client: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _props: Any) -> None:
        if reason_code.is_failure:
            self._log.warning("MQTT broker refused connection: %s", reason_code)
            return
        bootstrap = self._bootstrap
        if bootstrap is not None:
            client.subscribe(bootstrap.topic, qos=1)
            self._log.debug("Subscribed to %s", bootstrap.topic)

    def _on_message(self, _client: mqtt.Client, _userdata: Any, message: mqtt.MQTTMessage) -> None:
        self.handle_payload(message.topic, message.payload)

    def _on_disconnect(self, _client: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _props: Any) -> None:
        if self._client is not None:
            self._log.debug("MQTT connection lost (%s); paho will reconnect", reason_code)

    def _build_client(self, bootstrap: MqttBootstrap) -> mqtt.Client:
        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=bootstrap.client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._log)
        if bootstrap.username:
            client.username_pw_set(bootstrap.username, bootstrap.password)
        if bootstrap.use_tls:
            client.tls_set()
        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.on_disconnect = self._on_disconnect
        return client

    def start(self, bootstrap: MqttBootstrap) -> None:
        """Connect (blocking) and start paho's network thread."""
        self.stop()
        self._log.debug(
            "Connecting to %s:%s for topic %s",
            bootstrap.broker_host,
            bootstrap.broker_port,
            bootstrap.topic,
        )
        self._bootstrap = bootstrap
        client = self._build_client(bootstrap)
        client.connect(bootstrap.broker_host, bootstrap.broker_port, keepalive=self._keepalive)
        client.loop_start()
        self._client = client

    def stop(self) -> None:
        client, self._client = self._client, None
        self._bootstrap = None
        if client is None:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
            self._log.debug("MQTT network thread stopped")
