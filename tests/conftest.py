from __future__ import annotations

import json
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, List, Optional

import paho.mqtt.client as mqtt
import pytest
from paho.mqtt.packettypes import PacketTypes
from paho.mqtt.reasoncodes import ReasonCode


@dataclass
class PublishedMessage:
    topic: str
    payload: Any
    qos: int
    retain: bool

    def json(self) -> Any:
        return json.loads(self.payload)


class FakeMQTTClient:
    """Records what a paho client would have sent."""

    def __init__(self) -> None:
        self.published: List[PublishedMessage] = []
        self.subscriptions: List[str] = []
        self.will: Optional[PublishedMessage] = None
        self.credentials: Optional[tuple] = None
        self.tls = False
        self.endpoint: Optional[tuple] = None
        self.loop_running = False
        self.disconnected = False
        self.on_connect = None
        self.on_disconnect = None
        self.on_message = None

    def publish(self, topic: str, payload: Any = None, qos: int = 0, retain: bool = False):
        self.published.append(PublishedMessage(topic, payload, qos, retain))
        return SimpleNamespace(rc=mqtt.MQTT_ERR_SUCCESS)

    def subscribe(self, topic: str, qos: int = 0):
        self.subscriptions.append(topic)
        return (mqtt.MQTT_ERR_SUCCESS, 1)

    def will_set(self, topic: str, payload: Any = None, qos: int = 0, retain: bool = False) -> None:
        self.will = PublishedMessage(topic, payload, qos, retain)

    def username_pw_set(self, username: str, password: Optional[str] = None) -> None:
        self.credentials = (username, password)

    def tls_set(self) -> None:
        self.tls = True

    def reconnect_delay_set(self, min_delay: int = 1, max_delay: int = 120) -> None:
        pass

    def connect_async(self, host: str, port: int = 1883, keepalive: int = 60) -> None:
        self.endpoint = (host, port)

    def loop_start(self) -> None:
        self.loop_running = True

    def loop_stop(self) -> None:
        self.loop_running = False

    def disconnect(self) -> None:
        self.disconnected = True

    def topics(self, suffix: str = "") -> List[str]:
        return [message.topic for message in self.published if message.topic.endswith(suffix)]

    def simulate_connect(self, reason: str = "Success") -> None:
        self.on_connect(self, None, None, ReasonCode(PacketTypes.CONNACK, reason), None)

    def simulate_disconnect(self) -> None:
        self.on_disconnect(
            self, None, None, ReasonCode(PacketTypes.DISCONNECT, "Unspecified error"), None
        )

    def simulate_message(self, topic: str, payload: bytes) -> None:
        self.on_message(self, None, SimpleNamespace(topic=topic, payload=payload))


@pytest.fixture()
def mqtt_client() -> FakeMQTTClient:
    return FakeMQTTClient()
