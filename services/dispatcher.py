"""Fans normalized readings out to the configured sinks."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from threading import Condition
from typing import Any, Callable, Mapping, Optional, Set

from datastore.device_cache import DeviceStateCache
from models.records import NormalizedReading
from services.decoder import decode
from services.normalizer import normalize
from settings import get_settings
from sinks.influxdb import InfluxDBSink
from sinks.mqtt import MQTTDiscoverySink, build_mqtt_sink
from sinks.vendor_relay import VendorRelay

logger = logging.getLogger(__name__)


class Dispatcher:
    """Decodes uploads, records device state, and hands readings to each sink.

    Sink calls run as detached tasks on a thread pool; the request path never
    waits for them and a failing sink never blocks another.
    """

    def __init__(
        self,
        cache: DeviceStateCache,
        influxdb: InfluxDBSink,
        mqtt: MQTTDiscoverySink,
        relay: Optional[VendorRelay] = None,
        metric: bool = True,
        workers: int = 4,
    ) -> None:
        self.cache = cache
        self.influxdb = influxdb
        self.mqtt = mqtt
        self.relay = relay
        self.metric = metric
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sink")
        self._pending: Set[Future[None]] = set()
        self._idle = Condition()

    def start(self) -> None:
        """Prepare the database and open the broker session."""
        self.influxdb.ensure_database()
        self.mqtt.start()

    def handle_upload(
        self,
        path: str,
        params: Mapping[str, str],
        headers: Optional[Mapping[str, str]] = None,
    ) -> Optional[NormalizedReading]:
        """Entry point for one inbound hub request."""
        self.cache.track_request(path)
        if self.relay is not None and self.relay.enabled:
            self._submit("relay", self.relay.forward, path, dict(headers or {}))
        return self.dispatch(params)

    def dispatch(self, params: Mapping[str, str]) -> Optional[NormalizedReading]:
        reading = normalize(decode(params), self.metric)
        if reading is None:
            return None

        logger.info(
            "New reading at %d",
            reading.timestamp,
            extra={"sensor_id": reading.sensor_id, "model_type": reading.model_type},
        )
        self.cache.record(reading.sensor_id, reading.model_type, reading.timestamp)

        fields = dict(reading.attributes)
        if self.influxdb.enabled:
            self._submit("influxdb", self.influxdb.write, reading.timestamp, reading.tags, fields)
        if self.mqtt.enabled:
            self._submit("mqtt", self.mqtt.publish, reading.sensor_id, reading.model_type, fields)
        return reading

    def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight sink tasks. Used on shutdown and in tests."""
        with self._idle:
            self._idle.wait_for(lambda: not self._pending, timeout=timeout)

    def shutdown(self) -> None:
        """Close the broker session and release executor resources."""
        self.mqtt.stop()
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.influxdb.close()
        if self.relay is not None:
            self.relay.close()

    def _submit(self, sink: str, func: Callable[..., None], *args: Any) -> None:
        try:
            future = self.executor.submit(func, *args)
        except RuntimeError:
            logger.warning("Dropping %s call after shutdown", sink)
            return
        with self._idle:
            self._pending.add(future)
        future.add_done_callback(lambda f, name=sink: self._complete(name, f))

    def _complete(self, sink: str, future: Future[None]) -> None:
        exc = None if future.cancelled() else future.exception()
        if exc is not None:
            logger.error(
                "Sink %s failed",
                sink,
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"reason": str(exc) or type(exc).__name__},
            )
        # Drop the future only after logging so drain() covers the callback.
        with self._idle:
            self._pending.discard(future)
            self._idle.notify_all()


@lru_cache
def build_default_dispatcher(
    workers: Optional[int] = None,
) -> Dispatcher:
    """Factory that wires the dispatcher from environment settings."""
    settings = get_settings()
    cache = DeviceStateCache()
    influxdb = InfluxDBSink(settings.influxdb_host, settings.influxdb_database)
    mqtt = build_mqtt_sink(
        settings.mqtt_url,
        base_topic=settings.mqtt_topic,
        discovery_prefix=settings.mqtt_discovery_prefix,
        hub_status_topic=settings.mqtt_hub_status_topic,
        metric=settings.metric,
    )
    relay = VendorRelay(settings.acurite_host, enabled=settings.forward_to_acurite)
    return Dispatcher(
        cache=cache,
        influxdb=influxdb,
        mqtt=mqtt,
        relay=relay,
        metric=settings.metric,
        workers=workers or settings.sink_workers,
    )
