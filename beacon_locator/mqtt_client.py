# mqtt_client.py
import json
import logging
import threading

import paho.mqtt.client as mqtt

from .errors import ReportTransportFailure

logger = logging.getLogger(__name__)


class MqttPositionSink:
    """Публикует позицию в MQTT топик тем же JSON, что уходит по HTTP."""

    def __init__(self, broker, port=1883, topic="locator/position", client_id="beacon-locator"):
        self.broker = broker
        self.port = port
        self.topic = topic
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        self._connected = False
        self._lock = threading.Lock()

    def connect(self):
        logger.info(f"Connecting to MQTT broker {self.broker}:{self.port}...")
        try:
            self.client.connect(self.broker, self.port, 60)
        except OSError as e:
            raise ReportTransportFailure(f"Could not connect to MQTT broker: {e}") from e
        self.client.loop_start()
        self._connected = True

    def push(self, x, y):
        # push вызывается из потоков пула, подключаемся один раз
        with self._lock:
            if not self._connected:
                self.connect()
        info = self.client.publish(self.topic, json.dumps({'x': x, 'y': y}))
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise ReportTransportFailure(
                f"Failed to publish position: {mqtt.error_string(info.rc)}", status_code=info.rc
            )
        logger.info(f"Published ({x:.2f}, {y:.2f}) to '{self.topic}'")

    def close(self):
        if self._connected:
            self.client.loop_stop()
            self.client.disconnect()
            self._connected = False

    def __repr__(self):
        return f"MqttPositionSink({self.broker!r}, {self.port}, {self.topic!r})"
