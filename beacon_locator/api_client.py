# api_client.py
import json
import logging

import requests

from .errors import ReportTransportFailure

logger = logging.getLogger(__name__)


class HttpPositionSink:
    """Отправляет позицию на сервер POST-запросом с JSON телом {"x", "y"}."""

    def __init__(self, url, timeout=5.0):
        self.url = url
        self.timeout = timeout
        self.headers = {'Content-Type': 'application/json'}

    def push(self, x, y):
        try:
            response = requests.post(
                self.url, data=json.dumps({'x': x, 'y': y}), headers=self.headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ReportTransportFailure(f"Error sending position: {e}") from e

        # Успехом считается только 200
        if response.status_code != 200:
            raise ReportTransportFailure(
                f"Failed to send position. Status code: {response.status_code}",
                status_code=response.status_code,
            )
        logger.info(f"Position ({x:.2f}, {y:.2f}) sent successfully!")

    def __repr__(self):
        return f"HttpPositionSink({self.url!r})"
