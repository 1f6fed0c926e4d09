"""JSON-lines record sink."""

import json
import logging
from typing import TextIO

from src.ports.records import OutputRecord, RecordSinkPort

__all__ = ["JsonLinesSink"]

logger = logging.getLogger(__name__)


class JsonLinesSink(RecordSinkPort):
    """Write each record as one JSON object per line and flush."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.sent = 0

    def send(self, record: OutputRecord) -> None:
        self.stream.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
        self.stream.flush()
        self.sent += 1
        logger.debug(f"Delivered record #{self.sent} to topic={record.topic}")
