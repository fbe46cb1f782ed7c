"""
Слой взаимодействия с Kafka.

Содержит обёртку над KafkaProducer, не знает ничего про WMI/ОС.
"""

import json
import logging
from typing import Any, Dict, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from kafka_layer.config import KafkaConfig
from domain.models import MachineInformation


class KafkaClient:
    """Клиент Kafka для однократной отправки снимка инвентаризации."""

    def __init__(self, config: Optional[KafkaConfig] = None):
        self.logger = logging.getLogger(__name__)
        self.kafka_config = config or KafkaConfig()
        self.producer: Optional[KafkaProducer] = None

    def _create_producer(self):
        cfg = self.kafka_config.get_producer_config()
        self.producer = KafkaProducer(
            **cfg,
            value_serializer=lambda v: json.dumps(v, ensure_ascii=False).encode("utf-8"),
            acks="all",
            request_timeout_ms=30000,
        )
        self.logger.info("Kafka Producer создан")

    def send_snapshot(self, info: MachineInformation):
        """Отправить снимок в Kafka, ключ сообщения - имя хоста."""
        if not self.producer:
            self._create_producer()

        try:
            data: Dict[str, Any] = info.to_dict()
            future = self.producer.send(
                self.kafka_config.topic,
                value=data,
                key=info.hostname.encode("utf-8"),
            )
            meta = future.get(timeout=int(self.kafka_config.send_timeout))
            self.logger.info(
                f"Снимок отправлен: host={info.hostname}, "
                f"Topic={meta.topic}, Partition={meta.partition}, Offset={meta.offset}"
            )
        except KafkaError as e:
            self.logger.error(f"Ошибка отправки в Kafka: {e}")
            raise

    def close(self):
        if self.producer:
            self.producer.close()
            self.producer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
