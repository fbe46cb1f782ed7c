"""
Конфигурация Kafka для публикации снимков инвентаризации.
"""

import json
import os
from typing import Optional


class KafkaConfig:
    """Класс для работы с конфигурацией Kafka"""

    def __init__(self, config_file: Optional[str] = None):
        """
        Инициализация конфигурации Kafka.

        Args:
            config_file: Путь к файлу конфигурации (опционально)
        """

        self.bootstrap_servers = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
        self.topic = os.getenv("KAFKA_TOPIC", "hw-inventory-snapshots")
        self.security_protocol = os.getenv(
            "KAFKA_SECURITY_PROTOCOL", "PLAINTEXT"
        )  # PLAINTEXT, SSL, SASL_PLAINTEXT, SASL_SSL
        self.ssl_cafile = os.getenv("KAFKA_SSL_CAFILE", None)
        self.ssl_certfile = os.getenv("KAFKA_SSL_CERTFILE", None)
        self.ssl_keyfile = os.getenv("KAFKA_SSL_KEYFILE", None)
        self.sasl_mechanism = os.getenv(
            "KAFKA_SASL_MECHANISM", None
        )  # PLAIN, SCRAM-SHA-256, SCRAM-SHA-512
        self.sasl_username = os.getenv("KAFKA_SASL_USERNAME", None)
        self.sasl_password = os.getenv("KAFKA_SASL_PASSWORD", None)
        self.send_timeout = int(os.getenv("KAFKA_SEND_TIMEOUT", "10"))

        if config_file and os.path.exists(config_file):
            self._load_from_file(config_file)

        self._validate()

    def _load_from_file(self, config_file: str):
        """Загрузка секции "kafka" из общего файла конфигурации"""
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Ошибка загрузки конфигурации Kafka: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("kafka", {}), dict):
            raise ValueError("Секция kafka и файл конфигурации должны быть JSON-объектами")
        config = data.get("kafka", {})

        for name in (
            "bootstrap_servers", "topic", "security_protocol",
            "ssl_cafile", "ssl_certfile", "ssl_keyfile",
            "sasl_mechanism", "sasl_username", "sasl_password",
            "send_timeout",
        ):
            setattr(self, name, config.get(name, getattr(self, name)))

    def _validate(self):
        """Базовая валидация конфигурации."""
        errors = []

        if not self.bootstrap_servers:
            errors.append("bootstrap_servers не задан")

        if not self.topic:
            errors.append("topic не задан")

        if not self.send_timeout or int(self.send_timeout) <= 0:
            errors.append("send_timeout должен быть > 0")

        if errors:
            raise ValueError(f"Некорректная конфигурация Kafka: {', '.join(errors)}")

    def get_producer_config(self) -> dict:
        """Получить конфигурацию для Kafka Producer"""
        config = {
            "bootstrap_servers": self.bootstrap_servers,
            "security_protocol": self.security_protocol,
        }

        if self.security_protocol in ["SSL", "SASL_SSL"]:
            if self.ssl_cafile:
                config["ssl_cafile"] = self.ssl_cafile
            if self.ssl_certfile:
                config["ssl_certfile"] = self.ssl_certfile
            if self.ssl_keyfile:
                config["ssl_keyfile"] = self.ssl_keyfile

        if self.security_protocol in ["SASL_PLAINTEXT", "SASL_SSL"]:
            if self.sasl_mechanism:
                config["sasl_mechanism"] = self.sasl_mechanism
            if self.sasl_username:
                config["sasl_plain_username"] = self.sasl_username
            if self.sasl_password:
                config["sasl_plain_password"] = self.sasl_password

        return config
