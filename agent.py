"""
Инвентаризация оборудования Windows - один проход сбора данных.

Слоистая архитектура:
- system: взаимодействие с ОС/WMI
- domain: модели снимка
- kafka_layer: опциональная отправка снимка
- этот модуль: точка входа, которая оркестрирует сбор и вывод
"""

import argparse
import logging
import sys
from typing import Optional

import requests

from agent_core.config import InventoryConfig
from agent_core.logging_config import setup_logging
from domain.models import MachineInformation
from kafka_layer import KafkaClient, KafkaConfig
from system import WindowsHardwareCollector
from system.usb_ids import UsbIdDatabase, download_usb_ids


class InventoryAgent:
    """Один проход инвентаризации: сбор, вывод и (опционально) отправка"""

    def __init__(self, config: InventoryConfig, collector: Optional[WindowsHardwareCollector] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.collector = collector or WindowsHardwareCollector(
            usb_ids=UsbIdDatabase.load(config.usb_ids_path),
            device_prefix=config.device_prefix,
        )

    def collect(self) -> MachineInformation:
        self.logger.info("Начало сбора информации об оборудовании...")
        info = self.collector.collect_machine_information()
        self.logger.info(
            f"Собрано: RAM {len(info.ram_sticks)}, дисков {len(info.disks)}, "
            f"GPU {len(info.gpus)}, мониторов {len(info.displays)}, USB {len(info.usb_devices)}"
        )
        return info

    def write(self, info: MachineInformation, output: Optional[str] = None):
        payload = info.to_json()
        if output:
            with open(output, "w", encoding="utf-8") as f:
                f.write(payload)
            self.logger.info(f"Снимок записан в {output}")
        else:
            sys.stdout.write(payload + "\n")

    def publish(self, info: MachineInformation, config_file: Optional[str] = None):
        with KafkaClient(KafkaConfig(config_file)) as client:
            client.send_snapshot(info)


def main(argv=None):
    """Точка входа для запуска инвентаризации"""
    parser = argparse.ArgumentParser(description='Инвентаризация оборудования Windows (один проход)')
    parser.add_argument('--config', type=str, help='Путь к JSON-файлу конфигурации')
    parser.add_argument('--output', type=str, help='Файл для записи снимка (по умолчанию stdout)')
    parser.add_argument('--publish', action='store_true', help='Отправить снимок в Kafka')
    parser.add_argument('--log-level', type=str, help='Уровень логирования (DEBUG, INFO, ...)')
    parser.add_argument('--update-usb-ids', action='store_true',
                        help='Загрузить актуальный usb.ids с linux-usb.org и выйти')

    args = parser.parse_args(argv)

    try:
        config = InventoryConfig(args.config)
    except ValueError as e:
        logging.basicConfig()
        logging.error(f"Ошибка конфигурации: {e}")
        return 1

    setup_logging(args.log_level or config.log_level, config.log_file or None)

    if args.update_usb_ids:
        try:
            download_usb_ids(config.usb_ids_path)
        except (requests.RequestException, OSError, ValueError) as e:
            logging.error(f"Не удалось обновить usb.ids: {e}")
            return 1
        return 0

    try:
        agent = InventoryAgent(config)
        info = agent.collect()
        agent.write(info, args.output)
        if args.publish:
            agent.publish(info, args.config)
    except Exception as e:
        logging.error(f"Критическая ошибка: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
