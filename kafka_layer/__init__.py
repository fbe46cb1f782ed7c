from .config import KafkaConfig  # noqa: F401
from .client import KafkaClient  # noqa: F401
