"""Infrastructure adapters: Kafka proxies, FTMSG codec and health checks."""

from .ft_message import decode_ft_message, encode_ft_message
from .health_checker import MapperHealthCheck
from .kafka_proxy import ProxyConsumer, ProxyProducer

__all__ = [
    "decode_ft_message",
    "encode_ft_message",
    "MapperHealthCheck",
    "ProxyConsumer",
    "ProxyProducer",
]
