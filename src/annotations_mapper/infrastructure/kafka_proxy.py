"""
Kafka consumer and producer proxies.

The proxies hide transient broker unavailability behind a blocking connect
loop: a session is attempted, and on failure the proxy waits a fixed
interval and tries again, forever. Everything protocol related is left to
aiokafka.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import structlog
from aiokafka import AIOKafkaConsumer, AIOKafkaProducer
from aiokafka.errors import KafkaError

from ..core.ports import MessageConsumerPort, MessageHandler, MessageProducerPort
from ..schemas.models import RawMessage
from ..shared_lib.exceptions import (
    NotConnectedError,
    PublishError,
    ServiceUnavailableError,
)
from .ft_message import decode_ft_message, encode_ft_message

logger = structlog.get_logger(__name__)

ERR_CONSUMER_NOT_CONNECTED = "consumer is not connected to Kafka"
ERR_PRODUCER_NOT_CONNECTED = "producer is not connected to Kafka"
DEFAULT_RETRY_INTERVAL = 60.0
HEALTHCHECK_GROUP_SUFFIX = "-healthcheck"


class KafkaProxy:
    """Connect loop shared by the consumer and producer proxies."""

    not_connected_message = "not connected to Kafka"

    def __init__(self, retry_interval: float = DEFAULT_RETRY_INTERVAL):
        self.retry_interval = retry_interval
        self._client: Optional[Any] = None
        self.logger = logger

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _create_client(self) -> Any:
        raise NotImplementedError

    async def connect(self) -> None:
        """Block until a Kafka session is established."""
        while self._client is None:
            client = self._create_client()
            try:
                await client.start()
            except KafkaError as e:
                await _stop_quietly(client)
                self.logger.warning(
                    self.not_connected_message,
                    error=str(e),
                    retry_in_seconds=self.retry_interval,
                )
                await asyncio.sleep(self.retry_interval)
                continue

            self._client = client
            self.logger.info("connected to Kafka")

    async def close(self) -> None:
        """Stop the session, if there is one."""
        client, self._client = self._client, None
        if client is not None:
            await _stop_quietly(client)
            self.logger.info("Kafka session closed")

    def _require_client(self) -> Any:
        if self._client is None:
            raise NotConnectedError(self.not_connected_message)
        return self._client


class ProxyConsumer(KafkaProxy, MessageConsumerPort):
    """Reconnecting consumer for the inbound topic."""

    not_connected_message = ERR_CONSUMER_NOT_CONNECTED

    def __init__(
        self,
        bootstrap_servers: str,
        consumer_group: str,
        topics: List[str],
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        consumer_factory: Callable[..., Any] = AIOKafkaConsumer,
        **consumer_options: Any,
    ):
        super().__init__(retry_interval)
        self.bootstrap_servers = bootstrap_servers
        self.consumer_group = consumer_group
        self.topics = list(topics)
        self._consumer_factory = consumer_factory
        self._consumer_options = consumer_options
        self.logger = logger.bind(
            component="kafka_consumer",
            brokers=bootstrap_servers,
            topics=self.topics,
            consumer_group=consumer_group,
        )

    def _create_client(self, group_id: Optional[str] = None) -> Any:
        return self._consumer_factory(
            *self.topics,
            bootstrap_servers=self.bootstrap_servers,
            group_id=group_id or self.consumer_group,
            **self._consumer_options,
        )

    async def start(self, handler: MessageHandler) -> None:
        """Consume until the session is closed, handing every message to ``handler``."""
        while True:
            if self._client is None:
                await self.connect()
            consumer = self._client
            try:
                async for record in consumer:
                    await self._dispatch(record, handler)
                return
            except KafkaError as e:
                self.logger.warning("Kafka consumer failed, reconnecting", error=str(e))
                if self._client is consumer:
                    await self.close()

    async def _dispatch(self, record: Any, handler: MessageHandler) -> None:
        message = decode_ft_message(record.value, record.headers)
        try:
            await handler(message)
        except Exception:
            # One bad message must not stop the consume loop
            self.logger.exception(
                "Message handler failed",
                topic=record.topic,
                partition=record.partition,
                offset=record.offset,
            )

    async def connectivity_check(self) -> None:
        """Open an independent short-lived session to prove the broker is reachable.

        The client library's own health flag is not reliable, so a separate
        consumer in a dedicated health-check group is started and stopped.
        """
        self._require_client()

        probe = self._create_client(self.consumer_group + HEALTHCHECK_GROUP_SUFFIX)
        try:
            await probe.start()
        except KafkaError as e:
            raise ServiceUnavailableError(
                f"Error connecting with Kafka: {e}", service_name="kafka"
            ) from e
        finally:
            await _stop_quietly(probe)

    async def partition_lag(self) -> Dict[str, int]:
        consumer = self._require_client()
        partitions = list(consumer.assignment())
        if not partitions:
            return {}

        try:
            end_offsets = await consumer.end_offsets(partitions)
            lag = {}
            for tp in partitions:
                position = await consumer.position(tp)
                lag[f"{tp.topic}/{tp.partition}"] = max(
                    end_offsets.get(tp, 0) - position, 0
                )
            return lag
        except KafkaError as e:
            raise ServiceUnavailableError(
                f"Could not read consumer offsets: {e}", service_name="kafka"
            ) from e


class ProxyProducer(KafkaProxy, MessageProducerPort):
    """Reconnecting producer for the outbound topic."""

    not_connected_message = ERR_PRODUCER_NOT_CONNECTED

    def __init__(
        self,
        bootstrap_servers: str,
        topic: str,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        producer_factory: Callable[..., Any] = AIOKafkaProducer,
        **producer_options: Any,
    ):
        super().__init__(retry_interval)
        self.bootstrap_servers = bootstrap_servers
        self.topic = topic
        self._producer_factory = producer_factory
        self._producer_options = producer_options
        self.logger = logger.bind(
            component="kafka_producer", brokers=bootstrap_servers, topic=topic
        )

    def _create_client(self) -> Any:
        return self._producer_factory(
            bootstrap_servers=self.bootstrap_servers, **self._producer_options
        )

    async def send_message(self, message: RawMessage) -> None:
        """Publish ``message``; fails at once when there is no session."""
        producer = self._require_client()
        try:
            await producer.send_and_wait(self.topic, encode_ft_message(message))
        except KafkaError as e:
            raise PublishError(str(e), topic=self.topic) from e

    async def connectivity_check(self) -> None:
        producer = self._require_client()
        try:
            partitions = await producer.partitions_for(self.topic)
        except KafkaError as e:
            raise ServiceUnavailableError(
                f"Error connecting with Kafka: {e}", service_name="kafka"
            ) from e
        if not partitions:
            raise ServiceUnavailableError(
                f"No partitions available for topic {self.topic}", service_name="kafka"
            )


async def _stop_quietly(client: Any) -> None:
    try:
        await client.stop()
    except KafkaError as e:
        logger.warning("Error stopping Kafka client", error=str(e))
