"""
Dependency health checks for the annotations mapper.

Registers the whitelist, read-queue, write-queue and consumer-lag checks on
a HealthMonitor and exposes the good-to-go decision.
"""

from typing import Optional

from ..core.ports import MessageConsumerPort, MessageProducerPort
from ..monitoring.health_monitor import GoodToGoStatus, HealthCheck, HealthMonitor
from ..shared_lib.exceptions import BaseServiceException, ServiceUnavailableError

PANIC_GUIDE = "https://dewey.ft.com/pac-annotations-mapper.html"

WHITELIST_CHECK_ID = "message-whitelist"
READ_QUEUE_CHECK_ID = "read-message-queue-reachable"
WRITE_QUEUE_CHECK_ID = "write-message-queue-reachable"
CONSUMER_LAG_CHECK_ID = "consumer-lag-within-tolerance"


class MapperHealthCheck:
    """
    Health checks for the mapper's dependencies.

    The whitelist check is only registered when the whitelist failed to
    compile; a valid whitelist has nothing to report.
    """

    def __init__(
        self,
        monitor: HealthMonitor,
        consumer: MessageConsumerPort,
        producer: MessageProducerPort,
        whitelist_error: Optional[BaseServiceException] = None,
        lag_tolerance: Optional[int] = None,
    ):
        self.monitor = monitor
        self.consumer = consumer
        self.producer = producer
        self.whitelist_error = whitelist_error
        self.lag_tolerance = lag_tolerance

        if whitelist_error is not None:
            monitor.register_health_check(self._whitelist_check())
        monitor.register_health_check(self._read_queue_check())
        monitor.register_health_check(self._write_queue_check())
        if lag_tolerance is not None:
            monitor.register_health_check(self._consumer_lag_check())

    async def good_to_go(self) -> GoodToGoStatus:
        """Ready only when both queues are reachable."""
        return await self.monitor.good_to_go(
            [READ_QUEUE_CHECK_ID, WRITE_QUEUE_CHECK_ID]
        )

    def _whitelist_check(self) -> HealthCheck:
        return HealthCheck(
            id=WHITELIST_CHECK_ID,
            name="Message Whitelist Filter",
            severity=2,
            business_impact=(
                "No metadata will be mapped to UPP. "
                "This will negatively impact metadata availability."
            ),
            technical_summary="The whitelist configuration for this mapper is invalid",
            panic_guide=PANIC_GUIDE,
            checker=self.check_whitelist,
        )

    def _read_queue_check(self) -> HealthCheck:
        return HealthCheck(
            id=READ_QUEUE_CHECK_ID,
            name="Read Message Queue Reachable",
            severity=2,
            business_impact=(
                "PAC Metadata can't be read from queue. "
                "This will negatively impact metadata availability."
            ),
            technical_summary="Read message queue is not reachable/healthy",
            panic_guide=PANIC_GUIDE,
            checker=self.check_consumer_connectivity,
        )

    def _write_queue_check(self) -> HealthCheck:
        return HealthCheck(
            id=WRITE_QUEUE_CHECK_ID,
            name="Write Message Queue Reachable",
            severity=2,
            business_impact=(
                "Mapped Metadata can't be written to queue. "
                "This will negatively impact metadata availability."
            ),
            technical_summary="Write message queue is not reachable/healthy",
            panic_guide=PANIC_GUIDE,
            checker=self.check_producer_connectivity,
        )

    def _consumer_lag_check(self) -> HealthCheck:
        return HealthCheck(
            id=CONSUMER_LAG_CHECK_ID,
            name="Consumer Lag Within Tolerance",
            severity=3,
            business_impact=(
                "PAC Metadata will reach UPP with a delay. "
                "Publishing of annotations may appear stuck."
            ),
            technical_summary=(
                "The consumer is behind the inbound topic by more than "
                "the configured lag tolerance"
            ),
            panic_guide=PANIC_GUIDE,
            checker=self.check_consumer_lag,
        )

    async def check_whitelist(self) -> str:
        if self.whitelist_error is not None:
            raise self.whitelist_error
        return "Whitelist regex is valid"

    async def check_consumer_connectivity(self) -> str:
        await self.consumer.connectivity_check()
        return "Successfully connected to Kafka"

    async def check_producer_connectivity(self) -> str:
        await self.producer.connectivity_check()
        return "Successfully connected to Kafka"

    async def check_consumer_lag(self) -> str:
        lag = await self.consumer.partition_lag()
        lagging = {
            partition: behind
            for partition, behind in lag.items()
            if behind > self.lag_tolerance
        }
        if lagging:
            raise ServiceUnavailableError(
                f"Consumer is lagging behind: {lagging}",
                details={"lag": lagging, "tolerance": self.lag_tolerance},
                service_name="kafka",
            )
        return "Consumer lag is within tolerance"
