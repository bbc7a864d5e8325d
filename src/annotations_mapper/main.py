"""Main FastAPI application for the annotations mapper."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from . import __version__
from .api.endpoints import router
from .config.settings import (
    APP_DESCRIPTION,
    APP_NAME,
    APP_SYSTEM_CODE,
    MapperSettings,
    compile_whitelist,
)
from .core.mapper import AnnotationMapperService
from .core.ports import MessageConsumerPort, MessageProducerPort
from .infrastructure.health_checker import MapperHealthCheck
from .infrastructure.kafka_proxy import ProxyConsumer, ProxyProducer
from .monitoring.health_monitor import HealthMonitor

logger = structlog.get_logger(__name__)


async def run_pipeline(
    consumer: MessageConsumerPort,
    producer: MessageProducerPort,
    mapper: AnnotationMapperService,
) -> None:
    """Connect the producer, then feed every inbound message to the mapper."""
    await producer.connect()
    await consumer.start(mapper.handle_message)


def _log_pipeline_exit(task: asyncio.Task) -> None:
    """Report a pipeline task that stopped for any reason other than shutdown."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(
            "Annotations pipeline stopped unexpectedly",
            error=str(error),
            error_type=type(error).__name__,
            exc_info=error,
        )
    else:
        logger.warning("Annotations pipeline stopped: consumer session ended")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    state = app.state
    logger.info(
        "Starting PAC Annotations Mapper",
        system_code=APP_SYSTEM_CODE,
        port=state.settings.app_port,
    )

    pipeline = asyncio.create_task(
        run_pipeline(state.consumer, state.producer, state.mapper),
        name="annotations-pipeline",
    )
    pipeline.add_done_callback(_log_pipeline_exit)
    try:
        yield
    finally:
        logger.info("[Shutdown] pac-annotations-mapper is shutting down")
        pipeline.cancel()
        await asyncio.gather(pipeline, return_exceptions=True)

        logger.info("Shutting down kafka consumer")
        await state.consumer.close()
        logger.info("Shutting down kafka producer")
        await state.producer.close()


def create_app(
    settings: Optional[MapperSettings] = None,
    consumer: Optional[MessageConsumerPort] = None,
    producer: Optional[MessageProducerPort] = None,
) -> FastAPI:
    """Wire settings, Kafka proxies, mapper and health checks into an app."""
    settings = settings or MapperSettings()

    whitelist, whitelist_error = compile_whitelist(settings.whitelist_regex)
    if whitelist_error is not None:
        logger.error(
            "Please specify a valid whitelist",
            error=whitelist_error.message,
            pattern=settings.whitelist_regex,
        )

    if producer is None:
        producer = ProxyProducer(
            settings.kafka_address,
            settings.producer_topic,
            retry_interval=settings.connect_retry_interval,
        )
    if consumer is None:
        consumer = ProxyConsumer(
            settings.kafka_address,
            settings.consumer_group,
            [settings.consumer_topic],
            retry_interval=settings.connect_retry_interval,
            auto_offset_reset="latest",
            enable_auto_commit=True,
        )

    mapper = AnnotationMapperService(whitelist, producer)
    monitor = HealthMonitor(
        APP_SYSTEM_CODE, APP_NAME, APP_DESCRIPTION, timeout=settings.health_timeout
    )
    health_check = MapperHealthCheck(
        monitor,
        consumer,
        producer,
        whitelist_error=whitelist_error,
        lag_tolerance=settings.kafka_lag_tolerance,
    )

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.consumer = consumer
    app.state.producer = producer
    app.state.mapper = mapper
    app.state.health_check = health_check
    app.include_router(router)
    return app
