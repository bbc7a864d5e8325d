"""Shared pytest fixtures for the annotations mapper tests."""

import re

import pytest
import structlog

from annotations_mapper.config.settings import MapperSettings
from annotations_mapper.shared_lib.utils.correlation import clear_correlation_id
from tests.unit.helpers.fakes import FakeConsumer, FakeProducer

TEST_SYSTEM_ID = "http://cmdb.ft.com/systems/test-system"
TEST_TX_ID = "tid_testing"


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Undo any structlog configuration or correlation id a test left behind."""
    yield
    structlog.reset_defaults()
    clear_correlation_id()


@pytest.fixture
def whitelist():
    return re.compile(re.escape(TEST_SYSTEM_ID))


@pytest.fixture
def producer() -> FakeProducer:
    return FakeProducer()


@pytest.fixture
def consumer() -> FakeConsumer:
    return FakeConsumer()


@pytest.fixture
def settings() -> MapperSettings:
    """Settings isolated from the environment and any .env file."""
    return MapperSettings(
        _env_file=None,
        kafka_address="localhost:9092",
        connect_retry_interval=0,
        health_timeout=1.0,
    )
