"""Core ports (interfaces) for the mapper's queue dependencies.

These ports define the mapper's dependency surface on the message queue.
Concrete implementations live in infrastructure modules and delegate to
the Kafka client library.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict

from ..schemas.models import RawMessage

MessageHandler = Callable[[RawMessage], Awaitable[object]]


class MessageProducerPort(ABC):
    """Port for publishing messages to the outbound topic."""

    @abstractmethod
    async def connect(self) -> None:
        """Block until the outbound transport session is established."""
        raise NotImplementedError

    @abstractmethod
    async def send_message(self, message: RawMessage) -> None:
        """Publish ``message``.

        Raises:
            NotConnectedError: no transport session is available.
            PublishError: the transport rejected the message.
        """
        raise NotImplementedError

    @abstractmethod
    async def connectivity_check(self) -> None:
        """Raise if the outbound transport is not reachable."""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release the transport session."""
        raise NotImplementedError


class MessageConsumerPort(ABC):
    """Port for consuming messages from the inbound topic."""

    @abstractmethod
    async def connect(self) -> None:
        """Block until the inbound transport session is established."""
        raise NotImplementedError

    @abstractmethod
    async def start(self, handler: MessageHandler) -> None:
        """Deliver every inbound message to ``handler`` until closed."""
        raise NotImplementedError

    @abstractmethod
    async def connectivity_check(self) -> None:
        """Raise if the inbound transport is not reachable."""
        raise NotImplementedError

    @abstractmethod
    async def partition_lag(self) -> Dict[str, int]:
        """Return the current lag per assigned partition."""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release the transport session."""
        raise NotImplementedError
