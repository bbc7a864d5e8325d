"""
Core mapping functionality for the annotations mapper.

Turns PAC metadata publish events into concept annotation messages:
whitelist filter, decode, predicate remap, encode, publish.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Pattern

import structlog
from pydantic import ValidationError

from ..schemas.models import (
    Concept,
    MappedAnnotation,
    MappedAnnotations,
    PacMetadataAnnotation,
    PacMetadataPublishEvent,
    RawMessage,
)
from ..shared_lib.exceptions import (
    BaseServiceException,
    MessageDecodeError,
    MessageEncodeError,
)
from ..shared_lib.utils.correlation import set_correlation_id
from .ports import MessageProducerPort
from .predicates import map_predicate

TRANSACTION_ID_HEADER = "X-Request-Id"
ORIGIN_SYSTEM_HEADER = "Origin-System-Id"
CONTENT_TYPE_HEADER = "Content-Type"
MESSAGE_TYPE = "concept-annotation"
UNKNOWN_TRANSACTION_ID = "unknown"


class MappingOutcome(str, Enum):
    """How the handling of a single message ended."""

    DELIVERED = "delivered"
    SKIPPED_INVALID_WHITELIST = "skipped_invalid_whitelist"
    SKIPPED_EXCLUDED_SYSTEM = "skipped_excluded_system"
    DECODE_FAILED = "decode_failed"
    ENCODE_FAILED = "encode_failed"
    PUBLISH_FAILED = "publish_failed"


class AnnotationMapperService:
    """
    Maps PAC annotations onto the concept annotations topic.

    Holds no per-message state: the whitelist, the producer and the logger
    are fixed at construction, so one instance can serve concurrent
    handler invocations.
    """

    def __init__(
        self,
        whitelist: Optional[Pattern[str]],
        message_producer: MessageProducerPort,
        logger=None,
    ):
        self.whitelist = whitelist
        self.message_producer = message_producer
        self.logger = logger if logger is not None else structlog.get_logger(__name__)

    async def handle_message(self, message: RawMessage) -> MappingOutcome:
        """Map and republish one inbound message.

        Never raises: every failure is logged with the transaction id and
        reported through the returned outcome.
        """
        tid = message.headers.get(TRANSACTION_ID_HEADER) or UNKNOWN_TRANSACTION_ID
        set_correlation_id(tid)
        request_log = self.logger.bind(transaction_id=tid)

        if self.whitelist is None:
            request_log.error(
                "Skipping annotations because the configured whitelist is invalid"
            )
            return MappingOutcome.SKIPPED_INVALID_WHITELIST

        system_code = message.headers.get(ORIGIN_SYSTEM_HEADER, "")
        if not self.whitelist.search(system_code):
            request_log.info(
                "Skipping annotations published with Origin-System-Id. "
                "It does not match the configured whitelist.",
                origin_system_id=system_code,
            )
            return MappingOutcome.SKIPPED_EXCLUDED_SYSTEM

        try:
            publish_event = self._decode(message.body, tid)
        except MessageDecodeError as e:
            request_log.error(e.message, error=e.details.get("cause"))
            return MappingOutcome.DECODE_FAILED

        request_log = request_log.bind(uuid=publish_event.uuid)
        request_log.info("Processing metadata publish event")

        mapped = MappedAnnotations(
            uuid=publish_event.uuid,
            annotations=self._map_annotations(publish_event.annotations, request_log),
        )

        try:
            body = self._encode(mapped, tid)
        except MessageEncodeError as e:
            request_log.error(e.message, error=e.details.get("cause"))
            return MappingOutcome.ENCODE_FAILED

        outbound = RawMessage(
            headers=build_concept_annotations_headers(message.headers), body=body
        )
        try:
            await self.message_producer.send_message(outbound)
        except BaseServiceException as e:
            request_log.error(
                "Error sending concept annotation to queue",
                error=str(e),
                error_code=e.error_code,
            )
            return MappingOutcome.PUBLISH_FAILED
        except Exception as e:
            request_log.error(
                "Error sending concept annotation to queue",
                error=str(e),
                error_type=type(e).__name__,
            )
            return MappingOutcome.PUBLISH_FAILED

        request_log.info(
            "Sent annotation message to queue",
            message_id=outbound.headers["Message-Id"],
            annotations=len(mapped.annotations),
            outcome=MappingOutcome.DELIVERED.value,
        )
        return MappingOutcome.DELIVERED

    def _map_annotations(
        self, annotations: List[PacMetadataAnnotation], request_log
    ) -> List[MappedAnnotation]:
        mapped = []
        for annotation in annotations:
            predicate = map_predicate(annotation.predicate)
            if predicate is None:
                request_log.warning(
                    "Unsupported predicate, dropping annotation",
                    predicate=annotation.predicate,
                    concept_id=annotation.concept_id,
                )
                continue
            mapped.append(
                MappedAnnotation(
                    thing=Concept(id=annotation.concept_id, predicate=predicate)
                )
            )
        return mapped

    @staticmethod
    def _decode(body: str, tid: str) -> PacMetadataPublishEvent:
        try:
            return PacMetadataPublishEvent.model_validate_json(body)
        except ValidationError as e:
            raise MessageDecodeError(
                correlation_id=tid, details={"cause": str(e)}
            ) from e

    @staticmethod
    def _encode(mapped: MappedAnnotations, tid: str) -> str:
        try:
            return mapped.model_dump_json()
        except (TypeError, ValueError) as e:
            raise MessageEncodeError(
                correlation_id=tid, details={"cause": str(e)}
            ) from e


def format_message_timestamp(moment: datetime) -> str:
    """Format ``moment`` as ``YYYY-MM-DDTHH:mm:ss.sssZ`` in UTC."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_concept_annotations_headers(
    publish_event_headers: Dict[str, str]
) -> Dict[str, str]:
    """Build outbound headers, carrying over the correlation headers."""
    return {
        "Message-Id": str(uuid.uuid4()),
        "Message-Type": MESSAGE_TYPE,
        CONTENT_TYPE_HEADER: publish_event_headers.get(CONTENT_TYPE_HEADER, ""),
        TRANSACTION_ID_HEADER: publish_event_headers.get(TRANSACTION_ID_HEADER, ""),
        ORIGIN_SYSTEM_HEADER: publish_event_headers.get(ORIGIN_SYSTEM_HEADER, ""),
        "Message-Timestamp": format_message_timestamp(datetime.now(timezone.utc)),
    }
