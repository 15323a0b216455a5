"""
Cinema Event Consumer

Subscribes to one topic per event name the durable functions listen to and
hands every envelope to the FunctionExecutor, which starts (and deduplicates)
the runs.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Union

from src.platform.config.core_setting import settings
from src.platform.message_queue.base_kafka_consumer import BaseKafkaConsumer, EnvelopeHandler
from src.platform.message_queue.kafka_constant_builder import (
    KafkaConsumerGroupBuilder,
    KafkaTopicBuilder,
    ServiceNames,
)
from src.platform.workflow.function_executor import FunctionExecutor
from src.platform.workflow.function_run import FunctionEvent, utc_now


def parse_event_ts(ts: Union[str, int, float, None]) -> datetime:
    """Event time as ISO-8601 or epoch milliseconds; naive values are UTC."""
    if ts is None or ts == '':
        return utc_now()
    if isinstance(ts, (int, float)):
        return datetime.fromtimestamp(ts / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(ts)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def envelope_to_event(envelope: Dict[str, Any]) -> FunctionEvent:
    return FunctionEvent(
        name=envelope['name'],
        data=envelope.get('data') or {},
        id=envelope.get('id'),
        ts=parse_event_ts(envelope.get('ts')),
    )


class CinemaEventConsumer(BaseKafkaConsumer):
    def __init__(self, *, executor: FunctionExecutor) -> None:
        super().__init__(
            service_name=ServiceNames.EVENT_WORKER,
            consumer_group_id=KafkaConsumerGroupBuilder.event_worker(
                group_prefix=settings.KAFKA_GROUP_ID
            ),
            dlq_topic=KafkaTopicBuilder.event_worker_dlq(),
        )
        self.function_executor = executor

    def _initialize_dependencies(self) -> None:
        # Executor arrives fully built from the container
        pass

    def _get_topic_handlers(self) -> Dict[str, EnvelopeHandler]:
        return {
            KafkaTopicBuilder.for_event(event_name=name): self._handle_envelope
            for name in self.function_executor.registry.event_names()
        }

    async def _handle_envelope(self, envelope: Dict[str, Any]) -> None:
        event = envelope_to_event(envelope)
        await self.function_executor.dispatch(event)
