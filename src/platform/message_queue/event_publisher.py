"""
Application Event Publisher

Publishes `{name, data, id, ts}` envelopes as JSON using confluent-kafka's
experimental AsyncIO Producer. The topic is derived from the event name.

Features:
- Global async producer instance for connection reuse
- Idempotent producer with acks=all for reliability
- Trace context travels inside the envelope
"""

from datetime import datetime
from typing import Any, Literal, Optional

from confluent_kafka.experimental.aio import AIOProducer
from opentelemetry import trace
import orjson
import uuid_utils

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.kafka_constant_builder import KafkaTopicBuilder
from src.platform.observability.tracing import inject_trace_context
from src.platform.workflow.function_run import utc_now


# Global async producer instance
_global_producer: AIOProducer | None = None


async def _get_global_producer() -> AIOProducer:
    """Get global async producer instance - avoid creating new producer on every publish"""
    global _global_producer
    if _global_producer is None:
        _global_producer = AIOProducer(
            {
                'bootstrap.servers': settings.KAFKA_BOOTSTRAP_SERVERS,
                # === Reliability Settings ===
                'enable.idempotence': True,
                'acks': 'all',
                'retries': 3,
                # === Batching ===
                'linger.ms': 5,
                'compression.type': 'snappy',
            }
        )
    return _global_producer


def build_envelope(
    *,
    name: str,
    data: dict[str, Any],
    event_id: Optional[str] = None,
    ts: Optional[datetime] = None,
) -> dict[str, Any]:
    return {
        'name': name,
        'data': data,
        'id': event_id or str(uuid_utils.uuid7()),
        'ts': (ts or utc_now()).isoformat(),
        **inject_trace_context(),
    }


async def publish_app_event(
    *,
    name: str,
    data: dict[str, Any],
    event_id: Optional[str] = None,
    key: Optional[str] = None,
) -> Literal[True]:
    """
    Publish an application event (async, non-blocking).

    Example:
        await publish_app_event(name='app/checkpayment', data={'bookingId': booking_id})
    """
    topic = KafkaTopicBuilder.for_event(event_name=name)
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span(
        'kafka.publish',
        attributes={
            'messaging.system': 'kafka',
            'messaging.destination': topic,
            'messaging.destination_kind': 'topic',
            'event.name': name,
        },
    ):
        envelope = build_envelope(name=name, data=data, event_id=event_id)
        producer = await _get_global_producer()
        await producer.produce(
            topic=topic,
            key=key.encode('utf-8') if key else None,
            value=orjson.dumps(envelope),
        )

        Logger.base.info(f'Published {name} to {topic} (id={envelope["id"]})')
        return True


async def close_producer() -> None:
    global _global_producer
    if _global_producer is not None:
        await _global_producer.flush()
        await _global_producer.close()
        _global_producer = None
        Logger.base.info('Closed async producer')
