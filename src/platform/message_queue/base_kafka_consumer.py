from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Event
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from confluent_kafka import Consumer, KafkaError, KafkaException, Message, Producer, TopicPartition
from opentelemetry import trace
import orjson


if TYPE_CHECKING:
    from anyio.from_thread import BlockingPortal

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.kafka_constant_builder import KafkaTopicBuilder
from src.platform.metrics.booking_metrics import metrics
from src.platform.observability.tracing import extract_trace_context


EnvelopeHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class BaseKafkaConsumer(ABC):
    # === Tuning Parameters (subclasses can override) ===
    #
    # POLL_TIMEOUT_SECONDS: Max time poll() waits for messages
    # COMMIT_INTERVAL_SECONDS: How often to batch commit offsets
    # MAX_WORKERS: ThreadPool concurrent worker count
    # MAX_PENDING_COMMITS: Force commit after this many messages
    #
    POLL_TIMEOUT_SECONDS: float = 0.5
    COMMIT_INTERVAL_SECONDS: float = 1.0
    MAX_WORKERS: int = 4
    MAX_PENDING_COMMITS: int = 100

    def __init__(
        self,
        *,
        service_name: str,
        consumer_group_id: str,
        dlq_topic: str,
    ) -> None:
        self.service_name = service_name
        self.consumer_group_id = consumer_group_id
        self.dlq_topic = dlq_topic
        self.instance_id = settings.KAFKA_CONSUMER_INSTANCE_ID

        # Kafka clients
        self.consumer: Optional[Consumer] = None
        self.producer: Optional[Producer] = None  # For sending to DLQ
        self.executor: Optional[ThreadPoolExecutor] = None
        self.portal: Optional['BlockingPortal'] = None  # anyio cross-thread bridge
        self.tracer = trace.get_tracer(__name__)

        # Running state control
        self.running = False
        self.stop_event = Event()
        # { topic_name: { partition_id: next_offset_to_commit } }
        self._pending_offsets: Dict[str, Dict[int, int]] = {}
        self._pending_count = 0
        self._last_commit_time = time.monotonic()
        self._in_flight_futures: List[Future] = []

    def set_portal(self, portal: 'BlockingPortal') -> None:
        self.portal = portal

    @abstractmethod
    def _get_topic_handlers(self) -> Dict[str, EnvelopeHandler]:
        """
        Return topic name to async handler mapping.

        Example:
            return {
                'app.checkpayment': self._handle_envelope,
            }
        """
        pass

    @abstractmethod
    def _initialize_dependencies(self) -> None:
        """Initialize use cases and dependencies before consumer starts."""
        pass

    def _create_consumer(self) -> Consumer:
        return Consumer(
            {
                'bootstrap.servers': settings.KAFKA_BOOTSTRAP_SERVERS,
                'group.id': self.consumer_group_id,
                'auto.offset.reset': settings.KAFKA_CONSUMER_AUTO_OFFSET_RESET,
                'enable.auto.commit': False,  # Manual commit for precise control
                'session.timeout.ms': 45000,
                'heartbeat.interval.ms': 15000,
                'reconnect.backoff.ms': 1000,
                'reconnect.backoff.max.ms': 30000,
            }
        )

    def _create_producer(self) -> Producer:
        return Producer(
            {
                'bootstrap.servers': settings.KAFKA_BOOTSTRAP_SERVERS,
                'acks': 'all',
                'retries': 3,
            }
        )

    @staticmethod
    def _decode_envelope(msg: Message) -> Dict[str, Any]:
        """
        Decode a JSON `{name, data, id?, ts?}` envelope.

        A bare object without `name` is taken as the data of the topic's event.
        A missing id falls back to the message coordinates, so a redelivered
        message maps onto the same run.
        """
        envelope = orjson.loads(msg.value() or b'null')
        if not isinstance(envelope, dict):
            raise ValueError(f'Malformed envelope on {msg.topic()}')
        if 'name' not in envelope:
            envelope = {
                'name': KafkaTopicBuilder.to_event_name(topic=msg.topic()),
                'data': envelope,
            }
        envelope.setdefault('data', {})
        if not envelope.get('id'):
            envelope['id'] = f'{msg.topic()}-{msg.partition()}-{msg.offset()}'
        return envelope

    def _send_to_dlq(
        self,
        *,
        message: Dict,
        original_topic: str,
        error: str,
    ) -> None:
        if not self.producer:
            Logger.base.error('DLQ producer not initialized')
            return

        try:
            dlq_message = {
                'original_message': message,
                'original_topic': original_topic,
                'error': error,
                'timestamp': time.time(),
                'instance_id': self.instance_id,
            }
            self.producer.produce(
                topic=self.dlq_topic,
                key=str(message.get('id', 'unknown')).encode('utf-8'),
                value=orjson.dumps(dlq_message),
            )
            self.producer.poll(0)
            Logger.base.warning(f'[DLQ] Sent: {message.get("id")} - {error}')

        except Exception as e:
            Logger.base.error(f'[DLQ] Failed to send: {e}')

    def _track_offset(self, msg: Message) -> None:
        """Kafka commits the NEXT offset to read: processed offset=5 -> commit 6."""
        topic, partition = msg.topic(), msg.partition()
        offset = msg.offset() + 1

        partitions = self._pending_offsets.setdefault(topic, {})
        if offset > partitions.get(partition, -1):
            partitions[partition] = offset
            self._pending_count += 1

    def _maybe_commit_offsets(self, *, force: bool = False) -> None:
        now = time.monotonic()
        should_commit = (
            force
            or self._pending_count >= self.MAX_PENDING_COMMITS
            or now - self._last_commit_time >= self.COMMIT_INTERVAL_SECONDS
        )
        if not should_commit or not self._pending_offsets:
            return

        try:
            offsets_to_commit = [
                TopicPartition(topic, partition, offset)
                for topic, partitions in self._pending_offsets.items()
                for partition, offset in partitions.items()
            ]
            if offsets_to_commit and self.consumer:
                self.consumer.commit(offsets=offsets_to_commit, asynchronous=False)
                Logger.base.debug(f'[{self.service_name}] Committed {self._pending_count} offsets')

            self._pending_offsets.clear()
            self._pending_count = 0
            self._last_commit_time = now

        except Exception as e:
            Logger.base.error(f'[{self.service_name}] Commit failed: {e}')

    def _process_message(self, msg: Message, handler: EnvelopeHandler, topic: str) -> None:
        """
        Process message in ThreadPool.

        Flow: decode -> extract trace -> run async handler on the portal -> track offset
        On error -> send to DLQ
        """
        try:
            envelope = self._decode_envelope(msg)
            extract_trace_context(
                headers={
                    'traceparent': envelope.get('traceparent', ''),
                    'tracestate': envelope.get('tracestate', ''),
                }
            )

            with self.tracer.start_as_current_span(
                f'consumer.{topic}',
                attributes={
                    'messaging.system': 'kafka',
                    'messaging.destination': topic,
                    'event.id': envelope['id'],
                },
            ):
                if self.portal is None:
                    raise RuntimeError('BlockingPortal not set')
                self.portal.call(handler, envelope)
                self._track_offset(msg)
                metrics.record_kafka_message(topic=topic, result='success')

        except Exception as e:
            Logger.base.error(f'[{self.service_name}] Error on {topic}: {e}')
            try:
                data = orjson.loads(msg.value() or b'null')
            except orjson.JSONDecodeError:
                data = {'raw': msg.value().hex() if msg.value() else 'empty'}
            if not isinstance(data, dict):
                data = {'raw': data}

            self._send_to_dlq(message=data, original_topic=topic, error=str(e))
            self._track_offset(msg)  # Still track to avoid reprocessing
            metrics.record_kafka_message(topic=topic, result='dlq')

    def start(self) -> None:
        """Start consumer with retry for topic creation."""
        max_retries, delay = 5, 2

        for attempt in range(1, max_retries + 1):
            try:
                self._initialize_dependencies()
                self.consumer = self._create_consumer()
                self.producer = self._create_producer()

                handlers = self._get_topic_handlers()
                self.consumer.subscribe(list(handlers.keys()))

                Logger.base.info(
                    f'[{self.service_name}-{self.instance_id}] Started | '
                    f'group={self.consumer_group_id} topics={list(handlers.keys())} '
                    f'workers={self.MAX_WORKERS}'
                )

                self.executor = ThreadPoolExecutor(
                    max_workers=self.MAX_WORKERS,
                    thread_name_prefix=f'{self.service_name}-worker',
                )

                self.running = True
                self._run_loop(handlers)
                break

            except KafkaException as e:
                if 'UNKNOWN_TOPIC_OR_PART' in str(e) and attempt < max_retries:
                    Logger.base.warning(
                        f'[{self.service_name}] {attempt}/{max_retries}: Topic not ready, retry in {delay}s'
                    )
                    time.sleep(delay)
                    delay *= 2
                else:
                    Logger.base.error(f'[{self.service_name}] Start failed: {e}')
                    raise

    def _run_loop(self, handlers: Dict[str, EnvelopeHandler]) -> None:
        while self.running and not self.stop_event.is_set():
            try:
                msg = self.consumer.poll(timeout=self.POLL_TIMEOUT_SECONDS)

                if msg is None:
                    self._maybe_commit_offsets()
                    self._in_flight_futures = [f for f in self._in_flight_futures if not f.done()]
                    continue

                if msg.error():
                    if msg.error().code() != KafkaError._PARTITION_EOF:
                        Logger.base.error(f'[{self.service_name}] Kafka error: {msg.error()}')
                    continue

                topic = msg.topic()
                if topic not in handlers:
                    continue

                future = self.executor.submit(self._process_message, msg, handlers[topic], topic)
                self._in_flight_futures.append(future)

                self._maybe_commit_offsets()

            except Exception as e:
                Logger.base.error(f'[{self.service_name}] Loop error: {e}')
                time.sleep(0.1)

    def stop(self) -> None:
        """
        Graceful shutdown: wait for in-flight messages, commit, close the
        consumer (triggers rebalance) and flush the DLQ producer.
        """
        if not self.running:
            return

        Logger.base.info(f'[{self.service_name}] Stopping...')
        self.running = False
        self.stop_event.set()

        for future in self._in_flight_futures:
            try:
                future.result(timeout=5.0)
            except Exception as e:
                Logger.base.warning(f'[{self.service_name}] Future error: {e}')

        self._maybe_commit_offsets(force=True)

        if self.executor:
            self.executor.shutdown(wait=True, cancel_futures=False)

        if self.consumer:
            try:
                self.consumer.close()
            except Exception as e:
                Logger.base.warning(f'[{self.service_name}] Close error: {e}')

        if self.producer:
            self.producer.flush(timeout=5.0)

        Logger.base.info(f'[{self.service_name}] Stopped')
