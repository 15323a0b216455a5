"""
Kafka Topic Initializer

Creates the event topics (and the DLQ) with confluent-kafka's AdminClient
before the worker subscribes, so subscription never hits UNKNOWN_TOPIC_OR_PART.
"""

from confluent_kafka import KafkaException
from confluent_kafka.admin import AdminClient, NewTopic

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.kafka_constant_builder import KafkaTopicBuilder


TOPIC_ALREADY_EXISTS = 36


class KafkaTopicInitializer:
    def __init__(
        self,
        *,
        bootstrap_servers: str | None = None,
        num_partitions: int = 3,
        replication_factor: int = 1,
    ) -> None:
        self.bootstrap_servers = bootstrap_servers or settings.KAFKA_BOOTSTRAP_SERVERS
        self.num_partitions = num_partitions
        self.replication_factor = replication_factor
        self.admin_client = AdminClient({'bootstrap.servers': self.bootstrap_servers})

    def ensure_topics_exist(self, *, event_names: list[str]) -> bool:
        try:
            required_topics = KafkaTopicBuilder.get_all_topics(event_names=event_names)
            existing_topics = set(self.admin_client.list_topics(timeout=10).topics.keys())
            topics_to_create = [topic for topic in required_topics if topic not in existing_topics]

            if not topics_to_create:
                Logger.base.info(f'✅ [TOPIC-INIT] All {len(required_topics)} topics exist')
                return True

            Logger.base.info(
                f'📝 [TOPIC-INIT] Creating {len(topics_to_create)}/{len(required_topics)} topics'
            )
            futures = self.admin_client.create_topics(
                [
                    NewTopic(
                        topic=topic,
                        num_partitions=self.num_partitions,
                        replication_factor=self.replication_factor,
                        config={'cleanup.policy': 'delete', 'retention.ms': '604800000'},
                    )
                    for topic in topics_to_create
                ],
                request_timeout=30,
            )

            success_count = 0
            for topic, future in futures.items():
                try:
                    future.result()
                    Logger.base.info(f'✅ [TOPIC-INIT] Created topic: {topic}')
                    success_count += 1
                except KafkaException as e:
                    # Another worker may have created it concurrently
                    if e.args[0].code() == TOPIC_ALREADY_EXISTS:
                        success_count += 1
                    else:
                        Logger.base.error(f'❌ [TOPIC-INIT] Failed to create {topic}: {e}')

            return success_count == len(topics_to_create)

        except Exception as e:
            Logger.base.error(f'❌ [TOPIC-INIT] Failed to ensure topics exist: {e}')
            return False
