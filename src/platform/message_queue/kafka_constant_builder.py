class ServiceNames:
    """Service name constants"""

    BOOKING_API = 'booking-api'  # HTTP API + durable run poller + cron
    EVENT_WORKER = 'event-worker'  # Kafka consumer feeding the durable runtime


class KafkaTopicBuilder:
    """
    Kafka Topic Naming Unified Builder

    Application events are named `source/what` (e.g. `clerk/user.created`).
    Kafka topic names cannot contain '/', so the separator becomes '.':

        clerk/user.created  ->  clerk.user.created
        app/show.booked     ->  app.show.booked
    """

    @staticmethod
    def for_event(*, event_name: str) -> str:
        return event_name.replace('/', '.')

    @staticmethod
    def to_event_name(*, topic: str) -> str:
        source, _, rest = topic.partition('.')
        return f'{source}/{rest}'

    # ====== Dead Letter Queues =======
    @staticmethod
    def event_worker_dlq() -> str:
        """Dead Letter Queue for envelopes the worker cannot decode or dispatch"""
        return f'dlq______{ServiceNames.EVENT_WORKER}'

    @staticmethod
    def get_all_topics(*, event_names: list[str]) -> list[str]:
        return [KafkaTopicBuilder.for_event(event_name=name) for name in event_names] + [
            KafkaTopicBuilder.event_worker_dlq()
        ]


class KafkaConsumerGroupBuilder:
    """
    Kafka Consumer Group Naming Unified Builder

    Format: {group_prefix}_____{service_name}
    """

    @staticmethod
    def event_worker(*, group_prefix: str) -> str:
        return f'{group_prefix}_____{ServiceNames.EVENT_WORKER}'
