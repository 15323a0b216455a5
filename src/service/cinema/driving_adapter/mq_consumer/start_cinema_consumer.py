"""
Standalone Event Worker Entry Point

Runs the Kafka consumer in its own process, for deployments that keep the API
process free of consumers (set KAFKA_CONSUMER_ENABLED=false there).

Usage:
    PYTHONPATH=$PWD python -m src.service.cinema.driving_adapter.mq_consumer.start_cinema_consumer
"""

import signal

from anyio.from_thread import start_blocking_portal

from src.platform.config.di import container
from src.platform.database.orm_db_setting import dispose_engine
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.kafka_topic_initializer import KafkaTopicInitializer
from src.platform.observability.tracing import TracingConfig
from src.service.cinema.driving_adapter.mq_consumer.cinema_event_consumer import (
    CinemaEventConsumer,
)


def main() -> None:
    Logger.base.info('🚀 [Event Worker] Starting...')

    tracing = TracingConfig(service_name='event-worker')
    tracing.setup()

    registry = container.function_registry()
    KafkaTopicInitializer().ensure_topics_exist(event_names=registry.event_names())

    consumer = CinemaEventConsumer(executor=container.function_executor())

    with start_blocking_portal() as portal:
        consumer.set_portal(portal)

        def shutdown_handler(signum, frame):
            Logger.base.info(f'🛑 [Event Worker] Received signal {signum}')
            consumer.stop_event.set()

        signal.signal(signal.SIGINT, shutdown_handler)
        signal.signal(signal.SIGTERM, shutdown_handler)

        try:
            consumer.start()
        finally:
            consumer.stop()
            portal.call(dispose_engine)
            tracing.shutdown()
            Logger.base.info('👋 [Event Worker] Shutdown complete')


if __name__ == '__main__':
    main()
