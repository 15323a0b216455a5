"""
Production FastAPI Application

HTTP API plus the background workers of the durable-run runtime: the run
poller, the cron scheduler and (unless disabled) the Kafka event consumer.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from anyio.from_thread import BlockingPortal
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.event_publisher import close_producer
from src.platform.message_queue.kafka_topic_initializer import KafkaTopicInitializer
from src.platform.observability.tracing import TracingConfig
from src.service.cinema.driving_adapter.mq_consumer.cinema_event_consumer import (
    CinemaEventConsumer,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🚀 [Booking API] Starting up...')

    tracing = TracingConfig(service_name='booking-api')
    tracing.setup()

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Booking API] Dependency injection wired')

    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('🗄️  [Booking API] Database engine ready + instrumented')

    consumer: CinemaEventConsumer | None = None

    async with BlockingPortal() as portal, anyio.create_task_group() as tg:
        if settings.WORKFLOW_ENABLED:
            tg.start_soon(container.run_poller().run_forever)
            tg.start_soon(container.cron_scheduler().run_forever)
            Logger.base.info('⏱️  [Booking API] Run poller and cron scheduler started')

        if settings.KAFKA_CONSUMER_ENABLED:
            registry = container.function_registry()
            await anyio.to_thread.run_sync(
                lambda: KafkaTopicInitializer().ensure_topics_exist(
                    event_names=registry.event_names()
                )
            )
            consumer = CinemaEventConsumer(executor=container.function_executor())
            consumer.set_portal(portal)
            tg.start_soon(anyio.to_thread.run_sync, consumer.start)
            Logger.base.info('📥 [Booking API] Kafka event consumer started')

        Logger.base.info('✅ [Booking API] Ready')
        yield

        Logger.base.info('🛑 [Booking API] Shutting down...')
        if consumer is not None:
            await anyio.to_thread.run_sync(consumer.stop)
        tg.cancel_scope.cancel()

    try:
        await close_producer()
    except Exception as e:
        Logger.base.error(f'❌ [Booking API] Failed to close Kafka producer: {e}')

    await dispose_engine()
    tracing.shutdown()
    container.unwire()
    Logger.base.info('👋 [Booking API] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
