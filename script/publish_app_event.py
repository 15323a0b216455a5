#!/usr/bin/env python3
"""
Publish Application Event

Sends one `{name, data, id, ts}` envelope to the event's Kafka topic, the same
way the booking and show services do. Handy for driving the durable functions
locally without the rest of the platform.

Usage:
    python -m script.publish_app_event app/checkpayment '{"bookingId": "b-1"}'
    python -m script.publish_app_event app/show.added '{"movieTitle": "Heat", "movieId": "949"}' \
        --id evt-949
"""

import argparse
import asyncio
from typing import Any, List, Optional

import orjson

from src.platform.message_queue.event_publisher import close_producer, publish_app_event
from src.service.cinema.domain.app_event import AppEventName


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Publish an application event to Kafka')
    parser.add_argument('name', choices=[name.value for name in AppEventName])
    parser.add_argument('data', nargs='?', default='{}', help='event data as a JSON object')
    parser.add_argument('--id', dest='event_id', default=None, help='event id (deduplication)')
    parser.add_argument('--key', default=None, help='Kafka message key')
    args = parser.parse_args(argv)

    data: Any = orjson.loads(args.data)
    if not isinstance(data, dict):
        parser.error('data must be a JSON object')
    args.data = data
    return args


async def publish(args: argparse.Namespace) -> None:
    try:
        await publish_app_event(
            name=args.name, data=args.data, event_id=args.event_id, key=args.key
        )
        print(f'📤 Published {args.name}')
    finally:
        await close_producer()


if __name__ == '__main__':
    asyncio.run(publish(parse_args()))
