from prometheus_client import Counter


class BookingMetrics:
    """Business and runtime counters exposed on /metrics."""

    def __init__(self):
        # ========== Durable Function Runs ==========
        self.function_runs = Counter(
            'function_runs_total',
            'Durable function run outcomes',
            ['function_id', 'outcome'],  # outcome: completed/sleeping/retrying/failed
        )

        # ========== Kafka Consumer ==========
        self.kafka_messages_processed = Counter(
            'kafka_consumer_messages_processed_total',
            'Total processed messages',
            ['topic', 'result'],
        )

        # ========== Business ==========
        self.emails_sent = Counter(
            'emails_sent_total',
            'Outbound e-mails by kind and result',
            ['kind', 'result'],  # kind: booking_confirmation/show_reminder/new_show
        )

        self.seats_released = Counter(
            'seats_released_total',
            'Seats returned to shows by the payment-timeout workflow',
        )

        self.bookings_expired = Counter(
            'bookings_expired_total',
            'Unpaid bookings deleted by the payment-timeout workflow',
        )

    def record_function_run(self, *, function_id: str, outcome: str) -> None:
        self.function_runs.labels(function_id=function_id, outcome=outcome).inc()

    def record_kafka_message(self, *, topic: str, result: str) -> None:
        self.kafka_messages_processed.labels(topic=topic, result=result).inc()

    def record_email(self, *, kind: str, result: str, count: int = 1) -> None:
        if count:
            self.emails_sent.labels(kind=kind, result=result).inc(count)

    def record_booking_expired(self, *, seats_released: int) -> None:
        self.bookings_expired.inc()
        self.seats_released.inc(seats_released)


# Global metrics instance
metrics = BookingMetrics()
