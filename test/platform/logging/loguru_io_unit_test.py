import pytest

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.logging.loguru_io_config import call_depth_var, function_run_var


@pytest.mark.unit
class TestLoggerIO:
    @pytest.mark.asyncio
    async def test_async_return_value_passes_through(self):
        @Logger.io
        async def lookup(booking_id: str) -> dict:
            return {'bookingId': booking_id}

        assert await lookup('booking-1') == {'bookingId': 'booking-1'}
        assert call_depth_var.get() == 0

    def test_exception_is_reraised_and_marked_once(self):
        @Logger.io
        def load() -> None:
            raise NotFoundError('Booking not found')

        with pytest.raises(NotFoundError) as exc_info:
            load()

        assert getattr(exc_info.value, '_io_logged') is True
        assert call_depth_var.get() == 0

    def test_reraise_false_swallows_into_none(self):
        @Logger.io(reraise=False)
        def explode() -> int:
            raise RuntimeError('boom')

        assert explode() is None

    def test_secret_keywords_are_masked(self):
        masked = Logger.io().scrub({'smtp_pass': 'hunter2', 'to': 'ada@example.com'})

        assert masked == {'smtp_pass': '********', 'to': 'ada@example.com'}


@pytest.mark.unit
class TestRunContext:
    def test_run_id_is_bound_inside_block_only(self):
        with Logger.run_context('release-seats-delete-booking:evt-1'):
            assert function_run_var.get() == 'release-seats-delete-booking:evt-1'

        assert function_run_var.get() == '-'
