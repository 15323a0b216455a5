from unittest.mock import AsyncMock, patch

import pytest

from script.publish_app_event import parse_args, publish


@pytest.mark.unit
class TestPublishAppEventScript:
    def test_data_is_parsed_as_json_object(self):
        args = parse_args(['app/checkpayment', '{"bookingId": "b-1"}', '--id', 'evt-1'])

        assert args.name == 'app/checkpayment'
        assert args.data == {'bookingId': 'b-1'}
        assert args.event_id == 'evt-1'
        assert args.key is None

    def test_unknown_event_name_is_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(['app/unknown'])

    def test_non_object_data_is_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(['app/show.added', '[1, 2]'])

    @pytest.mark.asyncio
    async def test_publishes_and_closes_producer(self):
        # Arrange
        args = parse_args(['app/show.added', '{"movieTitle": "Heat", "movieId": "949"}'])

        # Act
        with (
            patch('script.publish_app_event.publish_app_event', AsyncMock()) as publish_event,
            patch('script.publish_app_event.close_producer', AsyncMock()) as close,
        ):
            await publish(args)

        # Assert
        publish_event.assert_awaited_once_with(
            name='app/show.added',
            data={'movieTitle': 'Heat', 'movieId': '949'},
            event_id=None,
            key=None,
        )
        close.assert_awaited_once()
