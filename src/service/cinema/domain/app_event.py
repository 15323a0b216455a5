from enum import StrEnum


class AppEventName(StrEnum):
    """Event names consumed by the durable functions."""

    CLERK_USER_CREATED = 'clerk/user.created'
    CLERK_USER_UPDATED = 'clerk/user.updated'
    CLERK_USER_DELETED = 'clerk/user.deleted'
    CHECK_PAYMENT = 'app/checkpayment'  # {bookingId}
    SHOW_BOOKED = 'app/show.booked'  # {bookingId}
    SHOW_ADDED = 'app/show.added'  # {movieTitle, movieId}


class FunctionId(StrEnum):
    SYNC_USER_CREATION = 'sync-user-from-clerk'
    SYNC_USER_UPDATE = 'update-user-from-clerk'
    SYNC_USER_DELETION = 'delete-user-with-clerk'
    RELEASE_SEATS_DELETE_BOOKING = 'release-seats-delete-booking'
    SEND_BOOKING_CONFIRMATION_EMAIL = 'send-booking-confirmation-email'
    SEND_SHOW_REMINDERS = 'send-show-reminders'
    SEND_NEW_SHOW_NOTIFICATIONS = 'send-new-show-notifications'
