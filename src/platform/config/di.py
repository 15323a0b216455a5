"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from datetime import timedelta

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.db_setting import Database
from src.platform.workflow.cron_scheduler import CronScheduler
from src.platform.workflow.function_executor import FunctionExecutor
from src.platform.workflow.function_run_repo_impl import FunctionRunRepoImpl
from src.platform.workflow.run_poller import DurableRunPoller
from src.service.cinema.app.command.release_seats_and_delete_booking_use_case import (
    ReleaseSeatsAndDeleteBookingUseCase,
)
from src.service.cinema.app.command.send_booking_confirmation_email_use_case import (
    SendBookingConfirmationEmailUseCase,
)
from src.service.cinema.app.command.send_new_show_notifications_use_case import (
    SendNewShowNotificationsUseCase,
)
from src.service.cinema.app.command.send_show_reminders_use_case import SendShowRemindersUseCase
from src.service.cinema.app.command.sync_user_creation_use_case import SyncUserCreationUseCase
from src.service.cinema.app.command.sync_user_deletion_use_case import SyncUserDeletionUseCase
from src.service.cinema.app.command.sync_user_update_use_case import SyncUserUpdateUseCase
from src.service.cinema.driven_adapter.email.smtp_email_sender import SmtpEmailSender
from src.service.cinema.driven_adapter.identity.clerk_identity_provider import (
    ClerkIdentityProvider,
)
from src.service.cinema.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema.driven_adapter.repo.booking_query_repo_impl import BookingQueryRepoImpl
from src.service.cinema.driven_adapter.repo.movie_query_repo_impl import MovieQueryRepoImpl
from src.service.cinema.driven_adapter.repo.show_command_repo_impl import ShowCommandRepoImpl
from src.service.cinema.driven_adapter.repo.show_query_repo_impl import ShowQueryRepoImpl
from src.service.cinema.driven_adapter.repo.user_command_repo_impl import UserCommandRepoImpl
from src.service.cinema.driven_adapter.repo.user_query_repo_impl import UserQueryRepoImpl
from src.service.cinema.driving_adapter.http_controller.auth.clerk_auth import ClerkAuth
from src.service.cinema.driving_adapter.workflow.cinema_functions import (
    CinemaFunctions,
    build_function_registry,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from config_service)
    database = providers.Singleton(Database)

    # Repositories (stateless - use session_factory per call)
    user_command_repo = providers.Singleton(
        UserCommandRepoImpl, session_factory=database.provided.session
    )
    user_query_repo = providers.Singleton(
        UserQueryRepoImpl, session_factory=database.provided.session
    )
    booking_command_repo = providers.Singleton(
        BookingCommandRepoImpl, session_factory=database.provided.session
    )
    booking_query_repo = providers.Singleton(
        BookingQueryRepoImpl, session_factory=database.provided.session
    )
    show_command_repo = providers.Singleton(
        ShowCommandRepoImpl, session_factory=database.provided.session
    )
    show_query_repo = providers.Singleton(
        ShowQueryRepoImpl, session_factory=database.provided.session
    )
    movie_query_repo = providers.Singleton(
        MovieQueryRepoImpl, session_factory=database.provided.session
    )

    # External services
    email_sender = providers.Singleton(
        SmtpEmailSender,
        host=config_service.provided.SMTP_HOST,
        port=config_service.provided.SMTP_PORT,
        username=config_service.provided.SMTP_USER,
        password=config_service.provided.SMTP_PASS.get_secret_value.call(),
        sender=config_service.provided.SENDER_EMAIL,
    )
    identity_provider = providers.Singleton(
        ClerkIdentityProvider,
        api_url=config_service.provided.CLERK_API_URL,
        secret_key=config_service.provided.CLERK_SECRET_KEY.get_secret_value.call(),
        timeout_seconds=config_service.provided.CLERK_HTTP_TIMEOUT_SECONDS,
    )

    # Auth service
    clerk_auth = providers.Singleton(
        ClerkAuth,
        jwks_url=config_service.provided.CLERK_JWKS_URL,
        authorized_parties=config_service.provided.CLERK_AUTHORIZED_PARTIES,
    )

    # Event-triggered use cases
    sync_user_creation_use_case = providers.Singleton(
        SyncUserCreationUseCase, user_command_repo=user_command_repo
    )
    sync_user_update_use_case = providers.Singleton(
        SyncUserUpdateUseCase, user_command_repo=user_command_repo
    )
    sync_user_deletion_use_case = providers.Singleton(
        SyncUserDeletionUseCase, user_command_repo=user_command_repo
    )
    release_seats_and_delete_booking_use_case = providers.Singleton(
        ReleaseSeatsAndDeleteBookingUseCase,
        booking_query_repo=booking_query_repo,
        booking_command_repo=booking_command_repo,
        show_query_repo=show_query_repo,
        show_command_repo=show_command_repo,
        payment_window=providers.Factory(
            timedelta, minutes=config_service.provided.PAYMENT_WINDOW_MINUTES
        ),
    )
    send_booking_confirmation_email_use_case = providers.Singleton(
        SendBookingConfirmationEmailUseCase,
        booking_query_repo=booking_query_repo,
        user_query_repo=user_query_repo,
        email_sender=email_sender,
        frontend_url=config_service.provided.FRONTEND_URL,
    )
    send_show_reminders_use_case = providers.Singleton(
        SendShowRemindersUseCase,
        show_query_repo=show_query_repo,
        user_query_repo=user_query_repo,
        email_sender=email_sender,
        lead_time=providers.Factory(
            timedelta, hours=config_service.provided.REMINDER_INTERVAL_HOURS
        ),
        window=providers.Factory(
            timedelta, minutes=config_service.provided.REMINDER_WINDOW_MINUTES
        ),
    )
    send_new_show_notifications_use_case = providers.Singleton(
        SendNewShowNotificationsUseCase,
        user_query_repo=user_query_repo,
        email_sender=email_sender,
        frontend_url=config_service.provided.FRONTEND_URL,
    )

    # Durable-run runtime
    cinema_functions = providers.Singleton(
        CinemaFunctions,
        sync_user_creation_use_case=sync_user_creation_use_case,
        sync_user_update_use_case=sync_user_update_use_case,
        sync_user_deletion_use_case=sync_user_deletion_use_case,
        release_seats_and_delete_booking_use_case=release_seats_and_delete_booking_use_case,
        send_booking_confirmation_email_use_case=send_booking_confirmation_email_use_case,
        send_show_reminders_use_case=send_show_reminders_use_case,
        send_new_show_notifications_use_case=send_new_show_notifications_use_case,
        reminder_interval_hours=config_service.provided.REMINDER_INTERVAL_HOURS,
    )
    function_registry = providers.Singleton(
        build_function_registry, cinema_functions=cinema_functions
    )
    function_run_repo = providers.Singleton(
        FunctionRunRepoImpl, session_factory=database.provided.session
    )
    function_executor = providers.Singleton(
        FunctionExecutor,
        registry=function_registry,
        run_repo=function_run_repo,
        max_attempts=config_service.provided.WORKFLOW_MAX_ATTEMPTS,
        retry_backoff_seconds=config_service.provided.WORKFLOW_RETRY_BACKOFF_SECONDS,
        lease_seconds=config_service.provided.WORKFLOW_LEASE_SECONDS,
    )
    run_poller = providers.Singleton(
        DurableRunPoller,
        run_repo=function_run_repo,
        executor=function_executor,
        poll_interval_seconds=config_service.provided.WORKFLOW_POLL_INTERVAL_SECONDS,
        batch_size=config_service.provided.WORKFLOW_POLL_BATCH_SIZE,
        lease_seconds=config_service.provided.WORKFLOW_LEASE_SECONDS,
    )
    cron_scheduler = providers.Singleton(
        CronScheduler,
        registry=function_registry,
        run_repo=function_run_repo,
        executor=function_executor,
        lease_seconds=config_service.provided.WORKFLOW_LEASE_SECONDS,
    )


container = Container()
