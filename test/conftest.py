"""
Test Configuration

Architecture:
- Unit tests mock every port (repos, e-mail sender, identity provider), so no
  PostgreSQL, Kafka, SMTP or Clerk is needed
- The durable runtime is exercised against an in-memory run repo
  (test/platform/workflow/conftest.py)
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    os.environ['POSTGRES_DB'] = 'movie_ticket_booking_test_db'
    os.environ['KAFKA_CONSUMER_ENABLED'] = 'false'
    os.environ['WORKFLOW_ENABLED'] = 'false'
    os.environ.setdefault('CLERK_JWKS_URL', 'https://clerk.test/.well-known/jwks.json')
    os.environ.setdefault('FRONTEND_URL', 'http://localhost:5173')

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 7, 1, 8, 0, tzinfo=timezone.utc)
