"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing:
- JWT authentication for customers and staff
- Temporary JSON stores and OTP ledger with a controllable clock
- Services wired on temporary files
- API client
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before imports
os.environ["JWT_SECRET"] = "test_jwt_access_secret_for_testing_only"
os.environ["JWT_REFRESH_SECRET"] = "test_jwt_refresh_secret_for_testing_only"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="food-delivery-tests-")

from food_delivery.config import Config, TokenPolicy, SecurityConfig
from food_delivery.auth import (
    JWTHandler,
    TokenPayload,
    PasswordHandler,
    UserStore,
    User,
    StaffStore,
    Staff,
    StaffRole,
    OTPLedger,
)
from food_delivery.services import AuthService, StaffService, ProfileService


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(scope="session")
def test_config():
    """Test configuration values."""
    return {
        "jwt_secret": "test_jwt_access_secret_for_testing_only",
        "jwt_refresh_secret": "test_jwt_refresh_secret_for_testing_only",
        "test_email": "customer@example.com",
        "test_phone": "+5511999999999",
        "test_password": "TestPassword123!",
        "staff_email": "admin@example.com",
        "staff_password": "StaffPassword123!",
    }


@pytest.fixture
def token_policy(test_config) -> TokenPolicy:
    """Token policy with test secrets and default lifetimes."""
    return TokenPolicy(
        access_secret=test_config["jwt_secret"],
        refresh_secret=test_config["jwt_refresh_secret"],
        access_expires_in=900,
        refresh_expires_in=7 * 24 * 3600
    )


# =============================================================================
# Clock and SMS doubles
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0):
        self.now += timedelta(minutes=minutes, seconds=seconds)


class RecordingSMS:
    """SMS service double that keeps every dispatched code."""

    def __init__(self):
        self.sent = []
        self.succeed = True

    def is_configured(self) -> bool:
        return True

    def send_otp(self, phone: str, code: str) -> bool:
        self.sent.append((phone, code))
        return self.succeed

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock for OTP expiry."""
    return FakeClock(datetime(2026, 1, 10, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def sms() -> RecordingSMS:
    """SMS double capturing codes."""
    return RecordingSMS()


# =============================================================================
# JWT Fixtures
# =============================================================================

@pytest.fixture
def jwt_handler(token_policy) -> JWTHandler:
    """Create a JWTHandler with test secrets."""
    return JWTHandler(token_policy)


@pytest.fixture
def user_payload() -> TokenPayload:
    return TokenPayload.for_user("test-user-id-123", "customer@example.com")


@pytest.fixture
def staff_payload() -> TokenPayload:
    return TokenPayload.for_staff("test-staff-id-123", "admin@example.com", StaffRole.SUPER_ADMIN)


@pytest.fixture
def valid_access_token(jwt_handler, user_payload) -> str:
    """Create a valid customer access token."""
    return jwt_handler.issue_access_token(user_payload)


@pytest.fixture
def valid_refresh_token(jwt_handler, user_payload) -> str:
    """Create a valid customer refresh token."""
    return jwt_handler.issue_refresh_token(user_payload)


@pytest.fixture
def expired_token(jwt_handler, user_payload) -> str:
    """Create an expired access token."""
    return jwt_handler.issue_access_token(user_payload, expires_in=-1)


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def password_handler() -> PasswordHandler:
    """Create a PasswordHandler with the minimum work factor."""
    return PasswordHandler(rounds=4)


@pytest.fixture
def user_store(temp_data_dir, password_handler) -> UserStore:
    """Create a UserStore with temporary file."""
    return UserStore(temp_data_dir / "users.json", password_handler)


@pytest.fixture
def staff_store(temp_data_dir, password_handler) -> StaffStore:
    """Create a StaffStore with temporary file."""
    return StaffStore(temp_data_dir / "staff.json", password_handler)


@pytest.fixture
def otp_ledger(temp_data_dir, clock) -> OTPLedger:
    """Create an OTPLedger with temporary file and fake clock."""
    return OTPLedger(temp_data_dir / "otps.json", clock=clock)


@pytest.fixture
def sample_user(user_store, test_config) -> User:
    """Create a verified customer in the store."""
    return user_store.create_user(
        email=test_config["test_email"],
        password=test_config["test_password"],
        phone=test_config["test_phone"],
        first_name="Test",
        last_name="Customer",
        is_phone_verified=True
    )


@pytest.fixture
def make_staff(staff_store, test_config):
    """Factory creating staff members with a given role."""
    counter = {"n": 0}

    def _make(role: StaffRole = StaffRole.SUPER_ADMIN, **kwargs) -> Staff:
        counter["n"] += 1
        defaults = {
            "email": f"staff{counter['n']}@example.com",
            "password": test_config["staff_password"],
            "first_name": "Staff",
            "last_name": str(counter["n"]),
        }
        defaults.update(kwargs)
        return staff_store.create_staff(role=role, **defaults)

    return _make


@pytest.fixture
def super_admin(make_staff, test_config) -> Staff:
    """Create a SUPER_ADMIN staff member."""
    return make_staff(StaffRole.SUPER_ADMIN, email=test_config["staff_email"])


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def auth_service(jwt_handler, user_store, staff_store, otp_ledger, sms, password_handler) -> AuthService:
    """AuthService on temporary stores."""
    return AuthService(jwt_handler, user_store, staff_store, otp_ledger, sms, password_handler)


@pytest.fixture
def staff_service(staff_store) -> StaffService:
    return StaffService(staff_store)


@pytest.fixture
def profile_service(user_store) -> ProfileService:
    return ProfileService(user_store)


@pytest.fixture
def services(
    token_policy,
    temp_data_dir,
    jwt_handler,
    password_handler,
    user_store,
    staff_store,
    otp_ledger,
    sms,
    auth_service,
    staff_service,
    profile_service
):
    """Real services container on temporary files, for API tests."""
    from api.deps import Services

    return Services(
        config=Config(
            tokens=token_policy,
            security=SecurityConfig(bcrypt_rounds=4, password_min_length=6),
            environment="test",
            data_dir=temp_data_dir
        ),
        jwt=jwt_handler,
        passwords=password_handler,
        users=user_store,
        staff=staff_store,
        otps=otp_ledger,
        sms=sms,
        auth=auth_service,
        staff_admin=staff_service,
        profiles=profile_service
    )


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_app():
    """Create FastAPI app for testing."""
    from api.main import app
    return app


@pytest.fixture
def api_client(api_app) -> TestClient:
    """Create synchronous test client for API."""
    return TestClient(api_app)


def bearer(token: str) -> dict:
    """Authorization header for a token."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff_headers(jwt_handler):
    """Factory for staff Authorization headers."""
    def _headers(staff: Staff) -> dict:
        payload = TokenPayload.for_staff(staff.staff_id, staff.email, staff.role)
        return bearer(jwt_handler.issue_access_token(payload))
    return _headers


@pytest.fixture
def user_headers(jwt_handler):
    """Factory for customer Authorization headers."""
    def _headers(user: User) -> dict:
        payload = TokenPayload.for_user(user.user_id, user.email)
        return bearer(jwt_handler.issue_access_token(payload))
    return _headers


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as API endpoint test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
