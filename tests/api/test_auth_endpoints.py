"""
Integration tests for Auth API endpoints.

Tests registration, phone verification, login and token refresh through
the HTTP layer, on real services backed by temporary files.
"""

import pytest
from unittest.mock import patch

from food_delivery.auth import StaffRole


def register(api_client, services, **overrides):
    body = {
        "email": "new@example.com",
        "password": "SecurePassword123!",
        "phone": "+5511988887777",
        "firstName": "New",
        "lastName": "User",
    }
    body.update(overrides)
    with patch("api.deps.get_services", return_value=services):
        return api_client.post("/api/auth/register", json=body)


class TestAuthRegistration:
    """Tests for user registration endpoints."""

    @pytest.mark.api
    def test_register_success(self, api_client, services):
        """Test registration returns the user id and asks for verification."""
        response = register(api_client, services)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["data"]["requiresVerification"] is True
        assert data["data"]["userId"]
        assert "tokens" not in data["data"]
        assert services.sms.sent[-1][0] == "+5511988887777"

    @pytest.mark.api
    def test_register_duplicate_email(self, api_client, services):
        """Test registration with existing email fails with 409."""
        register(api_client, services)
        response = register(api_client, services, phone="+5511977776666")

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "error": {"message": "User with this email or phone already exists"}
        }

    @pytest.mark.api
    def test_register_missing_phone(self, api_client, services):
        """Test a body missing a required field is a 400 in the error shape."""
        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/register",
                json={"email": "new@example.com", "password": "SecurePassword123!"}
            )

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert "phone" in data["error"]["message"]

    @pytest.mark.api
    def test_register_short_password(self, api_client, services):
        response = register(api_client, services, password="123")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Password must be at least 6 characters"


class TestPhoneVerification:
    """Tests for /verify-otp and /resend-otp."""

    @pytest.mark.api
    def test_verify_otp_success(self, api_client, services):
        user_id = register(api_client, services).json()["data"]["userId"]

        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/verify-otp",
                json={"userId": user_id, "code": services.sms.last_code}
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == user_id
        assert data["user"]["isPhoneVerified"] is True
        assert "passwordHash" not in data["user"]
        assert data["tokens"]["accessToken"]
        assert data["tokens"]["refreshToken"]
        assert data["tokens"]["tokenType"] == "bearer"
        assert data["tokens"]["expiresIn"] == 900

    @pytest.mark.api
    def test_verify_otp_wrong_code(self, api_client, services):
        user_id = register(api_client, services).json()["data"]["userId"]
        wrong = "000000" if services.sms.last_code != "000000" else "111111"

        with patch("api.deps.get_services", return_value=services):
            response = api_client.post("/api/auth/verify-otp", json={"userId": user_id, "code": wrong})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid OTP code"

    @pytest.mark.api
    def test_expired_code_then_resend(self, api_client, services, clock):
        """Test the expiry and resend flow end to end."""
        user_id = register(api_client, services).json()["data"]["userId"]
        first_code = services.sms.last_code
        clock.advance(minutes=11)

        with patch("api.deps.get_services", return_value=services):
            expired = api_client.post("/api/auth/verify-otp", json={"userId": user_id, "code": first_code})
            resent = api_client.post("/api/auth/resend-otp", json={"userId": user_id})
            verified = api_client.post(
                "/api/auth/verify-otp",
                json={"userId": user_id, "code": services.sms.last_code}
            )

        assert expired.status_code == 400
        assert expired.json()["error"]["message"] == "OTP code has expired"
        assert resent.status_code == 200
        assert resent.json()["success"] is True
        assert verified.status_code == 200

    @pytest.mark.api
    def test_resend_unknown_user(self, api_client, services):
        with patch("api.deps.get_services", return_value=services):
            response = api_client.post("/api/auth/resend-otp", json={"userId": "missing"})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "User not found"

    @pytest.mark.api
    def test_resend_already_verified(self, api_client, services, sample_user):
        with patch("api.deps.get_services", return_value=services):
            response = api_client.post("/api/auth/resend-otp", json={"userId": sample_user.user_id})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Phone already verified"


class TestAuthLogin:
    """Tests for login endpoints."""

    @pytest.mark.api
    def test_login_success(self, api_client, services, sample_user, test_config):
        """Test successful login."""
        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/login",
                json={"email": test_config["test_email"], "password": test_config["test_password"]}
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == test_config["test_email"]
        assert data["user"]["firstName"] == "Test"
        assert data["tokens"]["accessToken"]

    @pytest.mark.api
    def test_login_unverified(self, api_client, services):
        user_id = register(api_client, services).json()["data"]["userId"]

        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/login",
                json={"email": "new@example.com", "password": "SecurePassword123!"}
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {"userId": user_id, "requiresVerification": True}

    @pytest.mark.api
    def test_login_failures_are_indistinguishable(self, api_client, services, sample_user, test_config):
        """Test unknown email and wrong password give identical responses."""
        with patch("api.deps.get_services", return_value=services):
            unknown = api_client.post(
                "/api/auth/login",
                json={"email": "nobody@example.com", "password": "whatever123"}
            )
            wrong = api_client.post(
                "/api/auth/login",
                json={"email": test_config["test_email"], "password": "WrongPassword"}
            )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {
            "success": False,
            "error": {"message": "Invalid email or password"}
        }


class TestStaffLogin:
    """Tests for staff login endpoints."""

    @pytest.mark.api
    def test_staff_login_success(self, api_client, services, make_staff, test_config):
        make_staff(StaffRole.CHEF, email="chef@example.com", location_id="loc-1")

        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/staff/login",
                json={"email": "chef@example.com", "password": test_config["staff_password"]}
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["staff"]["role"] == "CHEF"
        assert data["staff"]["locationId"] == "loc-1"
        assert "passwordHash" not in data["staff"]
        assert data["tokens"]["accessToken"]

    @pytest.mark.api
    def test_deactivated_staff_login(self, api_client, services, super_admin, staff_store, test_config):
        """Test a deactivated staff member is refused with 403."""
        staff_store.deactivate(super_admin.staff_id)

        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/staff/login",
                json={"email": test_config["staff_email"], "password": test_config["staff_password"]}
            )

        assert response.status_code == 403
        assert response.json()["success"] is False


class TestTokenRefresh:
    """Tests for token refresh endpoints."""

    @pytest.mark.api
    def test_refresh_success(self, api_client, services, valid_refresh_token, jwt_handler):
        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/refresh-token",
                json={"refreshToken": valid_refresh_token}
            )

        assert response.status_code == 200
        access_token = response.json()["data"]["accessToken"]
        assert jwt_handler.verify(access_token).user_id == "test-user-id-123"

    @pytest.mark.api
    def test_staff_refresh_success(self, api_client, services, jwt_handler, staff_payload):
        refresh_token = jwt_handler.issue_refresh_token(staff_payload)

        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/staff/refresh-token",
                json={"refreshToken": refresh_token}
            )

        assert response.status_code == 200
        payload = jwt_handler.verify(response.json()["data"]["accessToken"])
        assert payload.role == "SUPER_ADMIN"

    @pytest.mark.api
    def test_refresh_with_access_token(self, api_client, services, valid_access_token):
        """Test an access token is not accepted as a refresh token."""
        with patch("api.deps.get_services", return_value=services):
            response = api_client.post(
                "/api/auth/refresh-token",
                json={"refreshToken": valid_access_token}
            )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid refresh token"
