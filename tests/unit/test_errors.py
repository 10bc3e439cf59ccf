"""Unit tests for the provisioner error hierarchy."""

from kinde_provisioner.errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    ProvisionerError,
)


class TestApiError:
    """Test ApiError formatting and conflict detection."""

    def test_message_includes_method_path_and_status(self):
        error = ApiError("POST", "/roles", status=500, body="internal")

        assert str(error) == "POST /roles -> HTTP 500: internal"
        assert error.status == 500
        assert error.body == "internal"
        assert error.fatal is False

    def test_409_is_conflict(self):
        assert ApiError("POST", "/applications", status=409).is_conflict

    def test_existence_message_is_conflict(self):
        error = ApiError(
            "POST",
            "/applications",
            status=400,
            body='{"errors":[{"code":"KEY_ALREADY_EXISTS","message":"Key already exists"}]}',
        )

        assert error.is_conflict

    def test_other_client_error_is_not_conflict(self):
        assert not ApiError("POST", "/roles", status=400, body="invalid key").is_conflict

    def test_duplicate_parameter_is_not_conflict(self):
        error = ApiError("POST", "/applications", status=400, body="duplicate parameter: name")

        assert not error.is_conflict

    def test_existence_message_on_server_error_is_not_conflict(self):
        error = ApiError("POST", "/roles", status=500, body="lock already exists, retry later")

        assert not error.is_conflict

    def test_transport_failure_has_no_status(self):
        cause = ConnectionError("connection refused")
        error = ApiError("GET", "/applications/app1", cause=cause)

        assert error.status is None
        assert not error.is_conflict
        assert "no response" in str(error)
        assert "connection refused" in str(error)

    def test_body_preview_truncates(self):
        error = ApiError("POST", "/apis", status=500, body="x" * 5000)

        preview = error.body_preview()
        assert preview is not None
        assert preview.endswith("...<truncated>")
        assert len(preview) < 5000


class TestFatalErrors:
    """Test fatal configuration and authentication errors."""

    def test_configuration_error_is_fatal_with_action(self):
        error = ConfigurationError("missing", field="application.key")

        assert isinstance(error, ProvisionerError)
        assert error.fatal is True
        assert "Configuration error in 'application.key': missing" in str(error)
        assert "Action required:" in str(error)

    def test_authentication_error_keeps_status_and_body(self):
        error = AuthenticationError(
            "Token error", status_code=401, response_body='{"error":"invalid_client"}'
        )

        assert error.fatal is True
        assert error.category == "authentication"
        assert error.status_code == 401
        assert error.response_body == '{"error":"invalid_client"}'
        assert str(error).startswith("HTTP 401: Token error")
