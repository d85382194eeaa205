import pytest
from rest_framework import exceptions as drf_exceptions

from modules.core.exceptions import (
    AccessDenied,
    Conflict,
    NotFound,
    TransactionFailure,
    ValidationError,
    api_exception_handler,
)
from modules.orders.exceptions import InvalidTransition

pytestmark = pytest.mark.unit


class TestDomainErrorRendering:
    @pytest.mark.parametrize(
        ("exc", "status_code", "error_type"),
        [
            (ValidationError("bad"), 400, "validation_error"),
            (NotFound("missing"), 404, "client_error"),
            (AccessDenied("no"), 403, "client_error"),
            (Conflict("race"), 409, "client_error"),
            (InvalidTransition("New", "Completed"), 400, "client_error"),
            (TransactionFailure(), 500, "server_error"),
        ],
    )
    def test_status_and_type(self, exc, status_code, error_type):
        response = api_exception_handler(exc, {})
        assert response.status_code == status_code
        assert response.data["type"] == error_type
        assert response.data["errors"][0]["code"] == exc.code

    def test_details_are_rendered_as_errors(self):
        exc = ValidationError(
            "bad", details=[{"code": "required", "detail": "Branch is required.", "attr": "branch"}]
        )
        response = api_exception_handler(exc, {})
        assert response.data["errors"] == exc.details

    def test_transaction_failure_message_is_generic(self):
        response = api_exception_handler(TransactionFailure(), {})
        assert response.data["errors"][0]["detail"] == "The operation could not be completed."

    def test_invalid_transition_message_names_both_statuses(self):
        response = api_exception_handler(InvalidTransition("Picked", "Pending"), {})
        detail = response.data["errors"][0]["detail"]
        assert "Picked" in detail and "Pending" in detail


class TestDrfErrorRendering:
    def test_serializer_errors_are_flattened_with_attr(self):
        exc = drf_exceptions.ValidationError(
            {"items": [{"quantity": ["Ensure this value is greater than or equal to 1."]}]}
        )
        response = api_exception_handler(exc, {})
        assert response.status_code == 400
        assert response.data["type"] == "client_error"
        assert response.data["errors"][0]["attr"] == "items.0.quantity"

    def test_not_authenticated(self):
        response = api_exception_handler(drf_exceptions.NotAuthenticated(), {})
        assert response.status_code == 401
        assert response.data["errors"][0]["code"] == "not_authenticated"

    def test_unknown_exception_is_left_to_django(self):
        assert api_exception_handler(RuntimeError("boom"), {}) is None
