"""
Unit tests for mapping domain failures onto HTTP errors.
"""

import pytest

from studytimer.middleware.error_handling import (
    DatabaseServiceError,
    NotFoundError,
    PremiumRequiredError,
    ServiceError,
    ValidationError,
    raise_for_failure,
    service_error_for,
)
from studytimer.models.result import DomainError, Failure, Success


class TestServiceErrorFor:
    @pytest.mark.parametrize(
        "error, expected_class, status_code",
        [
            (DomainError.not_found("Task 1 not found"), NotFoundError, 404),
            (DomainError.validation("bad", field="name"), ValidationError, 422),
            (DomainError.premium_required("auto_loop"), PremiumRequiredError, 402),
            (DomainError.database("Failed", cause=RuntimeError("x")), DatabaseServiceError, 503),
            (DomainError.unknown("Failed"), ServiceError, 500),
        ],
    )
    def test_kind_maps_to_status(self, error, expected_class, status_code):
        service_error = service_error_for(error)

        assert type(service_error) is expected_class
        assert service_error.status_code == status_code
        assert service_error.message == error.message

    def test_details_name_field_and_hide_cause(self):
        service_error = service_error_for(
            DomainError.validation("Repeat schedule needs at least one weekday", field="repeat_days")
        )

        assert service_error.details["field"] == "repeat_days"
        assert "cause" not in service_error_for(
            DomainError.database("Failed", cause=RuntimeError("secret"))
        ).details


class TestRaiseForFailure:
    def test_success_returns_value(self):
        assert raise_for_failure(Success([1, 2])) == [1, 2]

    def test_failure_raises(self):
        with pytest.raises(NotFoundError):
            raise_for_failure(Failure(DomainError.not_found("Task 9 not found")))
