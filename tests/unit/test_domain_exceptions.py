"""Domain exceptions and their HTTP status mapping."""

from app.core.exception_handlers import status_for_exception
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    BookingException,
    CoachHubException,
    ConflictException,
    FeatureDisabledException,
    GoneException,
    OrganizationRequiredException,
    PaymentRequiredActionException,
    ResourceNotFoundException,
    ServiceNotConfiguredException,
    ValidationException,
)


def test_to_dict_includes_details_only_when_present():
    assert ValidationException("bad", field="title").to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "bad",
        "details": {"field": "title"},
    }
    assert AuthenticationException().to_dict() == {
        "error": "AUTHENTICATION_ERROR",
        "message": "Unauthorized",
    }


def test_error_code_defaults_to_class_name():
    assert CoachHubException("boom").error_code == "CoachHubException"


def test_not_found_message_and_details():
    exc = ResourceNotFoundException("intake_call_config", "cfg1")
    assert exc.message == "Intake call config not found"
    assert exc.details == {"resource_type": "intake_call_config", "resource_id": "cfg1"}


def test_authorization_message_names_the_action():
    exc = AuthorizationException("program", "update")
    assert exc.message == "Forbidden: cannot update program"
    assert exc.error_code == "PERMISSION_DENIED"


def test_payment_requires_action_carries_client_secret():
    exc = PaymentRequiredActionException(payment_intent_id="pi_1", client_secret="sec")
    assert exc.details == {
        "requires_action": True,
        "payment_intent_id": "pi_1",
        "client_secret": "sec",
    }


def test_status_mapping():
    assert status_for_exception(ValidationException("x")) == 400
    assert status_for_exception(AuthenticationException()) == 401
    assert status_for_exception(AuthorizationException()) == 403
    assert status_for_exception(OrganizationRequiredException()) == 400
    assert status_for_exception(ResourceNotFoundException("task", "t1")) == 404
    assert status_for_exception(ConflictException("dup")) == 409
    assert status_for_exception(ConflictException("full", "COHORT_FULL")) == 409
    assert status_for_exception(GoneException("gone", "EVENT_CANCELLED")) == 410
    assert status_for_exception(ServiceNotConfiguredException("Stripe")) == 503
    assert status_for_exception(FeatureDisabledException("feed")) == 403
    assert status_for_exception(PaymentRequiredActionException()) == 400
    assert status_for_exception(CoachHubException("other", "SOMETHING_ELSE")) == 400


def test_booking_codes_map_to_their_statuses():
    assert status_for_exception(BookingException("TOKEN_INVALID", "x")) == 404
    assert status_for_exception(BookingException("TOKEN_EXPIRED", "x")) == 410
    assert status_for_exception(BookingException("PAST_DEADLINE", "x")) == 403
    assert status_for_exception(BookingException("SLOT_UNAVAILABLE", "x")) == 409
