"""BillingService purchase, discount and Stripe webhook handling with mocked repos."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.billing import (
    DiscountCodeResult,
    InvoiceResult,
    PaymentIntentResult,
    SavedPaymentMethod,
    StripeCustomerResult,
)
from app.application.dtos.enrollment import EnrollmentResult
from app.application.dtos.organization import OrgSettingsResult
from app.application.dtos.program import ProgramResult
from app.application.use_cases.billing import BillingService
from app.domain.enums import DiscountType, EnrollmentStatus
from app.domain.exceptions import (
    ConflictException,
    PaymentRequiredActionException,
    ResourceNotFoundException,
    ValidationException,
)

PROGRAM = ProgramResult(
    id="prog1", organization_id="org1", name="Group Accelerator", slug="group", price_in_cents=19900
)
ENROLLMENT = EnrollmentResult(
    id="enr1",
    user_id="u1",
    program_id="prog1",
    organization_id="org1",
    status=EnrollmentStatus.UPCOMING,
    start_date="2026-11-02",
)
CUSTOMER = StripeCustomerResult(
    user_id="u1", organization_id="org1", connected_account_id="acct_1", customer_id="cus_1"
)


def _card(pm_id: str, fingerprint: str | None = "fp1") -> SavedPaymentMethod:
    return SavedPaymentMethod(
        id=pm_id, brand="visa", last4="4242", exp_month=12, exp_year=2030, fingerprint=fingerprint
    )


@pytest.fixture
def mocks():
    billing_repo = AsyncMock()
    billing_repo.get_customer = AsyncMock(return_value=CUSTOMER)
    billing_repo.get_discount_by_code = AsyncMock(return_value=None)
    billing_repo.count_discount_usages = AsyncMock(return_value=0)
    billing_repo.get_invoice_by_payment_intent = AsyncMock(return_value=None)
    org_repo = AsyncMock()
    org_repo.get_settings = AsyncMock(
        return_value=OrgSettingsResult(organization_id="org1", stripe_connect_account_id="acct_1")
    )
    program_repo = AsyncMock()
    program_repo.get_program = AsyncMock(return_value=PROGRAM)
    enrollment_repo = AsyncMock()
    enrollment_repo.get_by_payment_intent = AsyncMock(return_value=None)
    user_repo = AsyncMock()
    gateway = AsyncMock()
    gateway.construct_webhook_event = MagicMock()
    gateway.charge_saved_method = AsyncMock(
        return_value=PaymentIntentResult(id="pi_1", status="succeeded", amount=19900, currency="usd")
    )
    enrollment_service = AsyncMock()
    enrollment_service.find_open_enrollment = AsyncMock(return_value=None)
    enrollment_service.enroll = AsyncMock(return_value=ENROLLMENT)
    org_service = AsyncMock()
    return {
        "billing_repo": billing_repo,
        "org_repo": org_repo,
        "program_repo": program_repo,
        "enrollment_repo": enrollment_repo,
        "user_repo": user_repo,
        "gateway": gateway,
        "enrollment_service": enrollment_service,
        "org_service": org_service,
    }


@pytest.fixture
def service(mocks):
    return BillingService(**mocks)


def _discount(**overrides) -> DiscountCodeResult:
    data = {
        "id": "disc1",
        "organization_id": "org1",
        "code": "WELCOME20",
        "type": DiscountType.PERCENTAGE,
        "value": 20,
        **overrides,
    }
    return DiscountCodeResult(**data)


class TestChargeSavedMethod:
    async def test_charges_enrolls_and_invoices(self, service, mocks):
        result = await service.charge_saved_method("u1", "org1", "prog1", "pm_1")

        assert result == {"success": True, "enrollment": ENROLLMENT}
        args = mocks["gateway"].charge_saved_method.await_args.args
        assert args[:5] == ("acct_1", "cus_1", "pm_1", 19900, "usd")
        assert args[5]["type"] == "program_enrollment"
        enroll_kwargs = mocks["enrollment_service"].enroll.await_args.kwargs
        assert enroll_kwargs["payment_intent_id"] == "pi_1"
        assert enroll_kwargs["amount_paid"] == 19900
        invoice = mocks["billing_repo"].create_invoice.await_args.args[0]
        assert invoice["stripe_payment_intent_id"] == "pi_1"
        assert invoice["reference_name"] == "Group Accelerator"

    async def test_discount_lowers_the_charge_and_is_recorded(self, service, mocks):
        mocks["billing_repo"].get_discount_by_code.return_value = _discount()
        await service.charge_saved_method(
            "u1", "org1", "prog1", "pm_1", discount_code=" welcome20 "
        )
        assert mocks["gateway"].charge_saved_method.await_args.args[3] == 15920
        usage = mocks["billing_repo"].record_discount_usage.await_args.args
        assert usage[1] == "u1"
        assert usage[2] == {"program_id": "prog1", "enrollment_id": "enr1", "discount_amount": 3980}

    async def test_fully_discounted_purchase_is_free(self, service, mocks):
        mocks["billing_repo"].get_discount_by_code.return_value = _discount(
            type=DiscountType.FIXED, value=50000
        )
        result = await service.charge_saved_method(
            "u1", "org1", "prog1", "pm_1", discount_code="WELCOME20"
        )
        assert result["free"] is True
        mocks["gateway"].charge_saved_method.assert_not_awaited()

    async def test_already_enrolled(self, service, mocks):
        mocks["enrollment_service"].find_open_enrollment.return_value = ENROLLMENT
        with pytest.raises(ValidationException):
            await service.charge_saved_method("u1", "org1", "prog1", "pm_1")

    async def test_program_of_another_org(self, service):
        with pytest.raises(ResourceNotFoundException):
            await service.charge_saved_method("u1", "org2", "prog1", "pm_1")

    async def test_org_without_connected_account(self, service, mocks):
        mocks["org_repo"].get_settings.return_value = OrgSettingsResult(organization_id="org1")
        with pytest.raises(ValidationException, match="accept payments"):
            await service.charge_saved_method("u1", "org1", "prog1", "pm_1")

    async def test_authentication_required(self, service, mocks):
        mocks["gateway"].charge_saved_method.return_value = PaymentIntentResult(
            id="pi_2", status="requires_action", amount=19900, currency="usd", client_secret="s"
        )
        with pytest.raises(PaymentRequiredActionException) as exc_info:
            await service.charge_saved_method("u1", "org1", "prog1", "pm_1")
        assert exc_info.value.details["client_secret"] == "s"
        mocks["enrollment_service"].enroll.assert_not_awaited()

    async def test_no_customer_yet(self, service, mocks):
        mocks["billing_repo"].get_customer.return_value = None
        with pytest.raises(PaymentRequiredActionException):
            await service.charge_saved_method("u1", "org1", "prog1", "pm_1")


    async def test_concurrent_webhook_enrollment_counts_as_success(self, service, mocks):
        mocks["enrollment_service"].enroll.side_effect = ConflictException(
            "Already enrolled in this program", "ALREADY_ENROLLED"
        )
        mocks["enrollment_repo"].get_by_payment_intent.side_effect = [None, ENROLLMENT]

        result = await service.charge_saved_method("u1", "org1", "prog1", "pm_1")

        assert result == {"success": True, "enrollment": ENROLLMENT}
        mocks["billing_repo"].create_invoice.assert_awaited_once()
        mocks["billing_repo"].record_discount_usage.assert_not_awaited()

    async def test_enrollment_conflict_without_matching_intent_propagates(self, service, mocks):
        mocks["enrollment_service"].enroll.side_effect = ConflictException(
            "Already enrolled in this program", "ALREADY_ENROLLED"
        )
        with pytest.raises(ConflictException):
            await service.charge_saved_method("u1", "org1", "prog1", "pm_1")


class TestPaymentMethods:
    async def test_list_dedupes_by_fingerprint(self, service, mocks):
        mocks["gateway"].list_card_payment_methods.return_value = [
            _card("pm_1"),
            _card("pm_2"),
            _card("pm_3", fingerprint=None),
        ]
        methods = await service.list_payment_methods("u1", "org1")
        assert [m.id for m in methods] == ["pm_1", "pm_3"]

    async def test_same_card_twice_conflicts(self, service, mocks):
        mocks["gateway"].retrieve_payment_method.return_value = _card("pm_new")
        mocks["gateway"].list_card_payment_methods.return_value = [_card("pm_1")]
        with pytest.raises(ConflictException) as exc_info:
            await service.attach_payment_method("u1", "org1", "pm_new")
        assert exc_info.value.error_code == "DUPLICATE_PAYMENT_METHOD"

    async def test_attach_creates_customer_on_first_card(self, service, mocks):
        mocks["billing_repo"].get_customer.return_value = None
        mocks["user_repo"].get_by_id.return_value = MagicMock(
            email="ada@example.com", first_name="Ada", last_name="Lovelace"
        )
        mocks["gateway"].create_customer.return_value = "cus_new"
        mocks["gateway"].retrieve_payment_method.return_value = _card("pm_new")
        mocks["gateway"].list_card_payment_methods.return_value = []
        await service.attach_payment_method("u1", "org1", "pm_new")
        assert mocks["gateway"].create_customer.await_args.args[:3] == (
            "acct_1",
            "ada@example.com",
            "Ada Lovelace",
        )
        mocks["billing_repo"].save_customer.assert_awaited_once()
        mocks["gateway"].attach_payment_method.assert_awaited_once_with(
            "acct_1", "cus_new", "pm_new"
        )

    async def test_detach_unknown_card(self, service, mocks):
        mocks["gateway"].list_card_payment_methods.return_value = [_card("pm_1")]
        with pytest.raises(ResourceNotFoundException):
            await service.detach_payment_method("u1", "org1", "pm_other")


class TestStripeWebhook:
    async def test_payment_succeeded_completes_enrollment_once(self, service, mocks):
        mocks["gateway"].construct_webhook_event.return_value = {
            "type": "payment_intent.succeeded",
            "data": {
                "object": {
                    "id": "pi_1",
                    "amount_received": 19900,
                    "metadata": {"type": "program_enrollment", "user_id": "u1", "program_id": "prog1"},
                }
            },
        }
        mocks["enrollment_repo"].get_by_payment_intent.return_value = ENROLLMENT
        mocks["billing_repo"].get_invoice_by_payment_intent.return_value = object()

        result = await service.handle_stripe_webhook(b"{}", "sig")

        assert result == {"received": True, "type": "payment_intent.succeeded", "handled": True}
        mocks["enrollment_service"].enroll.assert_not_awaited()
        mocks["billing_repo"].create_invoice.assert_not_awaited()

    async def test_full_refund_marks_invoice(self, service, mocks):
        mocks["gateway"].construct_webhook_event.return_value = {
            "type": "charge.refunded",
            "data": {"object": {"payment_intent": "pi_1", "amount": 19900, "amount_refunded": 19900}},
        }
        mocks["billing_repo"].get_invoice_by_payment_intent.return_value = InvoiceResult(
            id="inv1",
            user_id="u1",
            organization_id="org1",
            payment_type="program_enrollment",
            reference_id="prog1",
            reference_name="Group Accelerator",
            amount_paid=19900,
            currency="usd",
        )
        await service.handle_stripe_webhook(b"{}", "sig")
        mocks["billing_repo"].update_invoice.assert_awaited_once_with(
            "inv1", {"status": "refunded", "amount_refunded": 19900}
        )

    async def test_subscription_update_sets_org_status(self, service, mocks):
        mocks["gateway"].construct_webhook_event.return_value = {
            "type": "customer.subscription.updated",
            "data": {
                "object": {
                    "id": "sub_1",
                    "status": "unpaid",
                    "customer": "cus_org",
                    "metadata": {"organization_id": "org1"},
                }
            },
        }
        await service.handle_stripe_webhook(b"{}", "sig")
        org_id, fields = mocks["org_service"].set_subscription.await_args.args
        assert org_id == "org1"
        assert fields["status"] == "canceled"
        assert fields["current_period_end"] is None

    async def test_unknown_event_is_ignored(self, service, mocks):
        mocks["gateway"].construct_webhook_event.return_value = {"type": "customer.created"}
        result = await service.handle_stripe_webhook(b"{}", "sig")
        assert result["handled"] is False
