import pytest

from app.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from app.services.booking_service import attach_payment_proof, confirm_payment, get_booking
from app.services.bundle_service import create_bundle_order, list_bundle_orders, submit_bundle_payment


@pytest.fixture
def make_order(db):
    def _make(**overrides):
        fields = dict(
            bundle_name="Couple Combo",
            customer_name="Sari",
            customer_email="sari@example.com",
            customer_phone="0812000111",
            total_price=85000,
            bundle_id="combo-2",
            bundle_description="2 tickets + large popcorn",
            bundle_price=85000,
            original_price=100000,
            savings=15000,
            quantity=1,
        )
        fields.update(overrides)
        return create_bundle_order(db, **fields)

    return _make


class TestCreateBundleOrder:
    def test_order_is_a_pending_bundle_row(self, make_order):
        o = make_order()

        assert o.booking_reference.startswith("BN")
        assert o.order_type == "bundle"
        assert o.status == "pending"
        assert o.payment_status == "unpaid"
        assert o.showtime_id is None
        assert o.seat_numbers == "[]"
        assert o.movie_title == "Couple Combo"
        assert o.total_amount == 85000
        assert o.savings == 15000

    def test_defaults(self, make_order):
        o = make_order(original_price=None, savings=None, quantity=None)

        assert o.original_price == 85000
        assert o.savings == 0
        assert o.quantity == 1

    def test_client_reference_is_kept(self, make_order):
        assert make_order(order_reference="BN-CLIENT-1").booking_reference == "BN-CLIENT-1"

    def test_duplicate_client_reference(self, make_order):
        make_order(order_reference="BN-CLIENT-1")
        with pytest.raises(ConflictError):
            make_order(order_reference="BN-CLIENT-1")

    def test_missing_fields(self, make_order):
        with pytest.raises(ValidationError, match="customer_phone, total_price"):
            make_order(customer_phone="", total_price=None)

    def test_quantity_must_be_positive(self, make_order):
        with pytest.raises(ValidationError, match="quantity"):
            make_order(quantity=0)


class TestBundlePayment:
    def test_submit_moves_to_waiting_verification(self, db, make_order):
        o = submit_bundle_payment(db, make_order().booking_reference)

        assert o.status == "waiting_verification"
        assert o.payment_status == "pending"
        assert o.payment_date is not None

    def test_repeat_submit_is_a_no_op(self, db, make_order):
        ref = make_order().booking_reference
        first = submit_bundle_payment(db, ref)
        paid_at = first.payment_date

        assert submit_bundle_payment(db, ref).payment_date == paid_at

    def test_submit_on_confirmed_order(self, db, broadcaster, make_order):
        ref = make_order().booking_reference
        confirm_payment(db, ref, broadcaster)
        with pytest.raises(InvalidStateError):
            submit_bundle_payment(db, ref)

    def test_regular_booking_is_not_a_bundle(self, db, make_booking):
        b = make_booking()
        with pytest.raises(NotFoundError, match="Bundle order not found"):
            submit_bundle_payment(db, b.booking_reference)

    def test_proof_upload_moves_to_waiting_verification(self, db, make_order):
        o = make_order()
        o = attach_payment_proof(db, o.booking_reference, "payment-1-000000002.jpg", order_type="bundle")

        assert o.status == "waiting_verification"
        assert o.payment_proof == "payment-1-000000002.jpg"

    def test_admin_confirms_after_verification(self, db, broadcaster, make_order):
        ref = make_order().booking_reference
        submit_bundle_payment(db, ref)
        o = confirm_payment(db, ref, broadcaster)

        assert o.status == "confirmed"
        assert o.payment_status == "paid"
        # bundles hold no seats
        assert broadcaster.calls == []


def test_list_bundle_orders_excludes_regular_bookings(db, make_order, make_booking):
    make_booking()
    o = make_order()

    assert [x.booking_reference for x in list_bundle_orders(db)] == [o.booking_reference]
    assert get_booking(db, o.booking_reference, "bundle").id == o.id
