from datetime import datetime

import pytest

from pipeworks.services import orders_service
from pipeworks.services.orders_service import OrderError
from pipeworks.time_utils import today
from pipeworks.validation import NotFoundError, ValidationError


def test_create_order_snapshots_lines_and_computes_totals(make_item, make_order):
    item = make_item(price_cents=4550)
    order = make_order(
        lines=[{"item_id": item.id, "quantity": 50}],
        tax_cents=19575,
        shipping_cost_cents=5000,
    )

    assert order.order_number == f"ORD-{today().year}-001"
    assert order.status == "pending"
    assert len(order.lines) == 1
    line = order.lines[0]
    assert line.name == item.name
    assert line.material == "Carbon Steel"
    assert line.unit_price_cents == 4550
    assert line.total_price_cents == 227500
    assert order.subtotal_cents == 227500
    assert order.total_amount_cents == 252075

    assert [h.status for h in order.status_history] == ["pending"]
    assert order.status_history[0].updated_by == "tester"


def test_tax_defaults_to_configured_rate(app, db_session):
    order = orders_service.create_order(
        patch={"customer_name": "Walk-in"},
        lines=[{"name": "Coupling", "quantity": 10, "unit_price_cents": 1000}],
    )
    expected_tax = round(10000 * app.config["ORDER_TAX_RATE"])
    assert order.tax_cents == expected_tax
    assert order.total_amount_cents == 10000 + expected_tax


def test_order_numbers_are_sequential(make_order):
    first = make_order()
    second = make_order()
    assert int(second.order_number.rsplit("-", 1)[1]) == int(first.order_number.rsplit("-", 1)[1]) + 1


def test_create_order_rejects_bad_lines(db_session):
    with pytest.raises(ValidationError):
        orders_service.create_order(patch={"customer_name": "X"}, lines=[])
    with pytest.raises(ValidationError):
        orders_service.create_order(
            patch={"customer_name": "X"},
            lines=[{"name": "Pipe", "quantity": 0, "unit_price_cents": 100}],
        )
    with pytest.raises(ValidationError):
        orders_service.create_order(patch={"customer_name": "X"}, lines=[{"item_id": 999, "quantity": 1}])


def test_discount_larger_than_order_is_rejected(db_session):
    with pytest.raises(OrderError):
        orders_service.create_order(
            patch={"customer_name": "X", "tax_cents": 0, "discount_cents": 5000},
            lines=[{"name": "Pipe", "quantity": 1, "unit_price_cents": 100}],
        )


def test_status_change_appends_history(make_order):
    order = make_order()
    orders_service.update_order_status(order.id, status="processing", notes="Started", updated_by="alice")
    orders_service.update_order_status(order.id, status="delivered", updated_by="bob")

    order = orders_service.get_order(order.id)
    statuses = [h.status for h in order.status_history]
    assert statuses == ["pending", "processing", "delivered"]
    assert order.status == statuses[-1]
    timestamps = [h.timestamp for h in order.status_history]
    assert timestamps == sorted(timestamps)
    assert order.actual_delivery == today()


def test_history_timestamps_never_go_backwards(make_order):
    order = make_order()
    # Simulate a clock skew: the existing entry is in the future
    future = datetime(2999, 1, 1)
    order.status_history[0].timestamp = future
    orders_service.update_order_status(order.id, status="confirmed")
    assert order.status_history[-1].timestamp == future


def test_invalid_status_and_missing_order(make_order):
    order = make_order()
    with pytest.raises(ValidationError):
        orders_service.update_order_status(order.id, status="lost")
    with pytest.raises(NotFoundError):
        orders_service.update_order_status(9999, status="pending")


def test_priority_payment_and_assignment(make_order):
    order = make_order()
    orders_service.update_order_priority(order.id, priority="urgent")
    orders_service.update_payment_status(order.id, payment_status="paid")
    orders_service.assign_order(order.id, assigned_to="  Mike Wilson ")
    assert order.priority == "urgent"
    assert order.payment_status == "paid"
    assert order.assigned_to == "Mike Wilson"
    orders_service.assign_order(order.id, assigned_to="")
    assert order.assigned_to is None


def test_tags_are_unique_and_removable(make_order):
    order = make_order()
    orders_service.add_tag(order.id, tag="rush")
    orders_service.add_tag(order.id, tag="rush")
    orders_service.add_tag(order.id, tag="export")
    assert orders_service.get_order(order.id).tags == ["rush", "export"]
    orders_service.remove_tag(order.id, tag="rush")
    assert orders_service.get_order(order.id).tags == ["export"]


def test_update_recomputes_total(make_order):
    order = make_order()
    orders_service.update_order(order.id, patch={"shipping_cost_cents": 500, "discount_cents": 100})
    assert order.total_amount_cents == 2000 + 500 - 100


def test_bulk_status_update_reports_missing_ids(make_order):
    a = make_order()
    b = make_order()
    result = orders_service.perform_bulk_action(
        action="update_status", value="shipped", order_ids=[a.id, b.id, 9999]
    )
    assert result == {"action": "update_status", "updated": 2, "missing": [9999]}
    for order in (a, b):
        assert order.status == "shipped"
        assert order.status_history[-1].status == "shipped"


def test_bulk_tags_and_assignment(make_order):
    a = make_order()
    b = make_order()
    orders_service.perform_bulk_action(action="add_tag", value="q1", order_ids=[a.id, b.id])
    orders_service.perform_bulk_action(action="assign_to", value="Ann", order_ids=[a.id])
    orders_service.perform_bulk_action(action="remove_tag", value="q1", order_ids=[b.id])
    assert a.tags == ["q1"] and a.assigned_to == "Ann"
    assert b.tags == [] and b.assigned_to is None


def test_bulk_rejects_unknown_action(make_order):
    order = make_order()
    with pytest.raises(OrderError):
        orders_service.perform_bulk_action(action="archive", value=None, order_ids=[order.id])


def test_delete_order(make_order):
    order = make_order()
    orders_service.delete_order(order.id)
    assert orders_service.get_order(order.id) is None
    with pytest.raises(NotFoundError):
        orders_service.delete_order(order.id)


def test_bulk_assign_rejects_non_string_value(make_order):
    order = make_order()
    with pytest.raises(ValidationError):
        orders_service.perform_bulk_action(action="assign_to", value=7, order_ids=[order.id])
    assert order.assigned_to is None

    orders_service.perform_bulk_action(action="assign_to", value=None, order_ids=[order.id])
    assert order.assigned_to is None
