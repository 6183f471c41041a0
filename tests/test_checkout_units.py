from decimal import Decimal
import pytest
from storefront.checkout.pricing import compute_snapshot_total, line_total, resolve_checkout_total, to_minor_units
from storefront.checkout.state_machine import (CANCELLED, COMPLETED, FAILED, PENDING, TERMINAL_STATUSES,
                                               can_transition, ensure_transition_allowed)
from storefront.common.errors import InvalidStateError


def test_minor_units_round_half_up():
    assert to_minor_units(Decimal("20.00")) == 2000
    assert to_minor_units(Decimal("10.005")) == 1001
    assert to_minor_units(Decimal("10.004")) == 1000
    assert to_minor_units("0.5") == 50
    assert to_minor_units(0) == 0


def test_minor_units_rejects_garbage():
    with pytest.raises(ValueError):
        to_minor_units("ten naira")


def test_snapshot_total():
    lines = [
        {"unit_price": Decimal("10.00"), "quantity": 2},
        {"unit_price": Decimal("35.50"), "quantity": 1},
        {"unit_price": Decimal("0.10"), "quantity": 3},
    ]
    assert compute_snapshot_total(lines) == Decimal("55.80")
    assert compute_snapshot_total([]) == Decimal("0.00")
    assert line_total("7.25", 4) == Decimal("29.00")


def test_stored_total_is_authoritative():
    lines = [{"unit_price": Decimal("10.00"), "quantity": 2}]
    assert resolve_checkout_total(Decimal("19.99"), lines) == Decimal("19.99")
    assert resolve_checkout_total(Decimal("0"), lines) == Decimal("0.00")


def test_missing_total_is_recomputed_from_lines():
    lines = [{"unit_price": Decimal("10.00"), "quantity": 2}, {"unit_price": "1.25", "quantity": 1}]
    assert resolve_checkout_total(None, lines) == Decimal("21.25")
    assert resolve_checkout_total(None, lines) == compute_snapshot_total(lines)


@pytest.mark.parametrize("target", [COMPLETED, FAILED, CANCELLED])
def test_pending_moves_to_every_terminal_state(target):
    assert can_transition(PENDING, target)
    ensure_transition_allowed(PENDING, target)


@pytest.mark.parametrize("current", sorted(TERMINAL_STATUSES))
def test_terminal_states_have_no_way_out(current):
    for target in (PENDING, COMPLETED, FAILED, CANCELLED):
        assert not can_transition(current, target)

    with pytest.raises(InvalidStateError) as exc_info:
        ensure_transition_allowed(current, CANCELLED, f"Cannot cancel checkout with status: {current}")
    assert exc_info.value.current_status == current
    assert exc_info.value.to_details() == {
        "message": f"Cannot cancel checkout with status: {current}",
        "current_status": current,
    }


def test_unknown_status_is_not_a_source():
    assert not can_transition("refunded", COMPLETED)
    with pytest.raises(InvalidStateError):
        ensure_transition_allowed("refunded", COMPLETED)
