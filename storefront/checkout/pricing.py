from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional

CENT = Decimal("0.01")


def _as_decimal(value) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"not a valid amount: {value!r}") from exc


def line_total(unit_price, quantity: int) -> Decimal:
    return (_as_decimal(unit_price) * int(quantity)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_snapshot_total(lines: Iterable[Mapping]) -> Decimal:
    """Sum of quantity x unit price over snapshot lines."""
    total = sum((line_total(line["unit_price"], line["quantity"]) for line in lines), Decimal("0.00"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Gateway amount: total x 100 rounded half up (kobo for NGN)."""
    minor = (_as_decimal(amount) * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def resolve_checkout_total(stored_total: Optional[Decimal], lines: Iterable[Mapping]) -> Decimal:
    """
    Total of a checkout record.

    The stored total is authoritative: it was fixed from the snapshot when the record was created and is what
    the gateway was asked to charge. Only a record that carries no stored total is recomputed from its
    snapshot lines, with the same formula used at creation.
    """
    if stored_total is not None:
        return _as_decimal(stored_total).quantize(CENT, rounding=ROUND_HALF_UP)
    return compute_snapshot_total(lines)
