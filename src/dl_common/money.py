"""Integer minor-unit arithmetic for ledger amounts.

All amounts inside the core are int minor units (paise). The remote API and
the donor-facing inputs use decimal major units; conversion happens only at
the boundary and goes through Decimal, never float arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MINOR_PER_MAJOR = 100


def to_minor_units(value: object) -> int:
    """Convert a major-unit value (str/int/float/Decimal) to minor units.

    Floats are routed through str() so 10.1 becomes 1010, not 1009.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    try:
        major = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Not an amount: {value!r}") from exc
    if not major.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    minor = (major * MINOR_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def to_major_units(minor: int) -> Decimal:
    """Convert minor units to a two-place Decimal: 51000 -> Decimal('510.00')."""
    return (Decimal(minor) / MINOR_PER_MAJOR).quantize(Decimal("0.01"))


def minor_to_display(minor: int, symbol: str = "₹") -> str:
    """Convert minor units to display string: 123456 -> '₹1,234.56', -1200 -> '-₹12.00'."""
    if minor < 0:
        abs_minor = -minor
        return f"-{symbol}{abs_minor // 100:,}.{abs_minor % 100:02d}"
    return f"{symbol}{minor // 100:,}.{minor % 100:02d}"


def apply_surcharge(amount_minor: int, surcharge_bps: int) -> int:
    """Inflate an amount by a basis-point surcharge, rounding half up.

    gross = round(amount * (1 + bps / 10000))
    Using integer half-up: (a * (10000 + bps) + 5000) // 10000
    """
    if amount_minor <= 0:
        raise ValueError(f"Amount must be positive, got {amount_minor}")
    return (amount_minor * (10000 + surcharge_bps) + 5000) // 10000


def to_wire_amount(minor: int) -> float:
    """Major-unit JSON number for the remote API: 50000 -> 500.0."""
    return float(to_major_units(minor))
