from decimal import Decimal

from backend.app.utils.formato import money, round_cents, signed_money


def test_round_half_up():
    assert round_cents(Decimal("0.125")) == Decimal("0.13")
    assert round_cents(Decimal("-0.125")) == Decimal("-0.13")
    assert round_cents(Decimal("2.675")) == Decimal("2.68")


def test_money():
    assert money(Decimal("1000")) == "$1000.00"
    assert money(Decimal("-3")) == "-$3.00"
    assert money(None) == "$0.00"
    assert money(Decimal("-0.001")) == "$0.00"


def test_signed_money():
    assert signed_money(Decimal("250.5"), "expense") == "-$250.50"
    assert signed_money(Decimal("1000"), "income") == "+$1000.00"
