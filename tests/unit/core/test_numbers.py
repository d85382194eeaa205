from decimal import Decimal

import pytest

from modules.core.numbers import round_half_up

pytestmark = pytest.mark.unit


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, 0),
            (2.4, 2),
            (2.5, 3),
            (3.5, 4),
            (-2.5, -2),
            (-2.6, -3),
            (Decimal("11690.5"), 11691),
            (Decimal("0.49999"), 0),
        ],
    )
    def test_ties_go_toward_positive_infinity(self, value, expected):
        assert round_half_up(value) == expected

    def test_differs_from_bankers_rounding(self):
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3

    def test_float_input_goes_through_its_decimal_repr(self):
        assert round_half_up(Decimal("100.5")) == 101
        assert round_half_up(100.5) == 101
