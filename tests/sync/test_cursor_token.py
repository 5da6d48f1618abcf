from datetime import datetime

import pytest

from src.attendance_sync.attendance_sync.core.exceptions import ValidationError
from src.attendance_sync.attendance_sync.sync.cursor import CursorToken, max_token


def test_parse_and_format_round_trip():
    token = CursorToken.parse("102025$120")

    assert (token.year, token.month, token.sequence) == (2025, 10, 120)
    assert str(token) == "102025$120"


@pytest.mark.parametrize("value", ["", "2025$1", "132025$1", "102025$", "102025#5", "10-2025$5"])
def test_parse_rejects_malformed(value):
    with pytest.raises(ValidationError):
        CursorToken.parse(value)
    assert CursorToken.try_parse(value) is None


def test_order_is_year_month_then_sequence():
    assert CursorToken.parse("112025$1") > CursorToken.parse("102025$999")
    assert CursorToken.parse("012026$1") > CursorToken.parse("122025$50")
    assert CursorToken.parse("102025$10") > CursorToken.parse("102025$9")


def test_bootstrap_uses_current_month():
    assert str(CursorToken.bootstrap(datetime(2025, 3, 14, 9, 0))) == "032025$0"


def test_max_token_never_regresses():
    assert max_token("102025$50", ["102025$10", "102025$49"]) == "102025$50"
    assert max_token("102025$50", []) == "102025$50"
    assert max_token("102025$50", ["102025$51", "102025$70", "102025$60"]) == "102025$70"
    assert max_token("102025$999", ["112025$1"]) == "112025$1"


def test_max_token_ignores_malformed():
    assert max_token("102025$50", [None, "", "junk", "102025$x"]) == "102025$50"
    assert max_token("junk", ["102025$3"]) == "102025$3"
