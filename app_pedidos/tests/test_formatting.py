from datetime import date, datetime, timezone

from app_pedidos.formatting import format_cop, short_date_label, start_of_day


def test_format_cop_uses_dot_grouping_without_decimals():
    assert format_cop(31000) == '$ 31.000'
    assert format_cop(1250000) == '$ 1.250.000'
    assert format_cop(0) == '$ 0'
    assert format_cop(999.6) == '$ 1.000'
    assert format_cop(-500) == '-$ 500'
    assert format_cop(None) == '$ 0'


def test_short_date_label_spanish_months():
    assert short_date_label(date(2025, 10, 19)) == '19 oct'
    assert short_date_label(date(2025, 1, 3)) == '3 ene'
    assert short_date_label(date(2025, 9, 30)) == '30 sept'


def test_start_of_day_keeps_timezone():
    value = datetime(2025, 10, 19, 18, 45, 12, tzinfo=timezone.utc)
    midnight = start_of_day(value)
    assert midnight == datetime(2025, 10, 19, tzinfo=timezone.utc)
