from app.utils.format import format_currency, format_duration, format_time

from conftest import BASE_TIME, HOUR


def test_format_currency():
    assert format_currency(1234) == "A$1,234"
    assert format_currency(349.6) == "A$350"


def test_format_time():
    assert format_time(BASE_TIME + 10 * HOUR + 30 * 60) == "Thu, Jan 1, 10:30 UTC"


def test_format_duration():
    assert format_duration(5 * HOUR + 30 * 60) == "5h 30m"
    assert format_duration(26 * HOUR + 5 * 60) == "26h 05m"
