import pytest

from utils.format import core_name, format_bytes, format_date, format_speed, protocol_name


@pytest.mark.parametrize("value, expected", [
    (0, "0 B"),
    (512, "512 B"),
    (1536, "1.50 KB"),
    (15 * 1024, "15.0 KB"),
    (150 * 1024 * 1024, "150 MB"),
    (3 * 1024 ** 4, "3.00 TB"),
])
def test_format_bytes(value, expected):
    assert format_bytes(value) == expected


def test_format_speed():
    assert format_speed(2048) == "2.00 KB/s"


def test_format_date_empty():
    assert format_date(0) == "-"
    assert format_date(None) == "-"


def test_format_date_has_year():
    assert format_date(1700000000).startswith("2023-11-1")


def test_names():
    assert protocol_name(5) == "VLESS"
    assert protocol_name(42) == "Unknown"
    assert core_name(2) == "sing-box"
    assert core_name(9) == "Unknown"
