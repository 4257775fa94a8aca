import datetime

import pytest

from gistblog.utils import (
    build_filename,
    calculate_reading_time,
    normalize_tags,
    parse_iso,
    slugify,
    to_iso,
)


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Hello World", "hello-world"),
        ("  Hello,   World!  ", "hello-world"),
        ("Python 3.12 -- what's new?", "python-312-whats-new"),
        ("你好 世界", "你好-世界"),
        ("Mixed 中文 Title", "mixed-中文-title"),
        ("a - b", "a-b"),
        ("!!!", ""),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slugify_is_deterministic():
    title = "Some Title: With Punctuation & Symbols"
    assert slugify(title) == slugify(title)


def test_build_filename_uses_utc_date():
    stamp = datetime.datetime(2024, 3, 5, 10, 0, tzinfo=datetime.timezone.utc)
    assert build_filename(stamp, "hello-world") == "2024-03-05--hello-world.md"


def test_build_filename_converts_other_timezones_to_utc():
    tz = datetime.timezone(datetime.timedelta(hours=8))
    stamp = datetime.datetime(2024, 3, 6, 2, 0, tzinfo=tz)  # 2024-03-05 18:00 UTC
    assert build_filename(stamp, "late") == "2024-03-05--late.md"


def test_build_filename_accepts_iso_strings():
    assert build_filename("2024-12-31T23:59:59.000Z", "nye") == "2024-12-31--nye.md"


def test_to_iso_and_parse_iso():
    stamp = datetime.datetime(
        2024, 3, 5, 10, 0, 1, 123456, tzinfo=datetime.timezone.utc
    )
    text = to_iso(stamp)

    assert text == "2024-03-05T10:00:01.123Z"
    assert parse_iso(text) == stamp.replace(microsecond=123000)


def test_to_iso_treats_naive_as_utc():
    assert to_iso(datetime.datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"


@pytest.mark.parametrize(
    ("word_count", "expected"),
    [(0, "1 min"), (200, "1 min"), (201, "2 min"), (401, "3 min")],
)
def test_calculate_reading_time_rounds_up(word_count, expected):
    assert calculate_reading_time(("word " * word_count).strip()) == expected


def test_slugify_keeps_only_ascii_and_cjk_letters():
    assert slugify("Café au lait") == "caf-au-lait"
    assert slugify("Привет") == ""


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, []),
        ("", []),
        ("a, b ,, c", ["a", "b", "c"]),
        (["x", " y ", "", None], ["x", "y"]),
        (("t",), ["t"]),
        (7, ["7"]),
    ],
)
def test_normalize_tags(value, expected):
    assert normalize_tags(value) == expected
