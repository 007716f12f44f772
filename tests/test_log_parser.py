from datetime import datetime, timedelta, timezone

import pytest

from log_parser import LogRecord, ParseRejection, parse_line, parse_line_strict, parse_timestamp

VALID_LINE = '127.0.0.1 - - [01/Jan/2025:12:00:00 +0000] "GET /index.html HTTP/1.1" 200 1234 "-" "Mozilla/5.0"'


def make_line(ip="10.0.0.1", timestamp="10/Jul/2018:22:21:28 +0200", request="GET /test HTTP/1.1",
              status="200", size="100", referer="-", agent="Agent"):
    return f'{ip} - - [{timestamp}] "{request}" {status} {size} "{referer}" "{agent}"'


def test_valid_line_returns_every_field():
    record = parse_line(VALID_LINE)

    assert record == LogRecord(
        client_address="127.0.0.1",
        identity="-",
        username="-",
        timestamp=datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        method="GET",
        request_path="/index.html",
        protocol_version="HTTP/1.1",
        status_code=200,
        bytes_sent=1234,
        referer="-",
        user_agent="Mozilla/5.0",
    )


def test_identity_and_username_are_kept_verbatim():
    record = parse_line('50.112.00.11 ident admin [11/Jul/2018:17:31:56 +0200] "GET /asset.js HTTP/1.1" 200 3574 "-" "Agent"')

    assert record.identity == "ident"
    assert record.username == "admin"


def test_hyphen_for_bytes_is_zero():
    record = parse_line(make_line(status="304", size="-"))

    assert record.bytes_sent == 0
    assert record.status_code == 304


def test_large_byte_count():
    assert parse_line(make_line(size="999999999")).bytes_sent == 999999999


def test_ipv6_address():
    record = parse_line(make_line(ip="2001:0db8:85a3:0000:0000:8a2e:0370:7334"))

    assert record.client_address == "2001:0db8:85a3:0000:0000:8a2e:0370:7334"


def test_query_string_is_not_decoded():
    record = parse_line(make_line(request="GET /search?q=test%20me&page=2 HTTP/1.1"))

    assert record.method == "GET"
    assert record.request_path == "/search?q=test%20me&page=2"
    assert record.protocol_version == "HTTP/1.1"


def test_negative_offset_is_kept():
    record = parse_line(make_line(timestamp="25/Dec/2023:23:59:59 -0500"))

    assert record.timestamp == datetime(2023, 12, 25, 23, 59, 59, tzinfo=timezone(timedelta(hours=-5)))
    assert record.timestamp.utcoffset() == timedelta(hours=-5)


def test_complex_user_agent_and_empty_referer():
    agent = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    record = parse_line(make_line(referer="", agent=agent))

    assert record.referer == ""
    assert record.user_agent == agent


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH", "PROPFIND"])
def test_any_method_token_is_accepted(method):
    assert parse_line(make_line(request=f"{method} /api/data HTTP/1.1")).method == method


def test_unusual_status_code_is_not_rejected():
    assert parse_line(make_line(status="999")).status_code == 999


def test_repeated_whitespace_inside_request_is_accepted():
    record = parse_line(make_line(request="GET  /test  HTTP/1.1"))

    assert (record.method, record.request_path, record.protocol_version) == ("GET", "/test", "HTTP/1.1")


@pytest.mark.parametrize("line", [
    "",
    "   ",
    "This is not a valid log line",
    "177.71.128.21 incomplete log",
    "177.71.128.21 - - [10/Jul/2018:22:21:28",
    '177.71.128.21 - - [10/Jul/2018:22:21:28 +0200] "GET /test HTTP/1.1" 200',
    '177.71.128.21 - - 10/Jul/2018:22:21:28 +0200] "GET /test HTTP/1.1" 200 100 "-" "Agent"',
    make_line(status="20"),
    make_line(status="2000"),
    make_line(size="12ab"),
    make_line(request="GET /index.html"),
    make_line(request="GET /index.html HTTP/1.1 extra"),
    make_line(request=""),
    make_line() + " junk extra",
    make_line(agent='Bad "quoted" agent'),
    make_line(status="\uff12\uff10\uff10"),
    make_line(size="\u0661\u0660\u0660"),
    make_line() + "\n",
    make_line(request="GET / HTTP/1.1\n"),
    make_line(request="GET / HTTP/1.1 "),
])
def test_malformed_lines_are_rejected(line):
    assert parse_line(line) is None


@pytest.mark.parametrize("timestamp", [
    "10/Jul/2018 22:21:28 +0200",
    "1/Jul/2018:22:21:28 +0200",
    "10/Foo/2018:22:21:28 +0200",
    "31/Feb/2018:22:21:28 +0200",
    "10/Jul/2018:25:21:28 +0200",
    "10/Jul/2018:22:21:28 +02:00",
    "10/Jul/2018:22:21:28 0200",
    "10/Jul/2018:22:21:28",
    "10/Jul/2018:22:21:28 +9900",
    "10/Jul/2018:22:21:28 +0199",
    "10/Jul/2018:22:21:28 +0260",
    "10/Jul/2018:22:21:28 +2400",
    "10/Jul/2018:22:21:28 -2400",
    "\u0661\u0660/Jul/2018:22:21:28 +0200",
    "10/Jul/\uff12\uff10\uff11\uff18:22:21:28 +0200",
])
def test_unparsable_timestamp_is_rejected(timestamp):
    assert parse_line(make_line(timestamp=timestamp)) is None


@pytest.mark.parametrize("line, reason", [
    ("garbage", "regex_no_match"),
    (make_line(request="GET /index.html"), "request_error"),
    (make_line(timestamp="10/Foo/2018:22:21:28 +0200"), "timestamp_error"),
])
def test_strict_parser_reports_reason(line, reason):
    with pytest.raises(ParseRejection) as excinfo:
        parse_line_strict(line)

    assert excinfo.value.reason == reason
    assert excinfo.value.line == line


def test_parse_rejection_is_a_value_error():
    assert issubclass(ParseRejection, ValueError)


def test_parsing_is_repeatable():
    assert parse_line(VALID_LINE) == parse_line(VALID_LINE)
    assert parse_line("garbage") is None
    assert parse_line("garbage") is None


def test_records_are_immutable():
    record = parse_line(VALID_LINE)

    with pytest.raises(AttributeError):
        record.request_path = "/other"


def test_month_abbreviation_is_case_insensitive():
    assert parse_timestamp("10/JUL/2018:22:21:28 +0200").month == 7


@pytest.mark.parametrize("offset, expected", [
    ("+2359", timedelta(hours=23, minutes=59)),
    ("-2359", -timedelta(hours=23, minutes=59)),
    ("+0530", timedelta(hours=5, minutes=30)),
    ("-0000", timedelta(0)),
])
def test_offset_within_a_day_is_accepted(offset, expected):
    record = parse_line(make_line(timestamp=f"10/Jul/2018:22:21:28 {offset}"))

    assert record.timestamp.utcoffset() == expected


def test_non_ascii_digits_report_timestamp_error():
    with pytest.raises(ParseRejection) as excinfo:
        parse_line_strict(make_line(timestamp="\u0661\u0660/Jul/2018:22:21:28 +0200"))

    assert excinfo.value.reason == "timestamp_error"
