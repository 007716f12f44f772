import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

MONTH_ABBREVIATIONS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}
EMPTY_BYTES_TOKEN = "-"

log_pattern = re.compile(
    r"^(?P<ip>\S+) "
    r"(?P<identd>\S+) "
    r"(?P<authuser>\S+) "
    r"\[(?P<timestamp>[^\]]+)\] "
    r'"(?P<request>[^"]+)" '
    r"(?P<status>\d{3}) "
    r"(?P<size>\d+|-) "
    r'"(?P<referer>[^"]*)" '
    r'"(?P<agent>[^"]*)"\Z',
    re.ASCII,
)

request_pattern = re.compile(r"^(?P<method>\S+)\s+(?P<path>\S+)\s+(?P<protocol>\S+)\Z", re.ASCII)

# dd/Mon/yyyy:HH:MM:SS +hhmm, offset below 24 hours
timestamp_pattern = re.compile(
    r"^(?P<day>\d{2})/(?P<month>[A-Za-z]{3})/(?P<year>\d{4})"
    r":(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r" (?P<sign>[+-])(?P<offset_hours>[01]\d|2[0-3])(?P<offset_minutes>[0-5]\d)\Z",
    re.ASCII,
)


class ParseRejection(ValueError):
    """Raised by parse_line_strict when a line does not follow the access log format."""

    def __init__(self, reason, line):
        super().__init__(f"{reason}: {line!r}")
        self.reason = reason
        self.line = line


@dataclass(frozen=True)
class LogRecord:
    client_address: str
    identity: str
    username: str
    timestamp: datetime
    method: str
    request_path: str
    protocol_version: str
    status_code: int
    bytes_sent: int
    referer: str
    user_agent: str


def parse_timestamp(timestamp_str):
    match = timestamp_pattern.match(timestamp_str)
    if not match:
        raise ValueError(f"Invalid timestamp format: {timestamp_str}")

    month = MONTH_ABBREVIATIONS.get(match["month"].title())
    if month is None:
        raise ValueError(f"Invalid month: {match['month']}")

    offset = timedelta(hours=int(match["offset_hours"]), minutes=int(match["offset_minutes"]))
    if match["sign"] == "-":
        offset = -offset

    # datetime() rejects impossible dates
    return datetime(
        int(match["year"]), month, int(match["day"]),
        int(match["hour"]), int(match["minute"]), int(match["second"]),
        tzinfo=timezone(offset),
    )


def parse_request(request_raw):
    match = request_pattern.match(request_raw)
    if not match:
        raise ValueError("malformed request: expected 3 parts")
    return match["method"], match["path"], match["protocol"]


def parse_size(size):
    if size == EMPTY_BYTES_TOKEN:
        return 0
    return int(size)


def parse_line_strict(line: str) -> LogRecord:
    match = log_pattern.match(line)
    if not match:
        raise ParseRejection("regex_no_match", line)

    data = match.groupdict()

    try:
        method, path, protocol = parse_request(data["request"])
    except ValueError:
        raise ParseRejection("request_error", line) from None

    try:
        timestamp = parse_timestamp(data["timestamp"])
    except ValueError:
        raise ParseRejection("timestamp_error", line) from None

    return LogRecord(
        client_address=data["ip"],
        identity=data["identd"],
        username=data["authuser"],
        timestamp=timestamp,
        method=method,
        request_path=path,
        protocol_version=protocol,
        status_code=int(data["status"]),
        bytes_sent=parse_size(data["size"]),
        referer=data["referer"],
        user_agent=data["agent"],
    )


def parse_line(line: str) -> Optional[LogRecord]:
    """Parse one access log line; returns None when the line is malformed."""
    try:
        return parse_line_strict(line)
    except ParseRejection:
        return None
