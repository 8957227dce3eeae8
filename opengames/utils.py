import logging
import re
from datetime import datetime, timezone

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


# Custom logging formatter to support colors
class ColoredFormatter(logging.Formatter):
    # Define color codes
    COLORS = {
        'DEBUG': '\033[94m',   # Blue
        'INFO': '\033[92m',    # Green
        'WARNING': '\033[93m', # Yellow
        'ERROR': '\033[91m',   # Red
        'CRITICAL': '\033[95m' # Magenta
    }
    RESET = '\033[0m'  # Reset color

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        return super().format(record)


# Filter to remove date from http access logs
class FilterRemoveDateFromWerkzeugLogs(logging.Filter):
    # '192.168.0.102 - - [30/Jun/2024 01:14:03] "%s" %s %s' -> '192.168.0.102 - "%s" %s %s'
    pattern: re.Pattern = re.compile(r' - - \[.+?] "')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.pattern.sub(' - "', record.msg)
        return True


def now_utc():
    """Returns current datetime in UTC (aware)"""
    return datetime.now(timezone.utc)


def utcnow_naive():
    """Current UTC time without tzinfo, the storage form of every timestamp column"""
    return now_utc().replace(tzinfo=None)


def to_naive_utc(dt):
    """
    Normalize a datetime, ISO string or unix timestamp to a naive UTC datetime,
    which is how the games table stores timestamps.
    """
    if dt is None or dt == "":
        return None

    if isinstance(dt, (int, float)) and not isinstance(dt, bool):
        return datetime.fromtimestamp(dt, timezone.utc).replace(tzinfo=None)

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
        except ValueError:
            return None

    if not isinstance(dt, datetime):
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def epoch_seconds(dt):
    """Seconds since the epoch; missing timestamps count as the epoch itself."""
    dt = to_naive_utc(dt)
    if dt is None:
        return 0.0
    return dt.replace(tzinfo=timezone.utc).timestamp()


def isoformat_utc(dt):
    dt = to_naive_utc(dt)
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")


def slugify(value):
    """'Endless Sky' -> 'endless-sky'"""
    return _SLUG_STRIP.sub("-", (value or "").lower()).strip("-")
