from enum import Enum


class Severity(str, Enum):
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    DEBUG = "debug"
    INFO = "info"
    TRACE = "trace"
    UNKNOWN = "unknown"


_ALIASES = {
    "critical": Severity.CRITICAL,
    "crit": Severity.CRITICAL,
    "emerg": Severity.CRITICAL,
    "emergency": Severity.CRITICAL,
    "alert": Severity.CRITICAL,
    "fatal": Severity.CRITICAL,
    "panic": Severity.CRITICAL,
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "eror": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "info": Severity.INFO,
    "inf": Severity.INFO,
    "information": Severity.INFO,
    "notice": Severity.INFO,
    "debug": Severity.DEBUG,
    "dbug": Severity.DEBUG,
    "trace": Severity.TRACE,
    "unknown": Severity.UNKNOWN,
}


def severity_from_string(value: str | None) -> Severity | None:
    """Map a level label value to a Severity, or None when it is not one."""
    if not value:
        return None
    return _ALIASES.get(value.strip().lower())
