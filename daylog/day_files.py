"""
Day File Naming - Mapping Timestamps to Daily Log Files

Each calendar day that receives at least one entry gets exactly one file,
named {prefix}YYYY-MM-DD{extension}. Names sort lexically by date and can
be parsed back into the day they hold, so pruning never depends on file
modification times.
"""

import re
from datetime import date, datetime, tzinfo
from typing import Optional


def local_timezone() -> tzinfo:
    """Return the process local zone as of now."""
    return datetime.now().astimezone().tzinfo


def day_key(timestamp: datetime, tz: tzinfo) -> date:
    """
    Calendar day of a timestamp in the given zone.

    Naive timestamps are taken to already be in tz.
    """
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(tz).date()


class DayFileNaming:
    """
    Deterministic file naming scheme for daily log files.

    Args:
        prefix: Fixed text placed before the date (may be empty)
        extension: Fixed suffix placed after the date, e.g. ".log"
    """

    DATE_FORMAT = "%Y-%m-%d"

    def __init__(self, prefix: str = "", extension: str = ".log"):
        for part, label in ((prefix, "prefix"), (extension, "extension")):
            if "/" in part or "\\" in part:
                raise ValueError(f"File {label} must not contain path separators: {part!r}")
        self.prefix = prefix
        self.extension = extension
        self._pattern = re.compile(
            r"^" + re.escape(prefix) + r"(\d{4})-(\d{2})-(\d{2})" + re.escape(extension) + r"$"
        )

    def filename_for(self, day: date) -> str:
        return f"{self.prefix}{day.strftime(self.DATE_FORMAT)}{self.extension}"

    def parse(self, filename: str) -> Optional[date]:
        """
        Recover the day from a filename produced by this scheme.

        Returns:
            The day, or None if the name does not belong to this scheme
        """
        match = self._pattern.match(filename)
        if not match:
            return None
        try:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError:
            return None

    def __repr__(self):
        return f"DayFileNaming(prefix={self.prefix!r}, extension={self.extension!r})"
