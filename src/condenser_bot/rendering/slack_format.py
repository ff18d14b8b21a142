"""Slack mrkdwn helpers for reply text.

Timestamps are shown as `DD/MM/YYYY at HH:MM:SS (+HH:MM)` in the offset the
service reported, never converted to local time.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional


def format_offset(offset: Optional[timedelta]) -> str:
    if offset is None:
        return "UTC"
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def format_timestamp(moment: datetime) -> str:
    return f"{moment.strftime('%d/%m/%Y at %H:%M:%S')} ({format_offset(moment.utcoffset())})"


def inline_code(text: str) -> str:
    # Backticks would end the code span early.
    return "`" + text.replace("`", "'") + "`"
