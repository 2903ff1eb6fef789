from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List

from clipnotes.clipboard import ClipboardEntry
from clipnotes.notes import Note


def parse_iso(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_relative(value: str, now: datetime | None = None) -> str:
    stamp = parse_iso(value)
    if stamp is None:
        return ""
    if now is None:
        now = datetime.now(timezone.utc)
    seconds = (now - stamp).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)} min ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)} h ago"
    return stamp.astimezone().strftime("%d.%m.%Y")


def format_entry_time(value: str) -> str:
    stamp = parse_iso(value)
    if stamp is None:
        return ""
    local = stamp.astimezone()
    return f"{local:%H:%M} · {local:%d.%m}"


def preview(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def matches(query: str, *fields: str) -> bool:
    needle = (query or "").lower()
    if not needle:
        return True
    return any(needle in (field or "").lower() for field in fields)


def filter_notes(notes: Iterable[Note], query: str) -> List[Note]:
    return [n for n in notes if matches(query, n.title, n.content)]


def filter_entries(entries: Iterable[ClipboardEntry], query: str) -> List[ClipboardEntry]:
    return [e for e in entries if matches(query, e.text)]
