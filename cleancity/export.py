# Issue exports for the admin dashboard downloads
#
# CSV layout: title and address are always quoted (embedded quotes doubled),
# every other column is written bare. Rows keep input order.

import json
from datetime import datetime, timezone
from typing import List, Optional

from .models import Issue

CSV_HEADERS = ["id", "title", "category", "status", "assignedTo",
               "createdAt", "dueAt", "lat", "lng", "address"]


def _quoted(value: Optional[str]) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _iso_utc(ms: int) -> str:
    """Epoch ms -> 2024-01-01T00:00:00.000Z"""
    dt = datetime.fromtimestamp(ms // 1000, tz=timezone.utc)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{ms % 1000:03d}Z"


def _number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def to_delimited_text(issues: List[Issue]) -> str:
    lines = [",".join(CSV_HEADERS)]
    for i in issues:
        lines.append(",".join([
            i.id,
            _quoted(i.title),
            i.category.value,
            i.status.value,
            i.assigned_to_worker_id or "",
            _iso_utc(i.created_at),
            _iso_utc(i.due_at),
            _number(i.location.lat if i.location else None),
            _number(i.location.lng if i.location else None),
            _quoted(i.address),
        ]))
    return "\n".join(lines)


def to_json_text(issues: List[Issue]) -> str:
    return json.dumps([i.model_dump(mode="json") for i in issues], ensure_ascii=False, indent=2)
