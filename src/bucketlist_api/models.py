from __future__ import annotations

from typing import Any, Dict, List, Sequence

# A sheet as read from a source: header row followed by data rows.
SheetValues = List[Sequence[Any]]

# One normalized item, keyed by normalized header name. Known fields:
# - id: int or None
# - category, title, note: trimmed text
# - target_age: multiple of 10, never below the current decade bucket, at most 100
# - image_url: '' or an http(s)/data:image URL
# - completed: bool
# - completed_at: ISO8601 UTC timestamp, None unless completed
# Columns with other names are passed through untouched.
Record = Dict[str, Any]
