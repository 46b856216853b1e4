from __future__ import annotations

import json
import math
import re
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response

JSON_MEDIA_TYPE = "application/json"
JAVASCRIPT_MEDIA_TYPE = "application/javascript"

# Dotted JavaScript identifier path, e.g. 'cb' or 'window.app.onItems'
_CALLBACK_RE = re.compile(r"^[A-Za-z_$][0-9A-Za-z_$]*(\.[A-Za-z_$][0-9A-Za-z_$]*)*$")


# PUBLIC_INTERFACE
def is_valid_callback(callback: Optional[str]) -> bool:
    """Return True if `callback` is safe to use as a JSONP function name."""
    if not callback or not isinstance(callback, str):
        return False
    # fullmatch: '$' alone would accept a trailing newline
    return _CALLBACK_RE.fullmatch(callback) is not None


def _drop_non_finite(value: Any) -> Any:
    # NaN and infinities have no JSON form; JSON.stringify writes null
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _drop_non_finite(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_drop_non_finite(v) for v in value]
    return value


# PUBLIC_INTERFACE
def to_json(payload: Any) -> str:
    """Serialize `payload` as compact JSON; dates and other cell types are encoded first."""
    return json.dumps(
        _drop_non_finite(jsonable_encoder(payload)),
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )


# PUBLIC_INTERFACE
def render_payload(payload: Any, callback: Optional[str] = None, status_code: int = 200) -> Response:
    """
    Render `payload` as JSON, or as JSONP `callback(json);` when a valid
    callback name is given. Invalid callback names fall back to plain JSON.
    """
    body = to_json(payload)
    if is_valid_callback(callback):
        return Response(
            content=f"{callback}({body});",
            status_code=status_code,
            media_type=JAVASCRIPT_MEDIA_TYPE,
        )
    return Response(content=body, status_code=status_code, media_type=JSON_MEDIA_TYPE)
