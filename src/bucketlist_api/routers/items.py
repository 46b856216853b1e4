from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..errors import SheetNotFoundError
from ..normalizer import RowNormalizer
from ..schemas import BucketItemOut, ErrorEnvelope
from ..settings import Settings, get_settings
from ..sources import SheetSource, get_sheet_source
from ..utils import JAVASCRIPT_MEDIA_TYPE, render_payload

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/items",
    tags=["items"],
)


# PUBLIC_INTERFACE
def get_source(settings: Settings = Depends(get_settings)) -> SheetSource:
    """
    Dependency returning the sheet source configured in settings.
    """
    return get_sheet_source(settings)


# PUBLIC_INTERFACE
def get_normalizer(settings: Settings = Depends(get_settings)) -> RowNormalizer:
    """Return a RowNormalizer configured from settings."""
    return RowNormalizer.from_settings(settings)


_ITEMS_RESPONSES: Dict[Any, Dict[str, Any]] = {
    200: {
        "description": "Items retrieved successfully; JSONP when a valid callback is given",
        "content": {JAVASCRIPT_MEDIA_TYPE: {"example": 'cb([{"id":1,"completed":false}]);'}},
    },
    404: {"model": ErrorEnvelope, "description": "Configured sheet not found"},
}


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[BucketItemOut],
    summary="List Items",
    description=(
        "Return every row of the configured sheet as a normalized item, in sheet order.\n\n"
        "Query parameters:\n"
        "- callback: JSONP function name (dotted JavaScript identifier). When valid, the "
        "response is `callback(<json>);` served as application/javascript; invalid names "
        "are ignored and plain JSON is returned."
    ),
    responses=_ITEMS_RESPONSES,
)
def list_items(
    callback: Optional[str] = Query(None, description="JSONP callback function name"),
    source: SheetSource = Depends(get_source),
    normalizer: RowNormalizer = Depends(get_normalizer),
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    List normalized items from the sheet.
    """
    values = source.get_values(settings.sheet_name)
    if values is None:
        logger.warning("Sheet %r not found in %s source", settings.sheet_name, source.name)
        raise SheetNotFoundError(settings.sheet_name)

    items = normalizer.convert(values)
    logger.info(
        "Serving %d items from sheet %r (jsonp=%s)", len(items), settings.sheet_name, bool(callback)
    )
    return render_payload(items, callback)
