"""
Bucket List Sheet API package.

Serves the rows of a spreadsheet-like store as normalized bucket list items.
The normalization core is importable without FastAPI wiring:

    from bucketlist_api.normalizer import convert_to_records
"""

from .age import calculate_age  # noqa: F401
from .normalizer import RowNormalizer, convert_to_records  # noqa: F401
