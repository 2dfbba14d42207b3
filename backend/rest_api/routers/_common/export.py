"""
CSV export of listing rows.

Exports reuse the list pipeline (filters, search, sort, scope) and write
the output DTOs as one CSV row each. Nested relation objects are written
as JSON in their cell.

Usage:
    @router.get("/products/export")
    def export_products(query: dict = Depends(get_list_query), ...):
        rows = ProductService(db).export(query, user)
        return to_csv_response(rows, ProductOutput, "products")
"""

import csv
import io
import json
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from fastapi import Response
from pydantic import BaseModel

# Bookkeeping columns left out of exports
EXCLUDED_COLUMNS = frozenset({"updated_at", "deleted_at"})


def export_columns(schema: type[BaseModel]) -> list[str]:
    return [name for name in schema.model_fields if name not in EXCLUDED_COLUMNS]


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return value


def to_csv_response(rows: Sequence[BaseModel], schema: type[BaseModel], basename: str) -> Response:
    """
    Write ``rows`` as a CSV attachment.

    The header always comes from ``schema``, so an empty export still
    carries its columns.
    """
    columns = export_columns(schema)
    sio = io.StringIO()
    writer = csv.writer(sio)
    writer.writerow(columns)
    for row in rows:
        data = row.model_dump(mode="json")
        writer.writerow([_cell(data.get(column)) for column in columns])

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    return Response(
        content=sio.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{basename}-{stamp}.csv"'},
    )
