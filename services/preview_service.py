from typing import Any, Dict

from models.common_models import ParsedTable
from .aggregation_service import window_sequential
from .stats_service import profile_columns


def get_preview_rows(table: ParsedTable, n_rows: int = 20) -> Dict[str, Any]:
    return {
        "headers": table.headers,
        "sheetName": table.sheet_name,
        "rows": window_sequential(table, n_rows),
        "profile": {name: p.model_dump() for name, p in profile_columns(table).items()},
    }
