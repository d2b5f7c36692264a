"""
In-memory chart collection for one dashboard.

Edits happen here first; persisting the result is a separate, explicit
step (``dashboard_service.update_dashboard``), which is what the editor's
Save button does.
"""

import logging
import uuid
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from models.chart_models import ChartSpec, ChartType, Suggestion
from models.common_models import ParsedTable

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]

_EDITABLE_FIELDS = {"type", "title", "x_axis", "y_axis"}


def _default_id() -> str:
    return str(uuid.uuid4())


def default_title(chart_type: ChartType) -> str:
    return f"New {chart_type.value.capitalize()} Chart"


class ChartModel:
    def __init__(self, charts: Optional[Iterable[ChartSpec]] = None, id_factory: Optional[IdFactory] = None):
        self._charts: List[ChartSpec] = list(charts or [])
        self._new_id = id_factory or _default_id

    # ---------- Read ----------
    @property
    def charts(self) -> Tuple[ChartSpec, ...]:
        return tuple(self._charts)

    def __len__(self) -> int:
        return len(self._charts)

    def __iter__(self) -> Iterator[ChartSpec]:
        return iter(self.charts)

    def get_chart(self, chart_id: str) -> Optional[ChartSpec]:
        return next((c for c in self._charts if c.id == chart_id), None)

    def _index_of(self, chart_id: str) -> Optional[int]:
        for index, chart in enumerate(self._charts):
            if chart.id == chart_id:
                return index
        return None

    def _fresh_id(self) -> str:
        chart_id = self._new_id()
        while self._index_of(chart_id) is not None:
            chart_id = self._new_id()
        return chart_id

    # ---------- Mutations ----------
    def add_chart(self, chart_type, table: ParsedTable) -> ChartSpec:
        chart_type = ChartType(chart_type)
        headers = table.headers
        chart = ChartSpec(
            id=self._fresh_id(),
            type=chart_type,
            title=default_title(chart_type),
            x_axis=headers[0] if len(headers) > 0 else "",
            y_axis=headers[1] if len(headers) > 1 else "",
        )
        self._charts.append(chart)
        return chart

    def update_chart(self, chart_id: str, **fields) -> Optional[ChartSpec]:
        """Replace only the given fields. Unknown ids are ignored."""
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update chart fields: {', '.join(sorted(unknown))}")

        index = self._index_of(chart_id)
        if index is None:
            return None

        current = self._charts[index]
        updated = ChartSpec.model_validate({**current.model_dump(), **fields})
        self._charts[index] = updated
        return updated

    def remove_chart(self, chart_id: str) -> bool:
        index = self._index_of(chart_id)
        if index is None:
            return False
        del self._charts[index]
        return True

    def apply_suggestion(self, suggestion: Suggestion) -> ChartSpec:
        chart = ChartSpec(
            id=self._fresh_id(),
            type=suggestion.type,
            title=suggestion.title,
            x_axis=suggestion.x_axis,
            y_axis=suggestion.y_axis,
        )
        self._charts.append(chart)
        return chart

    def apply_all_suggestions(self, suggestions: Iterable[Suggestion]) -> List[ChartSpec]:
        return [self.apply_suggestion(s) for s in suggestions]

    # ---------- Persistence shape ----------
    def to_config(self) -> List[dict]:
        return [c.model_dump(mode="json", by_alias=True) for c in self._charts]

    @classmethod
    def from_config(cls, config, id_factory: Optional[IdFactory] = None) -> "ChartModel":
        """Build from a stored chart_config, skipping entries that don't validate."""
        charts: List[ChartSpec] = []
        if isinstance(config, list):
            for entry in config:
                try:
                    charts.append(ChartSpec.model_validate(entry))
                except ValidationError:
                    logger.warning("Skipping invalid chart config entry: %r", entry)
        return cls(charts, id_factory=id_factory)
