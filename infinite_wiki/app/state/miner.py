"""State for the phonosemantic miner view."""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from infinite_wiki.core.models import PhonosemanticResult, SearchFilters

from ..services.errors import describe_error
from ..services.gemini_service import GeminiService
from ...utils.observability import get_logger


@dataclass(frozen=True)
class MinerSnapshot:
    filters: SearchFilters = SearchFilters()
    results: Tuple[PhonosemanticResult, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None
    searched: bool = False


def group_by_cluster(
    results: Tuple[PhonosemanticResult, ...] | List[PhonosemanticResult],
) -> "OrderedDict[str, List[PhonosemanticResult]]":
    """Group results by semantic cluster in first-seen order."""

    grouped: "OrderedDict[str, List[PhonosemanticResult]]" = OrderedDict()
    for result in results:
        grouped.setdefault(result.cluster, []).append(result)
    return grouped


class MinerController:
    def __init__(self, service: GeminiService, *, filters: Optional[SearchFilters] = None) -> None:
        self.service = service
        self._lock = threading.Lock()
        self._state = MinerSnapshot(filters=filters or SearchFilters())
        self._logger = get_logger(__name__).bind(component="miner_controller")

    def snapshot(self) -> MinerSnapshot:
        with self._lock:
            return self._state

    def grouped(self) -> Dict[str, List[PhonosemanticResult]]:
        return group_by_cluster(self.snapshot().results)

    def begin(self, filters: Union[SearchFilters, Mapping[str, Any]]) -> MinerSnapshot:
        if not isinstance(filters, SearchFilters):
            filters = SearchFilters(**dict(filters))
        with self._lock:
            self._state = MinerSnapshot(filters=filters, is_loading=True, searched=True)
            return self._state

    def search(self, filters: Union[SearchFilters, Mapping[str, Any]]) -> MinerSnapshot:
        """Run a search synchronously and return the settled state."""

        self.begin(filters)
        return self.run()

    def run(self) -> MinerSnapshot:
        """Execute the search prepared by :meth:`begin`."""

        state = self.snapshot()
        try:
            results = self.service.perform_phonosemantic_search(state.filters)
        except Exception as exc:
            message = describe_error(exc)
            self._logger.error("Phonosemantic search failed", context={"error": message})
            with self._lock:
                self._state = replace(self._state, is_loading=False, error=message)
                return self._state

        self._logger.info(
            "Phonosemantic search finished",
            context={"results": len(results), **state.filters.as_dict()},
        )
        with self._lock:
            self._state = replace(self._state, is_loading=False, results=tuple(results))
            return self._state


__all__ = ["MinerController", "MinerSnapshot", "group_by_cluster"]
