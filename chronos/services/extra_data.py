"""Extra-data merge engine.

Combines the global metadata of a chronos context with the metadata supplied
for a single measure. Merged results are cached per measure name until the
measure is flushed.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

from chronos.core.logging import get_logger

logger = get_logger(__name__)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _unique(values: Iterable[Any]) -> List[Any]:
    """Drop exact-value duplicates, keeping the first occurrence in order."""
    result: List[Any] = []
    for value in values:
        # Equality check rather than a set so unhashable tags (dicts) work too
        if value not in result:
            result.append(value)
    return result


def merge_extra_data(global_data: Mapping[str, Any], measure_data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge per-measure metadata with the global metadata.

    Only keys present in ``measure_data`` appear in the result. When a key is
    a sequence on both sides, the measure elements come first followed by the
    global elements, with duplicates removed. Any other value from
    ``measure_data`` wins over the global one.

    Args:
        global_data: Global metadata of the context; never modified
        measure_data: Metadata supplied for one measure

    Returns:
        A new dict that shares no mutable state with either input
    """
    if not measure_data:
        return {}

    merged: Dict[str, Any] = {}
    for key, value in measure_data.items():
        global_value = global_data.get(key)
        if key in global_data and _is_sequence(value) and _is_sequence(global_value):
            merged[key] = copy.deepcopy(_unique(list(value) + list(global_value)))
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ExtraDataStore:
    """Global metadata plus the merged metadata cached per measure name."""

    def __init__(self, global_data: Optional[Mapping[str, Any]] = None):
        # Private copy so callers cannot mutate the global map behind our back
        self._global: Dict[str, Any] = copy.deepcopy(dict(global_data or {}))
        self._by_name: Dict[str, Dict[str, Any]] = {}

    @property
    def global_data(self) -> Dict[str, Any]:
        """Deep copy of the global metadata."""
        return copy.deepcopy(self._global)

    def attach(self, name: str, measure_data: Optional[Mapping[str, Any]]) -> None:
        """Merge and cache metadata for ``name``, replacing any earlier entry.

        A start without metadata clears what an earlier start attached.
        """
        merged = merge_extra_data(self._global, measure_data)
        if merged:
            self._by_name[name] = merged
        else:
            self.discard(name)

    def merge(self, measure_data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Merge against the global map without caching the result."""
        return merge_extra_data(self._global, measure_data)

    def pop(self, name: str) -> Dict[str, Any]:
        """Remove and return the cached metadata for ``name`` (empty if none)."""
        return self._by_name.pop(name, {})

    def discard(self, name: str) -> None:
        self._by_name.pop(name, None)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._by_name)

    def clear(self) -> None:
        self._by_name.clear()
