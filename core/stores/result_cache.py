# core/stores/result_cache.py
"""Кэш последних результатов измерений по id профиля"""

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class ResultCache:
    """
    Последний известный результат для каждого id

    apply_batch() - частичное слияние: перезаписываются только id из пачки,
    остальные записи не трогаются. Явной инвалидации нет.
    """

    def __init__(self):
        self.results: Dict[str, Any] = {}

    def apply_batch(self, results: Optional[Iterable[Any]]) -> List[str]:
        """
        Применяет пачку результатов

        Args:
            results: объекты с атрибутом id (None = пустая пачка)

        Returns:
            List[str]: id, записи которых обновлены
        """
        updated = []
        for result in results or ():
            self.results[result.id] = result
            updated.append(result.id)

        logger.debug(f"Кэш результатов: обновлено {len(updated)}, всего {len(self.results)}")
        return updated

    def get(self, resource_id: str) -> Optional[Any]:
        return self.results.get(resource_id)

    def snapshot(self) -> Dict[str, Any]:
        return dict(self.results)

    def __contains__(self, resource_id) -> bool:
        return resource_id in self.results

    def __len__(self) -> int:
        return len(self.results)

    def clear(self):
        self.results.clear()
