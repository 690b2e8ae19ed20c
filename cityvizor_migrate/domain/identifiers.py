"""
Identifier Mapper - внешние id (MongoDB) → id в PostgreSQL

Один экземпляр на запуск. Профили заполняет стадия profiles, события -
стадия events; остальные стадии только читают.
"""
from typing import Any, Dict, Optional

from cityvizor_migrate.domain.errors import UnresolvedReference


class IdentifierMap:
    """
    Два маппинга, запись один раз / чтение много раз:
    - profile ObjectId → сгенерированный app.profiles.id
    - event ObjectId → числовой srcId (None, если событие не перенесено)

    Ключи нормализуются через str(), ObjectId и его hex-строка - один ключ.
    """

    def __init__(self):
        self._profiles: Dict[str, Optional[int]] = {}
        self._events: Dict[str, Optional[int]] = {}

    @staticmethod
    def _key(external_id: Any) -> Optional[str]:
        if external_id is None:
            return None
        return str(external_id)

    def record_profile_id(self, external_id: Any, internal_id: Optional[int]) -> None:
        """
        Запомнить id профиля

        Args:
            external_id: _id документа профиля
            internal_id: Новый id в app.profiles (None в dry-run)
        """
        self._profiles[self._key(external_id)] = internal_id

    def resolve_profile_id(self, external_id: Any) -> Optional[int]:
        """
        Получить id профиля в PostgreSQL

        Args:
            external_id: _id документа профиля

        Returns:
            app.profiles.id (None в dry-run)

        Raises:
            UnresolvedReference: профиль не был перенесён
        """
        key = self._key(external_id)
        if key is None or key not in self._profiles:
            raise UnresolvedReference("profile", external_id)
        return self._profiles[key]

    def record_event_id(self, external_id: Any, numeric_id: Optional[int]) -> None:
        self._events[self._key(external_id)] = numeric_id

    def resolve_event_id(self, external_id: Any) -> Optional[int]:
        """
        Получить srcId события

        Returns:
            srcId или None, если ссылки нет или событие не перенесено

        Note:
            Отсутствующая ссылка - не ошибка.
        """
        key = self._key(external_id)
        if key is None:
            return None
        return self._events.get(key)

    @property
    def profile_count(self) -> int:
        return len(self._profiles)

    @property
    def event_count(self) -> int:
        return sum(1 for v in self._events.values() if v is not None)
