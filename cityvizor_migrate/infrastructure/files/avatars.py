"""
Аватары профилей - <data_path>/avatars/avatar_<profile id><ext>
"""
import logging
import shutil
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class AvatarStore:

    def __init__(self, data_path: Path, dry_run: bool = False):
        """
        Args:
            data_path: Каталог с данными (внутри него avatars/)
            dry_run: Ничего не удалять и не записывать
        """
        self.directory = Path(data_path) / "avatars"
        self.dry_run = dry_run
        self.writes = 0

    def path_for(self, profile_id: Optional[int], extension: Optional[str]) -> Path:
        return self.directory / f"avatar_{profile_id}{extension or ''}"

    def reset(self) -> None:
        """
        Удалить каталог avatars/ со всем содержимым и создать пустой

        Warning:
            Все старые аватары будут удалены!
        """
        if self.dry_run:
            return
        if self.directory.exists():
            shutil.rmtree(self.directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.writes += 1

    def save(self, profile_id: Optional[int], extension: Optional[str], data: bytes) -> Path:
        """
        Записать аватар профиля

        Args:
            profile_id: Новый id профиля
            extension: Расширение с точкой (".png")
            data: Содержимое файла

        Returns:
            Путь к файлу (в dry-run файл не создаётся)
        """
        path = self.path_for(profile_id, extension)
        if self.dry_run:
            return path
        path.write_bytes(data)
        self.writes += 1
        logger.debug("Saved avatar %s", path.name)
        return path
