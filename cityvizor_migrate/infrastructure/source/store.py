"""
Source store - read access to the CityVizor MongoDB collections
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from pymongo import MongoClient

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class SourceStore(ABC):
    """
    Read-only view of the document store

    Every listing returns the full collection in its natural order.
    """

    @abstractmethod
    def profiles(self) -> Iterable[Document]:
        """Profiles without the avatar binary (see fetch_avatar)"""

    @abstractmethod
    def years(self) -> Iterable[Document]:
        pass

    @abstractmethod
    def events(self) -> Iterable[Document]:
        pass

    @abstractmethod
    def payments(self) -> Iterable[Document]:
        pass

    @abstractmethod
    def budgets(self) -> Iterable[Document]:
        pass

    @abstractmethod
    def fetch_avatar(self, profile_id: Any) -> Optional[bytes]:
        """Avatar binary of one profile, None if it has none"""

    def close(self) -> None:
        pass


class MongoSourceStore(SourceStore):
    """
    pymongo implementation over the collections written by the CityVizor app

    Collection names follow the Mongoose models: profiles, etls, events,
    payments, budgets.
    """

    def __init__(self, url: str, database: str, client: Optional[MongoClient] = None):
        self.client = client if client is not None else MongoClient(url)
        self.db = self.client[database]

    def profiles(self) -> Iterable[Document]:
        return self.db["profiles"].find({}, {"avatar.data": 0})

    def years(self) -> Iterable[Document]:
        return self.db["etls"].find({})

    def events(self) -> Iterable[Document]:
        return self.db["events"].find({})

    def payments(self) -> Iterable[Document]:
        return self.db["payments"].find({})

    def budgets(self) -> Iterable[Document]:
        return self.db["budgets"].find({})

    def fetch_avatar(self, profile_id: Any) -> Optional[bytes]:
        doc = self.db["profiles"].find_one({"_id": profile_id}, {"avatar": 1})
        avatar = (doc or {}).get("avatar") or {}
        data = avatar.get("data")
        return bytes(data) if data is not None else None

    def check_connection(self) -> None:
        """
        Raises:
            pymongo.errors.PyMongoError: if MongoDB is unreachable
        """
        self.client.admin.command("ping")

    def close(self) -> None:
        self.client.close()
        logger.info("Disconnected from MongoDB")
