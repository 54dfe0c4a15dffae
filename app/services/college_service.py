"""
College Service - read access to the seeded college directory.
"""

import re
from datetime import datetime
from typing import Any, Iterable, Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import BulkWriteError

from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import serialize_doc, serialize_docs


class CollegeService:

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["colleges"], db)

    def list(self, skip: int, limit: int, search: Optional[str] = None):
        """Returns (colleges, total) sorted by name."""
        query = {}
        if search:
            query["name"] = {"$regex": re.escape(search), "$options": "i"}
        total = self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("name", 1).skip(skip).limit(limit)
        return serialize_docs(cursor), total

    def get(self, college_id: Any) -> Optional[dict]:
        if not ObjectId.is_valid(str(college_id)):
            return None
        return self.collection.find_one({"_id": ObjectId(str(college_id))})

    def exists(self, college_id: Any) -> bool:
        return self.get(college_id) is not None

    def seed(self, names: Iterable[str], replace: bool = False) -> int:
        """Insert colleges by name. Existing names are skipped unless `replace`."""
        if replace:
            self.collection.delete_many({})
        now = datetime.utcnow()
        docs = [{"name": name, "created_at": now, "updated_at": now} for name in names]
        if not docs:
            return 0
        try:
            result = self.collection.insert_many(docs, ordered=False)
            return len(result.inserted_ids)
        except BulkWriteError as e:
            return e.details.get("nInserted", 0)


def college_summary(college: Optional[dict]) -> Optional[dict]:
    """Compact form used when populating users."""
    if college is None:
        return None
    return serialize_doc({"_id": college["_id"], "name": college["name"]})
