"""
Database module - MongoDB connection.
"""
from app.db.mongodb import get_db, get_mongo_db, check_mongo_connection, COLLECTIONS

__all__ = [
    "get_db",
    "get_mongo_db",
    "check_mongo_connection",
    "COLLECTIONS",
]
