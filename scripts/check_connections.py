#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the MongoDB connection and upload directory.
Usage: python scripts/check_connections.py
"""
import os
import sys
sys.path.insert(0, '.')

from app.db.mongodb import check_mongo_connection
from app.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("PLACEMENT PORTAL - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    mongo_ok = check_mongo_connection()
    print("    MongoDB: CONNECTED" if mongo_ok else "    MongoDB: FAILED")

    print("\n[2] Checking upload directory...")
    os.makedirs(settings.upload_dir, exist_ok=True)
    writable = os.access(settings.upload_dir, os.W_OK)
    print(f"    Path: {os.path.abspath(settings.upload_dir)}")
    print("    Uploads: WRITABLE" if writable else "    Uploads: NOT WRITABLE")

    print("\n" + "=" * 50)
    return 0 if mongo_ok and writable else 1


if __name__ == "__main__":
    sys.exit(main())
