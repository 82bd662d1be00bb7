"""
MongoDB access for the inventory backend.

One MongoClient is created per process on first use and reused by every
request (pymongo pools connections internally). Routes receive the database
through ``Depends(get_db)`` so tests can swap it out.
"""
import os
import logging
import threading
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "mongodb://localhost:27017"
DEFAULT_DATABASE_NAME = "inventory"

_client: Optional[MongoClient] = None
_client_lock = threading.Lock()


def get_client() -> MongoClient:
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
                logger.info("Connecting to MongoDB")
                _client = MongoClient(url, maxPoolSize=10)
    return _client


def get_db() -> Database:
    return get_client()[os.getenv("DATABASE_NAME", DEFAULT_DATABASE_NAME)]
