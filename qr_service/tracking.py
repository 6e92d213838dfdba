# qr_service/tracking.py   – one Mongo document per rendered QR code
from __future__ import annotations
import logging
from datetime import datetime, timezone

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from . import config

log = logging.getLogger(__name__)


class TrackingError(Exception):
    """The tracking document could not be written."""


class Tracker:
    def __init__(self, collection):
        self.collection = collection

    @classmethod
    def from_config(cls) -> "Tracker":
        # MongoClient connects lazily; the first insert surfaces outages
        client = MongoClient(config.MONGO_URI, appname=config.APP_NAME)
        return cls(client[config.DB_NAME][config.COLLECTION_NAME])

    def track(self, data: str, fmt: str) -> str:
        doc = {"data": data,
               "format": fmt,
               "timestamp": datetime.now(timezone.utc).isoformat()}
        try:
            res = self.collection.insert_one(doc)
        except PyMongoError as e:
            log.error("tracking insert failed: %s", e)
            raise TrackingError(str(e)) from e
        return str(res.inserted_id)
