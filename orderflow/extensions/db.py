import os
from pymongo import ASCENDING, DESCENDING, MongoClient
from redis import Redis

from ..constants.service_code import COLLECTIONS

# (collection, keys, options) created at startup against a real server
INDEXES = [
    (COLLECTIONS["USERS"], [("email", ASCENDING)], {"unique": True}),
    (COLLECTIONS["USERS"], [("role", ASCENDING)], {}),
    (COLLECTIONS["BUSINESS_ACCOUNTS"], [("owner_id", ASCENDING)], {}),
    (COLLECTIONS["BUSINESS_ACCOUNTS"], [("tenant_path", ASCENDING)], {}),
    (COLLECTIONS["ACTIVITY_LOGS"], [("timestamp", DESCENDING)], {}),
]


class MongoDB:
    def __init__(self):
        self.client = None
        self.db = None

    def init_app(self, app, database=None):
        """Bind the app to MongoDB. A ready database handle (tests, scripts) skips the client."""
        if database is None:
            uri = app.config.get("MONGO_URI") or os.getenv("MONGO_URI", "mongodb://localhost:27017")
            self.client = MongoClient(uri)
            database = self.client[app.config.get("DB_NAME") or "orderflow"]
            for name, keys, options in INDEXES:
                database[name].create_index(keys, **options)

        self.db = database
        app.mongo = database

    def get_database(self):
        if self.db is None:
            raise RuntimeError("MongoDB not initialized")
        return self.db


class RedisConnection:
    def __init__(self):
        self.connection = None

    def init_app(self, app, connection=None):
        if connection is None:
            connection = Redis(
                host=app.config.get("REDIS_HOST", "localhost"),
                port=int(app.config.get("REDIS_PORT", 6379)),
            )
        self.connection = connection


db = MongoDB()
redis_connection = RedisConnection()
