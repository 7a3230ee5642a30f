# orderflow/extensions/__init__.py

from flask_cors import CORS
from .db import db, redis_connection

# Only app-aware extensions should be global
cors = CORS()

__all__ = [
    "cors",
    "db",
    "redis_connection"
]
