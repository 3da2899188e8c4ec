from .repository import NoSqlRepository, translate_errors
from .settings import MongoSettings, get_mongo_settings

__all__ = ["MongoSettings", "NoSqlRepository", "get_mongo_settings", "translate_errors"]
