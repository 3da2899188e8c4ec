from .session import dispose_mongo, get_mongo_db, initialize_mongo, ping_mongo

__all__ = ["dispose_mongo", "get_mongo_db", "initialize_mongo", "ping_mongo"]
