# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection used for record field values.
#   Documents preserve the full nested value of every field
#   (repeater rows, group mappings, flexible-content layouts).
#
# DOCUMENT SHAPE:
#   {
#     "_id": <record id>,
#     "content_type": "product",
#     "fields": {"field_price": "100", "field_gallery": [{...}, ...]}
#   }
#
# CLASS: MongoClient
# ------------------
#   Stateful — holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None)
#
#   Methods:
#   --------
#   - connect() / disconnect()
#   - ensure_indexes(collection_name, fields) -> None
#   - find_one(collection_name, query, projection=None) -> dict | None
#   - update_one(collection_name, query, update, upsert=False) -> matched count
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoClient(...) as db:` usage.
#
# ==============================================

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure


class MongoClient:
    def __init__(self, host, port, database, user=None, password=None):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.client = None

    def connect(self):
        try:
            if self.user and self.password:
                uri = f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            else:
                uri = f"mongodb://{self.host}:{self.port}/{self.database}"
            self.client = PyMongoClient(uri)
            self.client.admin.command('ping')
            print("Connected to MongoDB successfully.")
        except ConnectionFailure as e:
            print(f"Could not connect to MongoDB: {e}")
            raise
        except OperationFailure as e:
            print(f"Authentication failed: {e}")
            raise

    def disconnect(self):
        if self.client:
            self.client.close()
            print("Disconnected from MongoDB.")
            self.client = None

    def collection(self, collection_name):
        if not self.client:
            raise RuntimeError("Not connected to MongoDB.")
        return self.client[self.database][collection_name]

    def ensure_indexes(self, collection_name, fields):
        # Non-unique single-field indexes, created if missing
        collection = self.collection(collection_name)
        for field_name in fields:
            collection.create_index(field_name, unique=False)
        print(f"Ensured indexes {list(fields)} on '{collection_name}'.")

    def find_one(self, collection_name, query, projection=None):
        return self.collection(collection_name).find_one(query, projection)

    def update_one(self, collection_name, query, update, upsert=False):
        # Returns how many documents matched (0 or 1)
        result = self.collection(collection_name).update_one(query, update, upsert=upsert)
        if upsert and result.upserted_id is not None:
            return 1
        return result.matched_count

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
