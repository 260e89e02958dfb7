from motor.motor_asyncio import AsyncIOMotorClient

from config.env import MONGO_URI


def connect(uri: str | None = None) -> AsyncIOMotorClient:
    uri = uri or MONGO_URI
    if not uri:
        raise RuntimeError("MONGODB_URI not set")

    return AsyncIOMotorClient(uri)


def get_default_db(client: AsyncIOMotorClient):
    return client.get_default_database()
