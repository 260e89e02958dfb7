from datetime import datetime
from pymongo.errors import DuplicateKeyError

from models.seller import ShopDetails
from utils.guards import to_object_id


class SellerAlreadyExists(Exception):
    pass


class SellerDirectory:
    """Shops, at most one per user (unique index on ``userId``)."""

    def __init__(self, db):
        self.collection = db.sellers

    async def find_by_user(self, user_id):
        return await self.collection.find_one({"userId": to_object_id(user_id)})

    async def insert(self, user: dict, shop: ShopDetails) -> dict:
        seller = {
            "userId": user["_id"],
            "name": user.get("name"),
            "email": user.get("email"),
            "shopName": shop.shopName,
            "shopType": shop.shopType,
            "shopPhoto": shop.shopPhoto,
            "shopLocation": shop.shopLocation,
            "createdAt": datetime.utcnow(),
        }

        try:
            result = await self.collection.insert_one(seller)
        except DuplicateKeyError as e:
            raise SellerAlreadyExists(str(user["_id"])) from e

        seller["_id"] = result.inserted_id
        return seller
