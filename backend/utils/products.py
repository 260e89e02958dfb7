from datetime import datetime
from pymongo import DESCENDING, ReturnDocument

from models.product import ProductFields
from utils.guards import to_object_id


def build_product_doc(seller: dict, fields: ProductFields) -> dict:
    now = datetime.utcnow()
    return {
        "sellerId": seller["_id"],
        "shopId": seller["_id"],
        "shopName": seller.get("shopName"),
        "shopType": seller.get("shopType"),
        "brand": fields.brand,
        "model": fields.model,
        "productType": fields.productType,
        "color": fields.color,
        # only meaningful for mobiles
        "storage": fields.storage,
        "ram": fields.ram,
        "price": fields.price,
        "image": fields.image,
        "createdAt": now,
        "updatedAt": now,
    }


class CatalogStore:
    """Products, each owned by one seller through ``sellerId``."""

    def __init__(self, db):
        self.collection = db.products

    async def find_by_id(self, product_id):
        oid = to_object_id(product_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})

    async def insert(self, product: dict) -> dict:
        product = dict(product)
        result = await self.collection.insert_one(product)
        product["_id"] = result.inserted_id
        return product

    async def _list(self, query: dict) -> list[dict]:
        # ObjectIds grow with insertion time, so _id desc is newest first
        cursor = self.collection.find(query).sort("_id", DESCENDING)
        return [p async for p in cursor]

    async def list_all(self) -> list[dict]:
        return await self._list({})

    async def list_by_seller(self, seller_id) -> list[dict]:
        return await self._list({"sellerId": to_object_id(seller_id)})

    async def update(self, product_id, changes: ProductFields) -> dict | None:
        """Set only the supplied fields; everything else keeps its value."""
        updates = changes.model_dump(exclude_none=True)
        updates["updatedAt"] = datetime.utcnow()

        return await self.collection.find_one_and_update(
            {"_id": to_object_id(product_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, product_id) -> bool:
        result = await self.collection.delete_one({"_id": to_object_id(product_id)})
        return result.deleted_count == 1
