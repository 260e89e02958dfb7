import logging
from datetime import datetime
from pymongo import ReturnDocument

from config.constants import ROLE_CUSTOMER
from models.user import GoogleProfile
from utils.guards import to_object_id

logger = logging.getLogger(__name__)


class IdentityStore:
    """Users keyed by their Google account id."""

    def __init__(self, db):
        self.collection = db.users

    async def find_by_id(self, user_id):
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})

    async def upsert_from_profile(self, profile: GoogleProfile) -> dict:
        """
        Create the user on first login; a repeat login returns the stored
        record untouched.
        """
        user = await self.collection.find_one_and_update(
            {"googleId": profile.sub},
            {
                "$setOnInsert": {
                    "googleId": profile.sub,
                    "name": profile.name,
                    "email": profile.email,
                    "picture": profile.picture,
                    "role": ROLE_CUSTOMER,
                    "createdAt": datetime.utcnow(),
                }
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return user

    async def set_role(self, user_id, role: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"role": role}},
        )
        logger.info("USER_ROLE_SET user=%s role=%s", user_id, role)
