from bson import ObjectId
from bson.errors import InvalidId

# -------------------------------
# ObjectId Guard
# -------------------------------

def to_object_id(value) -> ObjectId | None:
    """Return ``value`` as an ObjectId, or None when it cannot be one."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
