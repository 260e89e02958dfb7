import logging
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

logger = logging.getLogger(__name__)

# IndexOptionsConflict, IndexKeySpecsConflict
INDEX_CONFLICT_CODES = {85, 86}


async def _drop_same_key_indexes(collection, keys, keep: str):
    info = await collection.index_information()
    for name, spec in info.items():
        if name != keep and list(spec.get("key", [])) == list(keys):
            logger.warning("Dropping index %s on %s, replaced by %s", name, collection.name, keep)
            await collection.drop_index(name)


async def _ensure_index(collection, keys, *, name: str, **options):
    """
    Create index ``name``. An older index over the same keys but with other
    options (say, not unique) is dropped and replaced.
    """
    try:
        await collection.create_index(keys, name=name, **options)
    except OperationFailure as e:
        if e.code not in INDEX_CONFLICT_CODES:
            raise
        await _drop_same_key_indexes(collection, keys, keep=name)
        await collection.create_index(keys, name=name, **options)


async def ensure_indexes(db):
    # one account per Google id
    await _ensure_index(
        db.users,
        [("googleId", ASCENDING)],
        name="users_google_id_unique_idx",
        unique=True,
    )

    # one shop per user; settles concurrent registrations
    await _ensure_index(
        db.sellers,
        [("userId", ASCENDING)],
        name="sellers_user_id_unique_idx",
        unique=True,
    )

    await _ensure_index(
        db.products,
        [("sellerId", ASCENDING), ("_id", DESCENDING)],
        name="products_seller_newest_idx",
    )

    await _ensure_index(
        db.audit_logs,
        [("actor_id", ASCENDING), ("created_at", DESCENDING)],
        name="audit_actor_created_idx",
    )
