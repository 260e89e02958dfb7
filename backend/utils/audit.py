import logging
from datetime import datetime

logger = logging.getLogger(__name__)


async def log_audit(
    db,
    actor_id,
    actor_role: str,
    action: str,
    metadata: dict | None = None
):
    """Append an entry to ``audit_logs``. Entries are never updated."""
    await db.audit_logs.insert_one({
        "actor_id": str(actor_id),
        "actor_role": actor_role,
        "action": action,
        "metadata": metadata or {},
        "created_at": datetime.utcnow()
    })
    logger.debug("AUDIT %s actor=%s", action, actor_id)
