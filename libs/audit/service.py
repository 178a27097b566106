from typing import Any, Optional

from libs.audit.models import AuditLog
from libs.common.logging import get_logger
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def record_audit(
    db: AsyncSession,
    *,
    actor_id: str,
    action: str,
    entity_type: str,
    entity_id: Any,
    description: str,
    changes: Optional[dict] = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction.

    Does not commit; the row lands or disappears with the operation it
    describes.
    """
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        description=description,
        changes=_jsonable(changes) if changes is not None else None,
    )
    db.add(entry)
    logger.info(
        "Audit %s %s=%s by %s", action, entity_type, entity_id, actor_id
    )
    return entry
