from tactics import db
from tactics.models import AuditLog


def snapshot(entity):
    """Serialize an entity's current state for an audit record.

    Flushes first so freshly created rows already carry their ids.
    """
    db.session.flush()
    return entity.to_dict()


def write_audit_log(entity_type, entity_id, action, campaign_id, user_id,
                    before=None, after=None):
    """Add an audit record to the current unit of work.

    The record is committed together with the change it describes; callers
    commit once at the end of the request.
    """
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        before=before,
        after=after,
        campaign_id=campaign_id,
        user_id=user_id,
    )
    db.session.add(entry)
    return entry
