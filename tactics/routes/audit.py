from flask import Blueprint, jsonify
from flask_login import login_required
from tactics.auth import require_dm, get_or_404
from tactics.models import AuditLog, Character, Map, AUDIT_MAP, AUDIT_CHARACTER

audit_bp = Blueprint('audit', __name__, url_prefix='/api')


def _logs_for(entity_type, entity_id, campaign_id):
    logs = AuditLog.query.filter_by(entity_type=entity_type, entity_id=entity_id,
                                    campaign_id=campaign_id)\
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).all()
    return jsonify({'logs': [log.to_dict() for log in logs]})


@audit_bp.route('/maps/<int:map_id>/audit')
@login_required
def map_audit(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_dm(game_map.campaign_id)
    return _logs_for(AUDIT_MAP, map_id, game_map.campaign_id)


@audit_bp.route('/characters/<int:character_id>/audit')
@login_required
def character_audit(character_id):
    character = get_or_404(Character, character_id, 'Character not found')
    require_dm(character.campaign_id)
    return _logs_for(AUDIT_CHARACTER, character_id, character.campaign_id)
