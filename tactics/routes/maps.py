from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from tactics import db
from tactics.audit import snapshot, write_audit_log
from tactics.auth import require_campaign_member, require_dm, get_or_404
from tactics.dice import resolve_roll
from tactics.grid import build_empty_grid, assert_grid_size
from tactics.models import Map, MapRollLog, AUDIT_MAP
from tactics.realtime import broadcast
from tactics.schemas import MapPayload, MapUpdatePayload, RollPayload

maps_bp = Blueprint('maps', __name__, url_prefix='/api')

# Fields copied as-is from an update body when present
MAP_FIELDS = ('name', 'image_url', 'grid_size_x', 'grid_size_y', 'grid_offset_x', 'grid_offset_y')


def _audit(game_map, action, before, after):
    write_audit_log(AUDIT_MAP, game_map.id, action,
                    campaign_id=game_map.campaign_id, user_id=current_user.id,
                    before=before, after=after)


@maps_bp.route('/campaigns/<int:campaign_id>/maps')
@login_required
def list_maps(campaign_id):
    require_campaign_member(campaign_id)
    maps = Map.query.filter_by(campaign_id=campaign_id)\
        .order_by(Map.created_at.desc(), Map.id.desc()).all()
    return jsonify({'maps': [m.to_dict() for m in maps]})


@maps_bp.route('/campaigns/<int:campaign_id>/maps', methods=['POST'])
@login_required
def create_map(campaign_id):
    require_dm(campaign_id)
    body = MapPayload.model_validate(request.get_json(silent=True) or {})

    tile_grid = body.tile_grid
    if tile_grid is None:
        tile_grid = build_empty_grid(body.tile_count_y, body.tile_count_x)
    assert_grid_size(tile_grid, body.tile_count_y, body.tile_count_x)

    game_map = Map(
        campaign_id=campaign_id,
        name=body.name,
        image_url=body.image_url,
        tile_count_x=body.tile_count_x,
        tile_count_y=body.tile_count_y,
        tile_grid=tile_grid,
        grid_size_x=body.grid_size_x,
        grid_size_y=body.grid_size_y,
        grid_offset_x=body.grid_offset_x,
        grid_offset_y=body.grid_offset_y,
    )
    db.session.add(game_map)
    _audit(game_map, 'MAP_CREATE', None, snapshot(game_map))
    db.session.commit()

    return jsonify({'map': game_map.to_dict()})


@maps_bp.route('/maps/<int:map_id>')
@login_required
def map_detail(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_campaign_member(game_map.campaign_id)
    data = game_map.to_dict()
    data['tokens'] = [t.to_dict() for t in game_map.tokens]
    return jsonify({'map': data})


@maps_bp.route('/maps/<int:map_id>', methods=['PUT'])
@login_required
def update_map(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_dm(game_map.campaign_id)
    body = MapUpdatePayload.model_validate(request.get_json(silent=True) or {})

    tile_count_x = body.tile_count_x if body.tile_count_x is not None else game_map.tile_count_x
    tile_count_y = body.tile_count_y if body.tile_count_y is not None else game_map.tile_count_y
    tile_grid = body.tile_grid if body.tile_grid is not None else game_map.tile_grid
    # A stored grid must still fit when only the counts change
    if tile_grid is not None:
        assert_grid_size(tile_grid, tile_count_y, tile_count_x)

    before = snapshot(game_map)
    for field in MAP_FIELDS:
        value = getattr(body, field)
        if value is not None:
            setattr(game_map, field, value)
    game_map.tile_count_x = tile_count_x
    game_map.tile_count_y = tile_count_y
    game_map.tile_grid = tile_grid

    _audit(game_map, 'MAP_UPDATE', before, snapshot(game_map))
    db.session.commit()

    broadcast(game_map.id, 'map:updated', {'map': game_map.to_dict()})
    return jsonify({'map': game_map.to_dict()})


@maps_bp.route('/maps/<int:map_id>', methods=['DELETE'])
@login_required
def delete_map(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_dm(game_map.campaign_id)

    _audit(game_map, 'MAP_DELETE', snapshot(game_map), None)
    db.session.delete(game_map)
    db.session.commit()

    return jsonify({'ok': True})


# ── Rolls ─────────────────────────────────────────────────────────────────────

@maps_bp.route('/maps/<int:map_id>/rolls')
@login_required
def list_rolls(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_campaign_member(game_map.campaign_id)
    rolls = MapRollLog.query.filter_by(map_id=map_id)\
        .order_by(MapRollLog.created_at.desc(), MapRollLog.id.desc()).all()
    return jsonify({'rolls': [r.to_dict() for r in rolls]})


@maps_bp.route('/maps/<int:map_id>/rolls', methods=['POST'])
@login_required
def create_roll(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_campaign_member(game_map.campaign_id)
    body = RollPayload.model_validate(request.get_json(silent=True) or {})

    roll_a, roll_b, result = resolve_roll(body.type)
    roll = MapRollLog(map_id=game_map.id, user_id=current_user.id, type=body.type,
                      roll_a=roll_a, roll_b=roll_b, result=result)
    db.session.add(roll)
    db.session.commit()

    broadcast(game_map.id, 'roll:created', {'roll': roll.to_dict()})
    return jsonify({'roll': roll.to_dict()})
