from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required
from tactics import db
from tactics.auth import require_campaign_member, require_dm, get_or_404
from tactics.grid import build_empty_grid, assert_grid_size, assert_tile_ceiling
from tactics.models import TilePreset
from tactics.schemas import PresetPayload, PresetUpdatePayload

presets_bp = Blueprint('presets', __name__, url_prefix='/api')


def _check_shape(grid, tile_count_x, tile_count_y):
    assert_tile_ceiling(tile_count_x * tile_count_y, current_app.config.get('MAX_TILES', 4096))
    assert_grid_size(grid, tile_count_y, tile_count_x)


@presets_bp.route('/campaigns/<int:campaign_id>/presets')
@login_required
def list_presets(campaign_id):
    require_campaign_member(campaign_id)
    presets = TilePreset.query.filter_by(campaign_id=campaign_id)\
        .order_by(TilePreset.created_at.desc(), TilePreset.id.desc()).all()
    return jsonify({'presets': [p.to_dict() for p in presets]})


@presets_bp.route('/campaigns/<int:campaign_id>/presets', methods=['POST'])
@login_required
def create_preset(campaign_id):
    require_dm(campaign_id)
    body = PresetPayload.model_validate(request.get_json(silent=True) or {})

    tile_grid = body.tile_grid
    if tile_grid is None:
        tile_grid = build_empty_grid(body.tile_count_y, body.tile_count_x)
    _check_shape(tile_grid, body.tile_count_x, body.tile_count_y)

    preset = TilePreset(campaign_id=campaign_id, name=body.name,
                        tile_count_x=body.tile_count_x, tile_count_y=body.tile_count_y,
                        tile_grid=tile_grid)
    db.session.add(preset)
    db.session.commit()

    return jsonify({'preset': preset.to_dict()})


@presets_bp.route('/presets/<int:preset_id>')
@login_required
def preset_detail(preset_id):
    preset = get_or_404(TilePreset, preset_id, 'Preset not found')
    require_campaign_member(preset.campaign_id)
    return jsonify({'preset': preset.to_dict()})


@presets_bp.route('/presets/<int:preset_id>', methods=['PUT'])
@login_required
def update_preset(preset_id):
    preset = get_or_404(TilePreset, preset_id, 'Preset not found')
    require_dm(preset.campaign_id)
    body = PresetUpdatePayload.model_validate(request.get_json(silent=True) or {})

    tile_count_x = body.tile_count_x if body.tile_count_x is not None else preset.tile_count_x
    tile_count_y = body.tile_count_y if body.tile_count_y is not None else preset.tile_count_y
    tile_grid = body.tile_grid if body.tile_grid is not None else preset.tile_grid
    _check_shape(tile_grid, tile_count_x, tile_count_y)

    preset.name = body.name if body.name is not None else preset.name
    preset.tile_count_x = tile_count_x
    preset.tile_count_y = tile_count_y
    preset.tile_grid = tile_grid
    db.session.commit()

    return jsonify({'preset': preset.to_dict()})


@presets_bp.route('/presets/<int:preset_id>', methods=['DELETE'])
@login_required
def delete_preset(preset_id):
    preset = get_or_404(TilePreset, preset_id, 'Preset not found')
    require_dm(preset.campaign_id)
    db.session.delete(preset)
    db.session.commit()
    return jsonify({'ok': True})
