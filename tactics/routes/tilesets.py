from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required
from tactics import db
from tactics.auth import require_campaign_member, require_dm, get_or_404
from tactics.errors import InvalidInput
from tactics.grid import assert_tile_ceiling
from tactics.models import TileSet, Tile
from tactics.schemas import TileSetPayload, TileSetUploadPayload
from tactics.tiles import image_size, slice_sheet, to_data_url

tilesets_bp = Blueprint('tilesets', __name__, url_prefix='/api')


@tilesets_bp.route('/campaigns/<int:campaign_id>/tilesets')
@login_required
def list_tilesets(campaign_id):
    require_campaign_member(campaign_id)
    tilesets = TileSet.query.filter_by(campaign_id=campaign_id)\
        .order_by(TileSet.created_at.desc(), TileSet.id.desc()).all()
    return jsonify({'tilesets': [t.to_dict() for t in tilesets]})


@tilesets_bp.route('/campaigns/<int:campaign_id>/tilesets', methods=['POST'])
@login_required
def create_tileset(campaign_id):
    """Register a tileset whose tiles were already cut client-side."""
    require_dm(campaign_id)
    body = TileSetPayload.model_validate(request.get_json(silent=True) or {})

    total = body.columns * body.rows
    assert_tile_ceiling(total, current_app.config.get('MAX_TILES', 4096))

    tiles = body.tiles or []
    indices = [tile.index for tile in tiles]
    if len(set(indices)) != len(indices):
        raise InvalidInput('Tile indices must be unique', details=[
            {'field': 'tiles', 'message': 'duplicate tile index', 'type': 'tile_index'},
        ])
    out_of_range = [i for i in indices if i >= total]
    if out_of_range:
        raise InvalidInput('Tile index out of range', details=[
            {'field': 'tiles', 'message': f'index {i} is not below {total}', 'type': 'tile_index'}
            for i in out_of_range
        ])

    tileset = TileSet(campaign_id=campaign_id, name=body.name, image_url=body.image_url,
                      tile_size_x=body.tile_size_x, tile_size_y=body.tile_size_y,
                      columns=body.columns, rows=body.rows)
    for tile in tiles:
        tileset.tiles.append(Tile(index=tile.index, image_url=tile.image_url))
    db.session.add(tileset)
    db.session.commit()

    return jsonify({'tileset': tileset.to_dict()})


@tilesets_bp.route('/campaigns/<int:campaign_id>/tilesets/upload', methods=['POST'])
@login_required
def upload_tileset(campaign_id):
    """Slice an uploaded sheet into tiles and store both as PNG data URLs."""
    require_dm(campaign_id)

    upload = request.files.get('image')
    if upload is None or not upload.filename:
        raise InvalidInput('Tileset image is required', details=[
            {'field': 'image', 'message': 'file is required', 'type': 'missing'},
        ])

    fields = TileSetUploadPayload.model_validate(request.form.to_dict())
    current_app.logger.info('Tileset upload to campaign %s: %s (%s)',
                            campaign_id, fields.name, upload.filename)

    # Checked before Pillow touches the image
    total = fields.columns * fields.rows
    assert_tile_ceiling(total, current_app.config.get('MAX_TILES', 4096))

    data = upload.read()
    width, height = image_size(data)
    expected_width = fields.columns * fields.tile_size_x
    expected_height = fields.rows * fields.tile_size_y
    if (width, height) != (expected_width, expected_height):
        raise InvalidInput('Tileset image dimensions do not match columns/rows and tile size',
                           details=[{
                               'field': 'image',
                               'message': f'expected {expected_width}x{expected_height}, '
                                          f'got {width}x{height}',
                               'type': 'image_dimensions',
                           }])

    current_app.logger.info('Slicing %d tiles', total)
    sheet_png, pieces = slice_sheet(data, fields.columns, fields.rows,
                                    fields.tile_size_x, fields.tile_size_y)

    tileset = TileSet(campaign_id=campaign_id, name=fields.name,
                      image_url=to_data_url(sheet_png),
                      tile_size_x=fields.tile_size_x, tile_size_y=fields.tile_size_y,
                      columns=fields.columns, rows=fields.rows)
    for index, png in pieces:
        tileset.tiles.append(Tile(index=index, image_url=to_data_url(png)))
    db.session.add(tileset)
    db.session.commit()

    current_app.logger.info('Tileset %s saved with %d tiles', tileset.id, len(pieces))
    return jsonify({'tileset': tileset.to_dict()})


@tilesets_bp.route('/tilesets/<int:tileset_id>')
@login_required
def tileset_detail(tileset_id):
    tileset = get_or_404(TileSet, tileset_id, 'Tileset not found')
    require_campaign_member(tileset.campaign_id)
    return jsonify({'tileset': tileset.to_dict()})
