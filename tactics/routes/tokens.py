from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import IntegrityError
from tactics import db
from tactics.auth import require_campaign_member, require_dm, get_or_404
from tactics.errors import Conflict, NotFound
from tactics.models import Character, Map, Token
from tactics.realtime import broadcast
from tactics.schemas import TokenPayload, TokenUpdatePayload

tokens_bp = Blueprint('tokens', __name__, url_prefix='/api')


def _character_for_map(character_id, game_map):
    """The character a token may be bound to: same campaign, no token yet."""
    character = db.session.get(Character, character_id)
    if character is None or character.campaign_id != game_map.campaign_id:
        raise NotFound('Character not found in campaign')
    if character.token is not None:
        raise Conflict('Character already has a token')
    return character


def _commit_binding():
    # The unique index on character_id catches a concurrent binding
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict('Character already has a token')


@tokens_bp.route('/maps/<int:map_id>/tokens')
@login_required
def list_tokens(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_campaign_member(game_map.campaign_id)
    return jsonify({'tokens': [t.to_dict() for t in game_map.tokens]})


@tokens_bp.route('/maps/<int:map_id>/tokens', methods=['POST'])
@login_required
def create_token(map_id):
    game_map = get_or_404(Map, map_id, 'Map not found')
    require_dm(game_map.campaign_id)
    body = TokenPayload.model_validate(request.get_json(silent=True) or {})

    character = _character_for_map(body.character_id, game_map)
    token = Token(map=game_map, character=character, label=body.label,
                  x=body.x, y=body.y, color=body.color or '#f43f5e')
    db.session.add(token)
    _commit_binding()

    broadcast(game_map.id, 'token:created', {'token': token.to_dict()})
    return jsonify({'token': token.to_dict()})


@tokens_bp.route('/tokens/<int:token_id>', methods=['PUT'])
@login_required
def update_token(token_id):
    token = get_or_404(Token, token_id, 'Token not found')
    require_dm(token.map.campaign_id)
    body = TokenUpdatePayload.model_validate(request.get_json(silent=True) or {})

    if body.character_id is not None and body.character_id != token.character_id:
        token.character = _character_for_map(body.character_id, token.map)
    token.x = body.x if body.x is not None else token.x
    token.y = body.y if body.y is not None else token.y
    token.label = body.label if body.label is not None else token.label
    token.color = body.color if body.color is not None else token.color
    _commit_binding()

    broadcast(token.map_id, 'token:updated', {'token': token.to_dict()})
    return jsonify({'token': token.to_dict()})


@tokens_bp.route('/tokens/<int:token_id>', methods=['DELETE'])
@login_required
def delete_token(token_id):
    token = get_or_404(Token, token_id, 'Token not found')
    require_dm(token.map.campaign_id)

    map_id = token.map_id
    db.session.delete(token)
    db.session.commit()

    broadcast(map_id, 'token:deleted', {'token_id': token_id})
    return jsonify({'ok': True})
