"""
tactics/realtime.py: Socket.IO relay for map rooms

Clients join "map:<id>" to receive token and roll events for that map.
Moving a token over the socket needs the same right as moving it through
the REST API would for the token's character: the DM, or the player who
owns the character.

Events in:   map:join {map_id}, map:leave {map_id}, token:move {map_id, token_id, x, y}
Events out:  token:moved, token:created, token:updated, token:deleted,
             roll:created, map:updated, realtime:error (to the sender only)
"""

from flask import current_app
from flask_socketio import emit, join_room, leave_room
from pydantic import ValidationError

from tactics import db, socketio
from tactics.auth import require_campaign_member, can_edit_character
from tactics.errors import ApiError, Forbidden, NotFound, validation_details
from tactics.models import Map, Token
from tactics.schemas import TokenMovePayload


def room_for(map_id):
    return f'map:{map_id}'


def broadcast(map_id, event, payload):
    """Send an event to everyone in a map room.

    Fire-and-forget: the change has already been committed, so a failed
    broadcast is logged and dropped.
    """
    try:
        socketio.emit(event, payload, to=room_for(map_id))
    except Exception:
        current_app.logger.warning('Broadcast of %s to map %s failed', event, map_id,
                                   exc_info=True)


def _report(error):
    db.session.rollback()
    body = error.to_dict()
    body['status'] = error.status_code
    emit('realtime:error', body)


def _map_id(data):
    try:
        return int((data or {}).get('map_id'))
    except (TypeError, ValueError):
        return None


@socketio.on('map:join')
def on_map_join(data):
    try:
        map_id = _map_id(data)
        game_map = db.session.get(Map, map_id) if map_id is not None else None
        if game_map is None:
            raise NotFound('Map not found')
        require_campaign_member(game_map.campaign_id)
    except ApiError as error:
        _report(error)
        return
    join_room(room_for(game_map.id))
    emit('map:joined', {'map_id': game_map.id})


@socketio.on('map:leave')
def on_map_leave(data):
    map_id = _map_id(data)
    if map_id is not None:
        leave_room(room_for(map_id))


@socketio.on('token:move')
def on_token_move(data):
    try:
        payload = TokenMovePayload.model_validate(data or {})
    except ValidationError as exc:
        emit('realtime:error', {'error': 'Invalid request', 'status': 400,
                                'details': validation_details(exc)})
        return

    try:
        token = db.session.get(Token, payload.token_id)
        if token is None or token.map_id != payload.map_id:
            raise NotFound('Token not found')
        membership = require_campaign_member(token.map.campaign_id)
        if not can_edit_character(token.character, membership, membership.user_id):
            raise Forbidden('Only the DM or the character owner can move this token')

        token.x = payload.x
        token.y = payload.y
        db.session.commit()
    except ApiError as error:
        _report(error)
        return

    broadcast(token.map_id, 'token:moved', {'token': token.to_dict()})
