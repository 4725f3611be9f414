from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from tactics import db
from tactics.audit import write_audit_log
from tactics.auth import require_dm, require_character_editor, get_or_404
from tactics.inventory import (add_item, remove_item, reorder, equip_weapon,
                               get_inventory_row, CATALOG_USES)
from tactics.models import Character, AUDIT_CHARACTER
from tactics.schemas import (InventoryAddPayload, InventoryUpdatePayload,
                             InventoryOrderPayload, EquipPayload)

inventory_bp = Blueprint('inventory', __name__, url_prefix='/api/characters')


def _inventory_state(character):
    return {
        'inventory': [row.to_dict() for row in character.inventory],
        'equipped_weapon_item_id': character.equipped_weapon_item_id,
    }


def _audit(character, action, before, after):
    write_audit_log(AUDIT_CHARACTER, character.id, action,
                    campaign_id=character.campaign_id, user_id=current_user.id,
                    before=before, after=after)


def _load(character_id):
    return get_or_404(Character, character_id, 'Character not found')


@inventory_bp.route('/<int:character_id>/inventory', methods=['POST'])
@login_required
def add_inventory_item(character_id):
    character = _load(character_id)
    require_dm(character.campaign_id)
    body = InventoryAddPayload.model_validate(request.get_json(silent=True) or {})

    before = _inventory_state(character)
    uses = body.uses if 'uses' in body.model_fields_set else CATALOG_USES
    add_item(character, body.item_id, uses=uses, blessed=body.blessed)
    db.session.flush()
    _audit(character, 'INVENTORY_ADD', before, _inventory_state(character))
    db.session.commit()

    return jsonify({'character': character.to_dict()})


@inventory_bp.route('/<int:character_id>/inventory/<int:row_id>', methods=['DELETE'])
@login_required
def remove_inventory_item(character_id, row_id):
    character = _load(character_id)
    require_dm(character.campaign_id)

    before = _inventory_state(character)
    remove_item(character, row_id)
    db.session.flush()
    _audit(character, 'INVENTORY_REMOVE', before, _inventory_state(character))
    db.session.commit()

    return jsonify({'character': character.to_dict()})


@inventory_bp.route('/<int:character_id>/inventory/<int:row_id>', methods=['PATCH'])
@login_required
def update_inventory_item(character_id, row_id):
    character = _load(character_id)
    require_character_editor(character)
    body = InventoryUpdatePayload.model_validate(request.get_json(silent=True) or {})
    sent = body.model_fields_set

    row = get_inventory_row(character, row_id)
    before = row.to_dict()
    # uses may be set back to null (unlimited); blessed only to a boolean
    if 'uses' in sent:
        row.uses = body.uses
    if body.blessed is not None:
        row.blessed = body.blessed
    db.session.flush()
    _audit(character, 'INVENTORY_UPDATE', before, row.to_dict())
    db.session.commit()

    return jsonify({'character': character.to_dict()})


@inventory_bp.route('/<int:character_id>/inventory/order', methods=['PUT'])
@login_required
def reorder_inventory(character_id):
    character = _load(character_id)
    require_character_editor(character)
    body = InventoryOrderPayload.model_validate(request.get_json(silent=True) or {})

    before = [row.id for row in character.inventory]
    reorder(character, body.ids)
    db.session.flush()
    _audit(character, 'INVENTORY_REORDER', {'order': before},
           {'order': [row.id for row in character.inventory]})
    db.session.commit()

    return jsonify({'character': character.to_dict()})


@inventory_bp.route('/<int:character_id>/equip', methods=['PUT'])
@login_required
def equip(character_id):
    character = _load(character_id)
    membership = require_character_editor(character)
    body = EquipPayload.model_validate(request.get_json(silent=True) or {})

    before = {'equipped_weapon_item_id': character.equipped_weapon_item_id}
    equip_weapon(character, body.character_item_id, acting_is_dm=membership.is_dm)
    _audit(character, 'EQUIP_WEAPON', before,
           {'equipped_weapon_item_id': character.equipped_weapon_item_id})
    db.session.commit()

    return jsonify({'character': character.to_dict()})
