"""
tactics/inventory.py: inventory and equipment rules

A character carries at most INVENTORY_CAPACITY rows. New rows go to the end
(sort_order = max + 1); removing a row leaves a gap; a reorder rewrites every
sort_order to 0..N-1 in one commit. None of these functions commit: the
route commits once, together with the audit record.
"""

from flask import current_app
from tactics import db
from tactics.errors import Conflict, Forbidden, InvalidInput, NotFound
from tactics.models import CharacterItem, Item

LAGUZ_TYPE = 'laguz'

# Marks "no uses given": the catalog default applies. None means unlimited.
CATALOG_USES = object()


def get_inventory_row(character, row_id):
    for row in character.inventory:
        if row.id == row_id:
            return row
    raise NotFound('Inventory item not found')


def add_item(character, item_id, uses=CATALOG_USES, blessed=False):
    item = db.session.get(Item, item_id)
    if item is None:
        raise NotFound('Item not found')

    capacity = current_app.config.get('INVENTORY_CAPACITY', 8)
    if len(character.inventory) >= capacity:
        raise Conflict(f'Inventory is full (max {capacity} items)')

    orders = [row.sort_order for row in character.inventory]
    row = CharacterItem(
        item=item,
        sort_order=max(orders) + 1 if orders else 0,
        uses=item.uses if uses is CATALOG_USES else uses,
        blessed=blessed,
    )
    character.inventory.append(row)
    return row


def remove_item(character, row_id):
    row = get_inventory_row(character, row_id)
    if character.equipped_weapon_item_id == row.id:
        character.equipped_weapon_item_id = None
    character.inventory.remove(row)
    return row


def reorder(character, ids):
    """Set sort_order to each row's position in ids.

    ids must be exactly the character's current inventory: same size, same
    members, no repeats. Anything else is rejected before a row is touched.
    """
    rows = {row.id: row for row in character.inventory}
    if len(ids) != len(rows) or set(ids) != set(rows):
        raise Conflict('Order must list every inventory item exactly once', details={
            'expected': sorted(rows),
            'received': list(ids),
        })
    for position, row_id in enumerate(ids):
        rows[row_id].sort_order = position
    character.inventory.sort(key=lambda row: row.sort_order)


def equip_weapon(character, row_id, acting_is_dm):
    """Equip one of the character's own weapons, or un-equip with None."""
    if row_id is None:
        character.equipped_weapon_item_id = None
        return None

    row = get_inventory_row(character, row_id)
    item = row.item
    if not item.is_weapon:
        raise InvalidInput('Only weapons can be equipped', details=[
            {'field': 'character_item_id', 'message': f'{item.name} is not a weapon',
             'type': 'not_a_weapon'},
        ])
    if (item.type or '').lower() == LAGUZ_TYPE and item.class_restriction and not acting_is_dm:
        if character.class_name != item.class_restriction:
            raise Forbidden(f'{item.name} can only be equipped by a {item.class_restriction}')

    character.equipped_weapon_item_id = row.id
    return row
