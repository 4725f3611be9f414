"""
tactics/catalog.py: import the global class, item and skill catalog

The catalog lives in JSON files in one folder:

  classes.json     list of classes (baseStats, growths, maxStats, weaponRanks,
                   promotesTo, skills, types, powerBonus, expBonus)
  items.json       a list of items, or an object of lists keyed by weapon type
  skills.json      list of skills (name, description, activation)
  characters.json  optional roster ({stats, charData, skills, inventory});
                   characterData.json is read when characters.json is absent

Classes, items and skills are upserted by name. Characters are imported
only into a campaign named by the caller, upserted by name within it.
Nothing here commits.
"""

import json
import os

from flask import current_app
from tactics import db
from tactics.errors import Conflict
from tactics.inventory import add_item
from tactics.models import (GameClass, Item, Skill, Character, CharacterSkill,
                            CATEGORY_WEAPON, CATEGORY_ITEM)
from tactics.progression import grant_class_skills
from tactics.schemas import CharacterStats

# Buckets read, in order, when items.json is an object
ITEM_BUCKETS = ('items', 'sword', 'lance', 'axe', 'bow', 'anima', 'light', 'dark',
                'staff', 'laguz')

CHARACTER_FILES = ('characters.json', 'characterData.json')

# Weapon rank placeholder for "cannot use"
NO_RANK = '-'


def _load(data_dir, filename):
    path = os.path.join(data_dir, filename)
    if not os.path.exists(path):
        current_app.logger.warning('Catalog file %s not found, skipping', path)
        return []
    with open(path, encoding='utf-8') as f:
        return json.load(f)


def _upsert(model, name):
    row = model.query.filter_by(name=name).first()
    if row is None:
        row = model(name=name)
        db.session.add(row)
    return row


def _pick(entry, *keys):
    """First key present in the entry; the catalog mixes naming styles."""
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def import_classes(entries):
    for entry in entries:
        game_class = _upsert(GameClass, entry['name'])
        game_class.description = entry.get('description')
        game_class.base_stats = _pick(entry, 'baseStats', 'base_stats') or {}
        game_class.growths = entry.get('growths') or {}
        game_class.max_stats = _pick(entry, 'maxStats', 'max_stats') or {}
        game_class.weapon_ranks = _pick(entry, 'weaponRanks', 'weapon_ranks') or {}
        game_class.promotes_to = _pick(entry, 'promotesTo', 'promotes_to') or []
        game_class.skills = entry.get('skills') or []
        game_class.types = entry.get('types') or []
        game_class.power_bonus = _pick(entry, 'powerBonus', 'power_bonus') or 0
        game_class.exp_bonus = _pick(entry, 'expBonus', 'exp_bonus') or 0
    return len(entries)


def import_skills(entries):
    for entry in entries:
        skill = _upsert(Skill, entry['name'])
        skill.description = entry.get('description')
        skill.activation = _pick(entry, 'activation', 'activacion')
    return len(entries)


def _damage_type(value):
    if isinstance(value, int):
        return 'PHYSICAL' if value == 0 else 'MAGICAL'
    if isinstance(value, str):
        return value.upper()
    return None


def _category(item_type):
    return CATEGORY_WEAPON if item_type != 'item' else CATEGORY_ITEM


def import_items(data):
    if isinstance(data, dict):
        entries = [entry for bucket in ITEM_BUCKETS for entry in data.get(bucket, [])]
    else:
        entries = list(data)

    for entry in entries:
        item_type = entry.get('type') or 'item'
        max_range = _pick(entry, 'maxRange', 'max_range')

        item = _upsert(Item, entry['name'])
        item.type = item_type
        item.category = _category(item_type)
        item.damage_type = _damage_type(_pick(entry, 'damageType', 'damage_type'))
        item.weapon_rank = _pick(entry, 'weaponRank', 'weapon_rank')
        item.might = _pick(entry, 'mt', 'might')
        item.hit = entry.get('hit')
        item.crit = entry.get('crit')
        item.weight = entry.get('weight')
        item.min_range = _pick(entry, 'minRange', 'min_range')
        # A non-numeric range is a formula, e.g. siege tomes reaching mag/2
        if isinstance(max_range, str):
            item.max_range = None
            item.range_formula = max_range
        else:
            item.max_range = max_range
            item.range_formula = _pick(entry, 'rangeFormula', 'range_formula')
        item.weapon_exp = _pick(entry, 'wExp', 'weapon_exp')
        item.effectiveness = entry.get('effectiveness')
        item.bonus = entry.get('bonus')
        item.uses = _pick(entry, 'uses', 'usos')
        item.price = _pick(entry, 'price', 'precio')
        item.description = entry.get('description')
        item.class_restriction = _pick(entry, 'classRestriction', 'class_restriction')
    return len(entries)


def _skill_by_name(name):
    skill = Skill.query.filter_by(name=name).first()
    if skill is None:
        skill = Skill(name=name)
        db.session.add(skill)
        db.session.flush()
    return skill


def _item_by_name(entry):
    """Catalog item named by a roster entry; unknown names become bare items."""
    item = Item.query.filter_by(name=entry['name']).first()
    if item is None:
        item_type = entry.get('type') or 'item'
        item = Item(name=entry['name'], type=item_type, category=_category(item_type))
        db.session.add(item)
        db.session.flush()
    return item


def _weapon_skills(weapon_ranks):
    return [{'weapon': weapon, 'rank': rank}
            for weapon, rank in weapon_ranks.items() if rank and rank != NO_RANK]


def import_characters(entries, campaign_id):
    """Upsert roster characters into a campaign as NPCs.

    Listed skills and items are linked when missing, creating bare catalog
    rows for names the catalog does not know. Items past the inventory
    capacity are skipped. Hit points are only set on first import.
    """
    for entry in entries:
        char_data = entry.get('charData') or {}
        name = char_data.get('name') or entry['name']
        stats = CharacterStats.model_validate(entry.get('stats') or {})

        character = Character.query.filter_by(campaign_id=campaign_id, name=name).first()
        if character is None:
            character = Character(campaign_id=campaign_id, name=name,
                                  current_hp=stats.base_hp())
            db.session.add(character)
        character.kind = 'NPC'
        character.owner_id = None
        character.stats = stats.to_storage()
        character.class_name = char_data.get('class')
        character.level = char_data.get('level') or 1
        character.exp = char_data.get('exp') or 0
        character.weapon_skills = _weapon_skills(stats.weapon_ranks)
        db.session.flush()

        owned = {link.skill_id for link in character.skill_links}
        for skill_name in entry.get('skills') or []:
            skill = _skill_by_name(skill_name)
            if skill.id not in owned:
                character.skill_links.append(CharacterSkill(skill=skill))
                owned.add(skill.id)

        held = {row.item_id: row for row in character.inventory}
        for item_entry in entry.get('inventory') or []:
            item = _item_by_name(item_entry)
            row = held.get(item.id)
            if row is None:
                try:
                    row = add_item(character, item.id)
                except Conflict:
                    current_app.logger.warning('Inventory of %s is full, skipping %s',
                                               name, item.name)
                    continue
                db.session.flush()
                held[item.id] = row
            if item_entry.get('equipped') and item.is_weapon:
                character.equipped_weapon_item_id = row.id

        grant_class_skills(character)
    db.session.flush()
    return len(entries)


def _load_roster(data_dir):
    for filename in CHARACTER_FILES:
        if os.path.exists(os.path.join(data_dir, filename)):
            return _load(data_dir, filename)
    current_app.logger.warning('No character roster in %s, skipping', data_dir)
    return []


def import_catalog(data_dir, campaign_id=None):
    counts = {
        'classes': import_classes(_load(data_dir, 'classes.json')),
        'skills': import_skills(_load(data_dir, 'skills.json')),
        'items': import_items(_load(data_dir, 'items.json')),
    }
    # Characters reference the rows above, so they go last
    if campaign_id is not None:
        counts['characters'] = import_characters(_load_roster(data_dir), campaign_id)
    current_app.logger.info('Catalog import from %s: %s', data_dir, counts)
    return counts
