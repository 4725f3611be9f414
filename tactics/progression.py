"""
tactics/progression.py: character class rules

Public functions:
  resolve_owner(kind, owner_id, fallback)  who owns a character of this kind
  grant_class_skills(character)            add the class's skills the character lacks
"""

from tactics import db
from tactics.errors import InvalidInput
from tactics.models import GameClass, Skill, CharacterSkill, CampaignMember, KIND_PLAYER


def resolve_owner(kind, owner_id, fallback):
    """Only PLAYER characters have an owner; everything else is the DM's."""
    if kind != KIND_PLAYER:
        return None
    return owner_id if owner_id is not None else fallback


def assert_owner_is_member(owner_id, campaign_id):
    if owner_id is None:
        return
    member = CampaignMember.query.filter_by(user_id=owner_id, campaign_id=campaign_id).first()
    if member is None:
        raise InvalidInput('Owner must be a member of the campaign', details=[
            {'field': 'owner_id', 'message': 'user is not a campaign member', 'type': 'owner'},
        ])


def grant_class_skills(character):
    """Give the character every skill listed on its class that it lacks.

    Unknown skill names are skipped and existing skills are never removed.
    Returns the list of Skill rows that were added.
    """
    if not character.class_name:
        return []
    game_class = GameClass.query.filter_by(name=character.class_name).first()
    if game_class is None or not game_class.skills:
        return []

    skills = Skill.query.filter(Skill.name.in_(game_class.skills)).all()
    owned = {link.skill_id for link in character.skill_links}
    added = []
    for skill in skills:
        if skill.id in owned:
            continue
        character.skill_links.append(CharacterSkill(skill=skill))
        owned.add(skill.id)
        added.append(skill)
    if added:
        db.session.flush()
    return added
