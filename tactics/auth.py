"""
tactics/auth.py: the campaign authorization gate

Every route that touches campaign data goes through these helpers. Access
is decided only by the CampaignMember row for (current user, campaign):

  require_auth()                      → the logged-in User, or 401
  require_campaign_member(campaign)   → the membership row, or 401 / 403
  require_dm(campaign)                → the membership row with role DM, or 401 / 403
  require_character_editor(character) → DM or the character's owning player, or 403

Routes that look an entity up by its own id load it first (404 if it does
not exist) and then re-check membership of the entity's campaign, so an id
from another campaign is answered with 403 rather than its contents.
"""

from flask_login import current_user
from tactics import db
from tactics.errors import Unauthenticated, Forbidden, NotFound
from tactics.models import CampaignMember, ROLE_DM


def require_auth():
    if not current_user.is_authenticated:
        raise Unauthenticated()
    return current_user


def get_membership(user_id, campaign_id):
    return CampaignMember.query.filter_by(user_id=user_id, campaign_id=campaign_id).first()


def require_campaign_member(campaign_id):
    user = require_auth()
    membership = get_membership(user.id, campaign_id)
    if membership is None:
        raise Forbidden()
    return membership


def require_dm(campaign_id):
    membership = require_campaign_member(campaign_id)
    if membership.role != ROLE_DM:
        raise Forbidden('DM role required')
    return membership


def can_edit_character(character, membership, user_id):
    """True if this member may act on the character: DMs always, players
    only on a character they own. Used for HP, inventory order and fields,
    equip, and realtime token moves."""
    if membership is not None and membership.role == ROLE_DM:
        return True
    return character.owner_id is not None and character.owner_id == user_id


def require_character_editor(character):
    membership = require_campaign_member(character.campaign_id)
    if not can_edit_character(character, membership, membership.user_id):
        raise Forbidden('Only the DM or the character owner can do that')
    return membership


def get_or_404(model, entity_id, message=None):
    """Load an entity by primary key, raising NotFound when it is missing."""
    entity = db.session.get(model, entity_id)
    if entity is None:
        raise NotFound(message or f'{model.__name__} not found')
    return entity
