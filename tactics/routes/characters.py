from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from tactics import db
from tactics.audit import snapshot, write_audit_log
from tactics.auth import (require_campaign_member, require_dm, require_character_editor,
                          get_or_404)
from tactics.errors import NotFound
from tactics.models import Character, CharacterSkill, Skill, AUDIT_CHARACTER
from tactics.progression import resolve_owner, assert_owner_is_member, grant_class_skills
from tactics.schemas import (CharacterPayload, CharacterUpdatePayload, HpPayload,
                             SkillLinkPayload)

characters_bp = Blueprint('characters', __name__, url_prefix='/api')


def _audit(character, action, before, after):
    write_audit_log(AUDIT_CHARACTER, character.id, action,
                    campaign_id=character.campaign_id, user_id=current_user.id,
                    before=before, after=after)


@characters_bp.route('/campaigns/<int:campaign_id>/characters')
@login_required
def list_characters(campaign_id):
    require_campaign_member(campaign_id)
    characters = Character.query.filter_by(campaign_id=campaign_id)\
        .order_by(Character.created_at.desc(), Character.id.desc()).all()
    return jsonify({'characters': [c.to_dict() for c in characters]})


@characters_bp.route('/campaigns/<int:campaign_id>/characters', methods=['POST'])
@login_required
def create_character(campaign_id):
    dm = require_dm(campaign_id)
    body = CharacterPayload.model_validate(request.get_json(silent=True) or {})

    owner_id = resolve_owner(body.kind, body.owner_id, dm.user_id)
    assert_owner_is_member(owner_id, campaign_id)

    character = Character(
        campaign_id=campaign_id,
        name=body.name,
        kind=body.kind,
        owner_id=owner_id,
        stats=body.stats.to_storage(),
        class_name=body.class_name,
        level=body.level,
        exp=body.exp,
        current_hp=body.current_hp if body.current_hp is not None else body.stats.base_hp(),
        weapon_skills=[ws.model_dump() for ws in body.weapon_skills],
    )
    db.session.add(character)
    db.session.flush()

    grant_class_skills(character)
    _audit(character, 'CHARACTER_CREATE', None, snapshot(character))
    db.session.commit()

    return jsonify({'character': character.to_dict()})


@characters_bp.route('/characters/<int:character_id>')
@login_required
def character_detail(character_id):
    character = get_or_404(Character, character_id, 'Character not found')
    require_campaign_member(character.campaign_id)
    return jsonify({'character': character.to_dict()})


@characters_bp.route('/characters/<int:character_id>', methods=['PUT'])
@login_required
def update_character(character_id):
    character = get_or_404(Character, character_id, 'Character not found')
    dm = require_dm(character.campaign_id)
    body = CharacterUpdatePayload.model_validate(request.get_json(silent=True) or {})
    sent = body.model_fields_set

    before = snapshot(character)

    kind = body.kind if body.kind is not None else character.kind
    requested_owner = body.owner_id if 'owner_id' in sent else character.owner_id
    owner_id = resolve_owner(kind, requested_owner, dm.user_id)
    if owner_id != character.owner_id:
        assert_owner_is_member(owner_id, character.campaign_id)

    # Every field keeps its stored value unless the request names it
    character.name = body.name if body.name is not None else character.name
    character.kind = kind
    character.owner_id = owner_id
    if body.stats is not None:
        character.stats = body.stats.to_storage()
    if 'class_name' in sent:
        character.class_name = body.class_name
    character.level = body.level if body.level is not None else character.level
    character.exp = body.exp if body.exp is not None else character.exp
    if body.current_hp is not None:
        character.current_hp = body.current_hp
    if body.weapon_skills is not None:
        character.weapon_skills = [ws.model_dump() for ws in body.weapon_skills]

    grant_class_skills(character)
    _audit(character, 'CHARACTER_UPDATE', before, snapshot(character))
    db.session.commit()

    return jsonify({'character': character.to_dict()})


@characters_bp.route('/characters/<int:character_id>/hp', methods=['PUT'])
@login_required
def update_hp(character_id):
    character = get_or_404(Character, character_id, 'Character not found')
    require_character_editor(character)
    body = HpPayload.model_validate(request.get_json(silent=True) or {})

    before = {'current_hp': character.current_hp}
    character.current_hp = body.current_hp
    _audit(character, 'HP_UPDATE', before, {'current_hp': character.current_hp})
    db.session.commit()

    return jsonify({'character': character.to_dict()})


# ── Skills ────────────────────────────────────────────────────────────────────

@characters_bp.route('/characters/<int:character_id>/skills', methods=['POST'])
@login_required
def add_skill(character_id):
    character = get_or_404(Character, character_id, 'Character not found')
    require_dm(character.campaign_id)
    body = SkillLinkPayload.model_validate(request.get_json(silent=True) or {})
    skill = get_or_404(Skill, body.skill_id, 'Skill not found')

    # Adding a skill the character already has is a no-op
    if not any(link.skill_id == skill.id for link in character.skill_links):
        before = [s.name for s in _skills(character)]
        character.skill_links.append(CharacterSkill(skill=skill))
        db.session.flush()
        _audit(character, 'SKILL_ADD', {'skills': before},
               {'skills': [s.name for s in _skills(character)]})
        db.session.commit()

    return jsonify({'character': character.to_dict()})


@characters_bp.route('/characters/<int:character_id>/skills/<int:skill_id>', methods=['DELETE'])
@login_required
def remove_skill(character_id, skill_id):
    character = get_or_404(Character, character_id, 'Character not found')
    require_dm(character.campaign_id)

    link = next((l for l in character.skill_links if l.skill_id == skill_id), None)
    if link is None:
        raise NotFound('Character does not have that skill')

    before = [s.name for s in _skills(character)]
    character.skill_links.remove(link)
    db.session.flush()
    _audit(character, 'SKILL_REMOVE', {'skills': before},
           {'skills': [s.name for s in _skills(character)]})
    db.session.commit()

    return jsonify({'character': character.to_dict()})


def _skills(character):
    return sorted((link.skill for link in character.skill_links), key=lambda s: s.name.lower())
