from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from tactics import db
from tactics.auth import require_campaign_member, require_dm
from tactics.errors import NotFound
from tactics.models import Campaign, CampaignMember, User, ROLE_DM
from tactics.schemas import CampaignPayload, MemberPayload

campaigns_bp = Blueprint('campaigns', __name__, url_prefix='/api/campaigns')


@campaigns_bp.route('')
@login_required
def list_campaigns():
    memberships = (
        CampaignMember.query
        .join(Campaign, CampaignMember.campaign_id == Campaign.id)
        .filter(CampaignMember.user_id == current_user.id)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .all()
    )
    return jsonify({'campaigns': [
        {'id': m.campaign.id, 'name': m.campaign.name, 'role': m.role}
        for m in memberships
    ]})


@campaigns_bp.route('', methods=['POST'])
@login_required
def create_campaign():
    body = CampaignPayload.model_validate(request.get_json(silent=True) or {})

    # The campaign and its DM membership are committed together, so there is
    # never a campaign without a DM.
    campaign = Campaign(name=body.name, created_by_id=current_user.id)
    campaign.members.append(CampaignMember(user_id=current_user.id, role=ROLE_DM))
    db.session.add(campaign)
    db.session.commit()

    return jsonify({'campaign': {'id': campaign.id, 'name': campaign.name}})


@campaigns_bp.route('/<int:campaign_id>')
@login_required
def campaign_detail(campaign_id):
    membership = require_campaign_member(campaign_id)
    campaign = membership.campaign
    data = campaign.to_dict()
    data['members'] = [m.to_dict() for m in campaign.members]
    return jsonify({'campaign': data})


@campaigns_bp.route('/<int:campaign_id>/role')
@login_required
def campaign_role(campaign_id):
    membership = require_campaign_member(campaign_id)
    return jsonify({'role': membership.role})


# ── Members ───────────────────────────────────────────────────────────────────

@campaigns_bp.route('/<int:campaign_id>/members')
@login_required
def list_members(campaign_id):
    require_campaign_member(campaign_id)
    members = CampaignMember.query.filter_by(campaign_id=campaign_id)\
        .order_by(CampaignMember.id).all()
    return jsonify({'members': [m.to_dict() for m in members]})


@campaigns_bp.route('/<int:campaign_id>/members', methods=['POST'])
@login_required
def add_member(campaign_id):
    require_dm(campaign_id)
    body = MemberPayload.model_validate(request.get_json(silent=True) or {})

    user = User.query.filter_by(email=body.email).first()
    if not user:
        raise NotFound('User not found')

    # Upsert on (user, campaign): adding an existing member changes their role
    member = CampaignMember.query.filter_by(user_id=user.id, campaign_id=campaign_id).first()
    if member:
        member.role = body.role
    else:
        member = CampaignMember(user_id=user.id, campaign_id=campaign_id, role=body.role)
        db.session.add(member)
    db.session.commit()

    return jsonify({'member': member.to_dict()})
