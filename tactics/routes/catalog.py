from flask import Blueprint, jsonify
from flask_login import login_required
from tactics.models import GameClass, Item, Skill

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api')


@catalog_bp.route('/classes')
@login_required
def list_classes():
    classes = GameClass.query.order_by(GameClass.name).all()
    return jsonify({'classes': [c.to_dict() for c in classes]})


@catalog_bp.route('/items')
@login_required
def list_items():
    items = Item.query.order_by(Item.name).all()
    return jsonify({'items': [i.to_dict() for i in items]})


@catalog_bp.route('/skills')
@login_required
def list_skills():
    skills = Skill.query.order_by(Skill.name).all()
    return jsonify({'skills': [s.to_dict() for s in skills]})
