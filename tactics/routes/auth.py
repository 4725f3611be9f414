from flask import Blueprint, request, jsonify, session, current_app
from flask_login import login_user, logout_user, current_user, login_required
from tactics import db, limiter
from tactics.errors import InvalidInput, Unauthenticated
from tactics.models import User
from tactics.schemas import RegisterPayload, LoginPayload

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per minute")
def register():
    body = RegisterPayload.model_validate(request.get_json(silent=True) or {})

    if User.query.filter_by(email=body.email).first():
        raise InvalidInput('Email already registered', details=[
            {'field': 'email', 'message': 'already registered', 'type': 'unique'},
        ])

    user = User(email=body.email, display_name=body.display_name)
    user.set_password(body.password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    return jsonify({'user': user.to_dict()})


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute")
def login():
    body = LoginPayload.model_validate(request.get_json(silent=True) or {})

    user = User.query.filter_by(email=body.email).first()
    if not user or not user.check_password(body.password):
        current_app.logger.warning('Failed login for %s from %s', body.email, request.remote_addr)
        raise Unauthenticated('Invalid credentials')

    login_user(user)
    return jsonify({'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    logout_user()
    session.clear()
    return jsonify({'ok': True})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})
