import click
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_socketio import SocketIO
from config import Config
import os

# Create the database object here, but don't attach it to an app yet
db = SQLAlchemy()

# Schema changes are tracked as Alembic revisions under migrations/
migrate = Migrate()

# Login manager: handles session-based user authentication
login_manager = LoginManager()

# Rate limiter: prevents brute-force attacks on login/register.
# Uses in-memory storage by default (sufficient for single-server deployment).
limiter = Limiter(key_func=get_remote_address, default_limits=[])

# Realtime relay: map rooms for token moves and dice rolls
socketio = SocketIO()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Attach the database and migration engine to this app instance
    db.init_app(app)
    migrate.init_app(app, db)

    # Set up Flask-Login. There is no login page to redirect to: an API
    # client without a session gets a JSON 401 instead.
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from tactics.models import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from tactics.errors import Unauthenticated
        raise Unauthenticated()

    # Set up rate limiting
    limiter.init_app(app)

    # Socket.IO handlers must be declared before init_app so every app
    # instance gets them registered on its own server.
    import tactics.realtime  # noqa: F401
    socketio.init_app(app, cors_allowed_origins=app.config.get('CORS_ORIGIN'),
                      async_mode='threading')

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
        os.makedirs(app.instance_path, exist_ok=True)

    from tactics.errors import register_error_handlers
    register_error_handlers(app)

    # Register Blueprints. Each Blueprint is a group of related routes
    from tactics.routes.auth import auth_bp
    from tactics.routes.campaigns import campaigns_bp
    from tactics.routes.characters import characters_bp
    from tactics.routes.inventory import inventory_bp
    from tactics.routes.catalog import catalog_bp
    from tactics.routes.maps import maps_bp
    from tactics.routes.tokens import tokens_bp
    from tactics.routes.tilesets import tilesets_bp
    from tactics.routes.presets import presets_bp
    from tactics.routes.audit import audit_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(campaigns_bp)
    app.register_blueprint(characters_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(maps_bp)
    app.register_blueprint(tokens_bp)
    app.register_blueprint(tilesets_bp)
    app.register_blueprint(presets_bp)
    app.register_blueprint(audit_bp)

    # CLI command: flask seed-catalog path/to/data [--campaign ID]
    # Loads classes.json, items.json and skills.json from the given folder.
    # Catalog entries are global (no campaign_id) and upserted by name, so
    # re-running it only refreshes existing rows. With --campaign, the
    # character roster in the same folder is imported into that campaign.
    @app.cli.command('seed-catalog')
    @click.argument('data_dir')
    @click.option('--campaign', 'campaign_id', type=int, default=None,
                  help='Campaign that receives the character roster.')
    def seed_catalog(data_dir, campaign_id):
        """Import the class, item and skill catalog from JSON files."""
        from tactics.catalog import import_catalog
        from tactics.models import Campaign
        if campaign_id is not None and db.session.get(Campaign, campaign_id) is None:
            raise click.BadParameter(f'no campaign with id {campaign_id}',
                                     param_hint='--campaign')
        counts = import_catalog(data_dir, campaign_id=campaign_id)
        db.session.commit()
        click.echo('Imported {classes} classes, {items} items, {skills} skills.'.format(**counts))
        if 'characters' in counts:
            click.echo('Imported {characters} characters into campaign {campaign}.'.format(
                campaign=campaign_id, **counts))

    return app
