from tactics import db
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

ROLE_DM = 'DM'
ROLE_PLAYER = 'PLAYER'
ROLES = (ROLE_DM, ROLE_PLAYER)

KIND_PLAYER = 'PLAYER'
CHARACTER_KINDS = (KIND_PLAYER, 'NPC', 'ENEMY')

CATEGORY_WEAPON = 'WEAPON'
CATEGORY_ITEM = 'ITEM'

ROLL_REGULAR = 'REGULAR'
ROLL_COMBAT = 'COMBAT'

AUDIT_MAP = 'MAP'
AUDIT_CHARACTER = 'CHARACTER'


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(256), unique=True, nullable=False)
    display_name = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    memberships = db.relationship('CampaignMember', backref='user', lazy=True,
                                  cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'email': self.email, 'display_name': self.display_name}

    def to_summary(self):
        """The short form embedded in characters, rolls and audit entries."""
        return {'id': self.id, 'display_name': self.display_name}

    def __repr__(self):
        return f'<User {self.email}>'


class Campaign(db.Model):
    __tablename__ = 'campaigns'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    created_by = db.relationship('User', foreign_keys=[created_by_id])

    # Everything a campaign owns goes away with it
    members = db.relationship('CampaignMember', backref='campaign',
                              cascade='all, delete-orphan')
    characters = db.relationship('Character', backref='campaign',
                                 cascade='all, delete-orphan')
    maps = db.relationship('Map', backref='campaign', cascade='all, delete-orphan')
    tilesets = db.relationship('TileSet', backref='campaign', cascade='all, delete-orphan')
    presets = db.relationship('TilePreset', backref='campaign', cascade='all, delete-orphan')
    audit_logs = db.relationship('AuditLog', backref='campaign', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_by_id': self.created_by_id,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<Campaign {self.name}>'


class CampaignMember(db.Model):
    """Membership of a user in a campaign. The role on this row is the only
    source of privilege: DM can edit everything in the campaign, PLAYER can
    read and act on the characters they own."""
    __tablename__ = 'campaign_members'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_PLAYER)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('user_id', 'campaign_id', name='uq_member_user_campaign'),)

    @property
    def is_dm(self):
        return self.role == ROLE_DM

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'campaign_id': self.campaign_id,
            'role': self.role,
            'user': self.user.to_dict() if self.user else None,
        }

    def __repr__(self):
        return f'<CampaignMember {self.user_id}@{self.campaign_id} {self.role}>'


class GameClass(db.Model):
    __tablename__ = 'game_classes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    base_stats = db.Column(db.JSON, default=dict)
    growths = db.Column(db.JSON, default=dict)
    max_stats = db.Column(db.JSON, default=dict)
    weapon_ranks = db.Column(db.JSON, default=dict)
    promotes_to = db.Column(db.JSON, default=list)
    skills = db.Column(db.JSON, default=list)     # skill names, resolved by name
    types = db.Column(db.JSON, default=list)
    power_bonus = db.Column(db.Integer, default=0)
    exp_bonus = db.Column(db.Integer, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'base_stats': self.base_stats or {},
            'growths': self.growths or {},
            'max_stats': self.max_stats or {},
            'weapon_ranks': self.weapon_ranks or {},
            'promotes_to': self.promotes_to or [],
            'skills': self.skills or [],
            'types': self.types or [],
            'power_bonus': self.power_bonus,
            'exp_bonus': self.exp_bonus,
        }

    def __repr__(self):
        return f'<GameClass {self.name}>'


class Skill(db.Model):
    __tablename__ = 'skills'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    activation = db.Column(db.String(200))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'activation': self.activation,
        }

    def __repr__(self):
        return f'<Skill {self.name}>'


class Item(db.Model):
    """Catalog entry. Weapons carry combat attributes; everything else is
    category ITEM. A laguz item may name the one class allowed to equip it."""
    __tablename__ = 'items'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    type = db.Column(db.String(50), default='item')   # sword, lance, staff, laguz, item...
    category = db.Column(db.String(20), nullable=False, default=CATEGORY_ITEM)
    damage_type = db.Column(db.String(20))            # PHYSICAL / MAGICAL
    weapon_rank = db.Column(db.String(5))
    might = db.Column(db.Integer)
    hit = db.Column(db.Integer)
    crit = db.Column(db.Integer)
    weight = db.Column(db.Integer)
    min_range = db.Column(db.Integer)
    max_range = db.Column(db.Integer)
    range_formula = db.Column(db.String(100))         # e.g. "floor(mag/2)" for siege tomes
    weapon_exp = db.Column(db.Integer)
    effectiveness = db.Column(db.JSON)
    bonus = db.Column(db.JSON)
    uses = db.Column(db.Integer)                      # default charges; NULL = unlimited
    price = db.Column(db.Integer)
    description = db.Column(db.Text)
    class_restriction = db.Column(db.String(120))

    @property
    def is_weapon(self):
        return self.category == CATEGORY_WEAPON

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'category': self.category,
            'damage_type': self.damage_type,
            'weapon_rank': self.weapon_rank,
            'might': self.might,
            'hit': self.hit,
            'crit': self.crit,
            'weight': self.weight,
            'min_range': self.min_range,
            'max_range': self.max_range,
            'range_formula': self.range_formula,
            'weapon_exp': self.weapon_exp,
            'effectiveness': self.effectiveness,
            'bonus': self.bonus,
            'uses': self.uses,
            'price': self.price,
            'description': self.description,
            'class_restriction': self.class_restriction,
        }

    def __repr__(self):
        return f'<Item {self.name}>'


class Character(db.Model):
    __tablename__ = 'characters'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    kind = db.Column(db.String(20), nullable=False, default=KIND_PLAYER)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    # Canonical shape: {"base_stats": {}, "growths": {}, "bonus_stats": {}, "weapon_ranks": {}}
    stats = db.Column(db.JSON, nullable=False, default=dict)
    class_name = db.Column(db.String(120))    # GameClass.name, not a foreign key
    level = db.Column(db.Integer, nullable=False, default=1)
    exp = db.Column(db.Integer, nullable=False, default=0)
    current_hp = db.Column(db.Integer, nullable=False, default=0)
    weapon_skills = db.Column(db.JSON, default=list)   # [{"weapon": "sword", "rank": "B"}]

    # Id of one of this character's own CharacterItem rows. Kept as a plain
    # column: the inventory table already points back here.
    equipped_weapon_item_id = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship('User', foreign_keys=[owner_id])
    inventory = db.relationship('CharacterItem', backref='character',
                                order_by='CharacterItem.sort_order',
                                cascade='all, delete-orphan')
    skill_links = db.relationship('CharacterSkill', backref='character',
                                  cascade='all, delete-orphan')
    token = db.relationship('Token', backref='character', uselist=False,
                            cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'name': self.name,
            'kind': self.kind,
            'owner_id': self.owner_id,
            'owner': self.owner.to_summary() if self.owner else None,
            'stats': self.stats or {},
            'class_name': self.class_name,
            'level': self.level,
            'exp': self.exp,
            'current_hp': self.current_hp,
            'weapon_skills': self.weapon_skills or [],
            'equipped_weapon_item_id': self.equipped_weapon_item_id,
            'inventory': [row.to_dict() for row in self.inventory],
            'skills': sorted((link.skill.to_dict() for link in self.skill_links),
                             key=lambda s: s['name'].lower()),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Character {self.name}>'


class CharacterItem(db.Model):
    """One inventory slot. sort_order is the display and equip order."""
    __tablename__ = 'character_items'

    id = db.Column(db.Integer, primary_key=True)
    character_id = db.Column(db.Integer, db.ForeignKey('characters.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    uses = db.Column(db.Integer, nullable=True)
    blessed = db.Column(db.Boolean, nullable=False, default=False)

    item = db.relationship('Item')

    def to_dict(self):
        return {
            'id': self.id,
            'character_id': self.character_id,
            'item_id': self.item_id,
            'sort_order': self.sort_order,
            'uses': self.uses,
            'blessed': self.blessed,
            'item': self.item.to_dict() if self.item else None,
        }

    def __repr__(self):
        return f'<CharacterItem {self.item_id} #{self.sort_order}>'


class CharacterSkill(db.Model):
    __tablename__ = 'character_skills'

    id = db.Column(db.Integer, primary_key=True)
    character_id = db.Column(db.Integer, db.ForeignKey('characters.id'), nullable=False)
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)

    skill = db.relationship('Skill')

    __table_args__ = (db.UniqueConstraint('character_id', 'skill_id', name='uq_character_skill'),)

    def __repr__(self):
        return f'<CharacterSkill {self.character_id}:{self.skill_id}>'


class Map(db.Model):
    __tablename__ = 'maps'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    image_url = db.Column(db.Text)
    tile_count_x = db.Column(db.Integer, nullable=False, default=10)
    tile_count_y = db.Column(db.Integer, nullable=False, default=10)
    tile_grid = db.Column(db.JSON)        # tile_count_y rows of tile_count_x cells
    grid_size_x = db.Column(db.Integer, nullable=False, default=50)
    grid_size_y = db.Column(db.Integer, nullable=False, default=50)
    grid_offset_x = db.Column(db.Integer, nullable=False, default=0)
    grid_offset_y = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tokens = db.relationship('Token', backref='map', cascade='all, delete-orphan',
                             order_by='Token.created_at')
    rolls = db.relationship('MapRollLog', backref='map', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'name': self.name,
            'image_url': self.image_url,
            'tile_count_x': self.tile_count_x,
            'tile_count_y': self.tile_count_y,
            'tile_grid': self.tile_grid,
            'grid_size_x': self.grid_size_x,
            'grid_size_y': self.grid_size_y,
            'grid_offset_x': self.grid_offset_x,
            'grid_offset_y': self.grid_offset_y,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Map {self.name}>'


class TileSet(db.Model):
    __tablename__ = 'tilesets'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    image_url = db.Column(db.Text, nullable=False)
    tile_size_x = db.Column(db.Integer, nullable=False)
    tile_size_y = db.Column(db.Integer, nullable=False)
    columns = db.Column(db.Integer, nullable=False)
    rows = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    tiles = db.relationship('Tile', backref='tileset', order_by='Tile.index',
                            cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'name': self.name,
            'image_url': self.image_url,
            'tile_size_x': self.tile_size_x,
            'tile_size_y': self.tile_size_y,
            'columns': self.columns,
            'rows': self.rows,
            'tiles': [tile.to_dict() for tile in self.tiles],
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<TileSet {self.name}>'


class Tile(db.Model):
    """One cell of a tileset, addressed by index = row * columns + col."""
    __tablename__ = 'tiles'

    id = db.Column(db.Integer, primary_key=True)
    tileset_id = db.Column(db.Integer, db.ForeignKey('tilesets.id'), nullable=False)
    index = db.Column(db.Integer, nullable=False)
    image_url = db.Column(db.Text, nullable=False)

    __table_args__ = (db.UniqueConstraint('tileset_id', 'index', name='uq_tile_tileset_index'),)

    def to_dict(self):
        return {'id': self.id, 'tileset_id': self.tileset_id, 'index': self.index,
                'image_url': self.image_url}


class TilePreset(db.Model):
    __tablename__ = 'tile_presets'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    tile_count_x = db.Column(db.Integer, nullable=False)
    tile_count_y = db.Column(db.Integer, nullable=False)
    tile_grid = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'name': self.name,
            'tile_count_x': self.tile_count_x,
            'tile_count_y': self.tile_count_y,
            'tile_grid': self.tile_grid,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<TilePreset {self.name}>'


class Token(db.Model):
    __tablename__ = 'tokens'

    id = db.Column(db.Integer, primary_key=True)
    map_id = db.Column(db.Integer, db.ForeignKey('maps.id'), nullable=False)
    # One token per character across every map
    character_id = db.Column(db.Integer, db.ForeignKey('characters.id'), unique=True,
                             nullable=False)
    label = db.Column(db.String(100), nullable=False)
    x = db.Column(db.Integer, nullable=False, default=0)
    y = db.Column(db.Integer, nullable=False, default=0)
    color = db.Column(db.String(20), nullable=False, default='#f43f5e')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        character = self.character
        return {
            'id': self.id,
            'map_id': self.map_id,
            'character_id': self.character_id,
            'label': self.label,
            'x': self.x,
            'y': self.y,
            'color': self.color,
            'character': {
                'id': character.id,
                'name': character.name,
                'kind': character.kind,
                'owner': character.owner.to_summary() if character.owner else None,
            } if character else None,
        }

    def __repr__(self):
        return f'<Token {self.label} ({self.x},{self.y})>'


class MapRollLog(db.Model):
    """A d100 roll made on a map. Never edited or deleted on its own."""
    __tablename__ = 'map_roll_logs'

    id = db.Column(db.Integer, primary_key=True)
    map_id = db.Column(db.Integer, db.ForeignKey('maps.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    type = db.Column(db.String(20), nullable=False)
    roll_a = db.Column(db.Integer, nullable=False)
    roll_b = db.Column(db.Integer, nullable=True)   # COMBAT rolls only
    result = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'map_id': self.map_id,
            'user_id': self.user_id,
            'user': self.user.to_summary() if self.user else None,
            'type': self.type,
            'rolls': [r for r in (self.roll_a, self.roll_b) if r is not None],
            'result': self.result,
            'created_at': _iso(self.created_at),
        }


class AuditLog(db.Model):
    """Before/after record of a privileged change to a map or character.
    entity_id is not a foreign key so the trail outlives the entity."""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    entity_type = db.Column(db.String(20), nullable=False)
    entity_id = db.Column(db.Integer, nullable=False)
    action = db.Column(db.String(50), nullable=False)
    before = db.Column(db.JSON)
    after = db.Column(db.JSON)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User')

    __table_args__ = (db.Index('ix_audit_entity', 'entity_type', 'entity_id'),)

    def to_dict(self):
        return {
            'id': self.id,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'action': self.action,
            'before': self.before,
            'after': self.after,
            'campaign_id': self.campaign_id,
            'user': self.user.to_summary() if self.user else None,
            'created_at': _iso(self.created_at),
        }

    def __repr__(self):
        return f'<AuditLog {self.entity_type}:{self.entity_id} {self.action}>'
