"""Initial schema: users, campaigns, catalog, characters, maps, tilesets, audit

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=256), nullable=False),
        sa.Column('display_name', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_table('campaigns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('campaign_members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'campaign_id', name='uq_member_user_campaign')
    )

    op.create_table('game_classes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('base_stats', sa.JSON(), nullable=True),
        sa.Column('growths', sa.JSON(), nullable=True),
        sa.Column('max_stats', sa.JSON(), nullable=True),
        sa.Column('weapon_ranks', sa.JSON(), nullable=True),
        sa.Column('promotes_to', sa.JSON(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('types', sa.JSON(), nullable=True),
        sa.Column('power_bonus', sa.Integer(), nullable=True),
        sa.Column('exp_bonus', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_table('skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('activation', sa.String(length=200), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_table('items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('damage_type', sa.String(length=20), nullable=True),
        sa.Column('weapon_rank', sa.String(length=5), nullable=True),
        sa.Column('might', sa.Integer(), nullable=True),
        sa.Column('hit', sa.Integer(), nullable=True),
        sa.Column('crit', sa.Integer(), nullable=True),
        sa.Column('weight', sa.Integer(), nullable=True),
        sa.Column('min_range', sa.Integer(), nullable=True),
        sa.Column('max_range', sa.Integer(), nullable=True),
        sa.Column('range_formula', sa.String(length=100), nullable=True),
        sa.Column('weapon_exp', sa.Integer(), nullable=True),
        sa.Column('effectiveness', sa.JSON(), nullable=True),
        sa.Column('bonus', sa.JSON(), nullable=True),
        sa.Column('uses', sa.Integer(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('class_restriction', sa.String(length=120), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table('characters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('stats', sa.JSON(), nullable=False),
        sa.Column('class_name', sa.String(length=120), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('exp', sa.Integer(), nullable=False),
        sa.Column('current_hp', sa.Integer(), nullable=False),
        sa.Column('weapon_skills', sa.JSON(), nullable=True),
        sa.Column('equipped_weapon_item_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id']),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('character_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('uses', sa.Integer(), nullable=True),
        sa.Column('blessed', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['character_id'], ['characters.id']),
        sa.ForeignKeyConstraint(['item_id'], ['items.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('character_skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['character_id'], ['characters.id']),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('character_id', 'skill_id', name='uq_character_skill')
    )

    op.create_table('maps',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('tile_count_x', sa.Integer(), nullable=False),
        sa.Column('tile_count_y', sa.Integer(), nullable=False),
        sa.Column('tile_grid', sa.JSON(), nullable=True),
        sa.Column('grid_size_x', sa.Integer(), nullable=False),
        sa.Column('grid_size_y', sa.Integer(), nullable=False),
        sa.Column('grid_offset_x', sa.Integer(), nullable=False),
        sa.Column('grid_offset_y', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('map_id', sa.Integer(), nullable=False),
        sa.Column('character_id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=100), nullable=False),
        sa.Column('x', sa.Integer(), nullable=False),
        sa.Column('y', sa.Integer(), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['character_id'], ['characters.id']),
        sa.ForeignKeyConstraint(['map_id'], ['maps.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('character_id')
    )
    op.create_table('map_roll_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('map_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('roll_a', sa.Integer(), nullable=False),
        sa.Column('roll_b', sa.Integer(), nullable=True),
        sa.Column('result', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['map_id'], ['maps.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('tilesets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('tile_size_x', sa.Integer(), nullable=False),
        sa.Column('tile_size_y', sa.Integer(), nullable=False),
        sa.Column('columns', sa.Integer(), nullable=False),
        sa.Column('rows', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table('tiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tileset_id', sa.Integer(), nullable=False),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['tileset_id'], ['tilesets.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tileset_id', 'index', name='uq_tile_tileset_index')
    )
    op.create_table('tile_presets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('tile_count_x', sa.Integer(), nullable=False),
        sa.Column('tile_count_y', sa.Integer(), nullable=False),
        sa.Column('tile_grid', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entity_type', sa.String(length=20), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('before', sa.JSON(), nullable=True),
        sa.Column('after', sa.JSON(), nullable=True),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])
    op.create_index('ix_audit_entity', 'audit_logs', ['entity_type', 'entity_id'])


def downgrade():
    op.drop_index('ix_audit_entity', table_name='audit_logs')
    op.drop_index('ix_audit_logs_created_at', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_table('tile_presets')
    op.drop_table('tiles')
    op.drop_table('tilesets')
    op.drop_table('map_roll_logs')
    op.drop_table('tokens')
    op.drop_table('maps')
    op.drop_table('character_skills')
    op.drop_table('character_items')
    op.drop_table('characters')
    op.drop_table('items')
    op.drop_table('skills')
    op.drop_table('game_classes')
    op.drop_table('campaign_members')
    op.drop_table('campaigns')
    op.drop_table('users')
