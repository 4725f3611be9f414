"""Tests for the catalog listings and the JSON catalog importer."""

import json

import pytest

from tactics import db
from tactics.catalog import import_catalog
from tactics.models import Character, GameClass, Item, Skill


class TestListings:

    def test_require_login(self, app):
        client = app.test_client()
        for path in ('/api/classes', '/api/items', '/api/skills'):
            assert client.get(path).status_code == 401

    def test_sorted_by_name(self, player, catalog):
        items = player.get('/api/items').get_json()['items']
        assert [i['name'] for i in items] == ['Cat Claw', 'Iron Sword', 'Steel Lance', 'Vulnerary']
        classes = player.get('/api/classes').get_json()['classes']
        assert [c['name'] for c in classes] == ['Cat', 'Paladin', 'Swordmaster']
        skills = player.get('/api/skills').get_json()['skills']
        assert [s['name'] for s in skills] == ['Canto', 'Vantage', 'Wrath']

    def test_item_fields(self, player, catalog):
        items = {i['name']: i for i in player.get('/api/items').get_json()['items']}
        assert items['Iron Sword']['category'] == 'WEAPON'
        assert items['Iron Sword']['uses'] == 46
        assert items['Cat Claw']['class_restriction'] == 'Cat'


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / 'classes.json').write_text(json.dumps([
        {'name': 'Myrmidon', 'baseStats': {'hp': 16}, 'promotesTo': ['Swordmaster'],
         'skills': ['Adept'], 'expBonus': 10},
    ]))
    (tmp_path / 'skills.json').write_text(json.dumps([
        {'name': 'Adept', 'activacion': 'Speed %'},
    ]))
    (tmp_path / 'items.json').write_text(json.dumps({
        'items': [{'name': 'Elixir', 'usos': 3, 'precio': 3000}],
        'sword': [{'name': 'Killing Edge', 'type': 'sword', 'mt': 9, 'damageType': 0,
                   'maxRange': 1, 'wExp': 2}],
        'anima': [{'name': 'Bolganone', 'type': 'anima', 'damageType': 1,
                   'maxRange': 'floor(mag/2)'}],
    }))
    return tmp_path


class TestImport:

    def test_import_maps_fields(self, app, data_dir):
        with app.app_context():
            counts = import_catalog(str(data_dir))
            db.session.commit()
            assert counts == {'classes': 1, 'skills': 1, 'items': 3}

            myrmidon = GameClass.query.filter_by(name='Myrmidon').one()
            assert myrmidon.base_stats == {'hp': 16}
            assert myrmidon.promotes_to == ['Swordmaster']
            assert myrmidon.exp_bonus == 10
            assert myrmidon.power_bonus == 0

            assert Skill.query.filter_by(name='Adept').one().activation == 'Speed %'

            elixir = Item.query.filter_by(name='Elixir').one()
            assert (elixir.category, elixir.uses, elixir.price) == ('ITEM', 3, 3000)
            edge = Item.query.filter_by(name='Killing Edge').one()
            assert (edge.category, edge.might, edge.damage_type, edge.weapon_exp) == \
                ('WEAPON', 9, 'PHYSICAL', 2)
            tome = Item.query.filter_by(name='Bolganone').one()
            assert (tome.damage_type, tome.max_range, tome.range_formula) == \
                ('MAGICAL', None, 'floor(mag/2)')

    def test_reimport_updates_in_place(self, app, data_dir):
        with app.app_context():
            import_catalog(str(data_dir))
            db.session.commit()
            (data_dir / 'skills.json').write_text(json.dumps([
                {'name': 'Adept', 'activation': 'Skill %'},
            ]))
            import_catalog(str(data_dir))
            db.session.commit()
            assert Skill.query.count() == 1
            assert Item.query.count() == 3
            assert Skill.query.one().activation == 'Skill %'

    def test_missing_files_are_skipped(self, app, tmp_path):
        with app.app_context():
            assert import_catalog(str(tmp_path)) == {'classes': 0, 'skills': 0, 'items': 0}

    def test_cli_command(self, app, data_dir):
        result = app.test_cli_runner().invoke(args=['seed-catalog', str(data_dir)])
        assert result.exit_code == 0
        assert 'Imported 1 classes, 3 items, 1 skills.' in result.output
        with app.app_context():
            assert Item.query.count() == 3


@pytest.fixture
def roster(data_dir):
    (data_dir / 'characterData.json').write_text(json.dumps([
        {
            'stats': {'baseStats': {'hp': 19, 'str': 6},
                      'weaponRanks': {'sword': 'C', 'lance': '-'}},
            'charData': {'name': 'Zihark', 'class': 'Myrmidon', 'level': 5, 'exp': 40},
            'skills': ['Adept', 'Vantage'],
            'inventory': [
                {'name': 'Killing Edge', 'type': 'sword', 'equipped': True},
                {'name': 'Elixir'},
                {'name': 'Wo Dao', 'type': 'sword'},
            ],
        },
    ]))
    return data_dir


class TestImportCharacters:

    def test_roster_lands_in_the_campaign(self, app, roster, campaign):
        with app.app_context():
            counts = import_catalog(str(roster), campaign_id=campaign)
            db.session.commit()
            assert counts['characters'] == 1

            zihark = Character.query.filter_by(campaign_id=campaign, name='Zihark').one()
            assert (zihark.kind, zihark.owner_id) == ('NPC', None)
            assert (zihark.class_name, zihark.level, zihark.exp) == ('Myrmidon', 5, 40)
            assert zihark.stats['base_stats'] == {'hp': 19, 'str': 6}
            assert zihark.current_hp == 19
            # "-" means the weapon cannot be used at all
            assert zihark.weapon_skills == [{'weapon': 'sword', 'rank': 'C'}]

            assert sorted(link.skill.name for link in zihark.skill_links) == ['Adept', 'Vantage']

            rows = zihark.inventory
            assert [row.item.name for row in rows] == ['Killing Edge', 'Elixir', 'Wo Dao']
            assert [row.sort_order for row in rows] == [0, 1, 2]
            assert rows[1].uses == 3
            assert rows[2].item.category == 'WEAPON'
            assert zihark.equipped_weapon_item_id == rows[0].id

    def test_reimport_keeps_one_row_and_current_hp(self, app, roster, campaign):
        with app.app_context():
            import_catalog(str(roster), campaign_id=campaign)
            db.session.commit()
            zihark = Character.query.filter_by(name='Zihark').one()
            zihark.current_hp = 4
            db.session.commit()

            import_catalog(str(roster), campaign_id=campaign)
            db.session.commit()
            zihark = Character.query.filter_by(name='Zihark').one()
            assert Character.query.count() == 1
            assert zihark.current_hp == 4
            assert len(zihark.inventory) == 3
            assert len(zihark.skill_links) == 2
            assert Skill.query.filter_by(name='Vantage').count() == 1

    def test_items_past_capacity_are_skipped(self, app, data_dir, campaign):
        (data_dir / 'characters.json').write_text(json.dumps([
            {'charData': {'name': 'Jill'},
             'inventory': [{'name': f'Trinket {n}'} for n in range(9)]},
        ]))
        with app.app_context():
            import_catalog(str(data_dir), campaign_id=campaign)
            db.session.commit()
            assert len(Character.query.filter_by(name='Jill').one().inventory) == 8

    def test_no_roster_without_a_campaign(self, app, roster):
        with app.app_context():
            assert 'characters' not in import_catalog(str(roster))
            assert Character.query.count() == 0

    def test_cli_campaign_option(self, app, roster, campaign):
        runner = app.test_cli_runner()
        result = runner.invoke(args=['seed-catalog', str(roster), '--campaign', str(campaign)])
        assert result.exit_code == 0
        assert f'Imported 1 characters into campaign {campaign}.' in result.output

        result = runner.invoke(args=['seed-catalog', str(roster), '--campaign', '9999'])
        assert result.exit_code != 0
