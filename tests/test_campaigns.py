"""Tests for campaigns, membership and the campaign authorization gate."""


class TestCampaigns:

    def test_creator_becomes_dm(self, dm):
        resp = dm.post('/api/campaigns', json={'name': 'Tellius'})
        assert resp.status_code == 200
        campaign_id = resp.get_json()['campaign']['id']

        assert dm.get(f'/api/campaigns/{campaign_id}/role').get_json() == {'role': 'DM'}

    def test_list_is_newest_first_with_role(self, dm, campaign):
        dm.post('/api/campaigns', json={'name': 'Second'})
        campaigns = dm.get('/api/campaigns').get_json()['campaigns']
        assert [c['name'] for c in campaigns] == ['Second', 'Path of Radiance']
        assert all(c['role'] == 'DM' for c in campaigns)

    def test_player_sees_only_their_campaigns(self, player, outsider, campaign):
        assert [c['id'] for c in player.get('/api/campaigns').get_json()['campaigns']] == [campaign]
        assert outsider.get('/api/campaigns').get_json()['campaigns'] == []

    def test_name_too_short(self, dm):
        assert dm.post('/api/campaigns', json={'name': 'X'}).status_code == 400

    def test_detail_lists_members(self, player, campaign):
        resp = player.get(f'/api/campaigns/{campaign}')
        assert resp.status_code == 200
        members = resp.get_json()['campaign']['members']
        assert sorted(m['role'] for m in members) == ['DM', 'PLAYER', 'PLAYER']

    def test_non_member_is_forbidden(self, outsider, campaign):
        assert outsider.get(f'/api/campaigns/{campaign}').status_code == 403
        assert outsider.get(f'/api/campaigns/{campaign}/role').status_code == 403
        assert outsider.get(f'/api/campaigns/{campaign}/members').status_code == 403


class TestMembers:

    def test_unknown_email_is_not_found(self, dm, campaign):
        resp = dm.post(f'/api/campaigns/{campaign}/members', json={'email': 'ghost@example.com'})
        assert resp.status_code == 404
        assert resp.get_json()['error'] == 'User not found'

    def test_players_cannot_add_members(self, player, outsider, campaign):
        resp = player.post(f'/api/campaigns/{campaign}/members',
                           json={'email': outsider.user['email']})
        assert resp.status_code == 403

    def test_role_defaults_to_player(self, dm, outsider, campaign):
        resp = dm.post(f'/api/campaigns/{campaign}/members', json={'email': outsider.user['email']})
        assert resp.get_json()['member']['role'] == 'PLAYER'
        assert outsider.get(f'/api/campaigns/{campaign}/role').get_json() == {'role': 'PLAYER'}

    def test_adding_again_updates_the_role(self, dm, player, campaign):
        resp = dm.post(f'/api/campaigns/{campaign}/members',
                       json={'email': player.user['email'], 'role': 'DM'})
        assert resp.status_code == 200
        assert player.get(f'/api/campaigns/{campaign}/role').get_json() == {'role': 'DM'}

        members = dm.get(f'/api/campaigns/{campaign}/members').get_json()['members']
        assert len([m for m in members if m['user_id'] == player.user['id']]) == 1
