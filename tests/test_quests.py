import pytest

from conftest import query


@pytest.fixture
def quest(client, adventure):
    response = client.post('/api/quests', json={
        'adventure_id': adventure['id'], 'title': 'Find the smugglers',
        'tags': ['main-arc']})
    assert response.status_code == 201
    return response.get_json()


def _add_objective(client, quest_id, description):
    response = client.post(f'/api/quests/{quest_id}/objectives',
                           json={'description': description})
    assert response.status_code == 201
    return response.get_json()


def test_new_quest_defaults(quest):
    assert quest['status'] == 'active'
    assert quest['priority'] == 'medium'
    assert quest['type'] == 'main'
    assert quest['tags'] == ['main-arc']
    assert quest['created_at']
    assert quest['objectives'] == []


def test_quest_requires_title(client):
    assert client.post('/api/quests', json={'description': 'Untitled'}).status_code == 400


def test_quest_status_is_validated(client, quest):
    response = client.patch(f"/api/quests/{quest['id']}", json={'status': 'abandoned'})
    assert response.status_code == 400


def test_list_filters_and_priority_order(client, adventure, quest):
    client.post('/api/quests', json={'title': 'Rescue the mayor', 'priority': 'high',
                                     'type': 'side', 'adventure_id': adventure['id']})
    client.post('/api/quests', json={'title': 'Old rumour', 'priority': 'low',
                                     'status': 'completed'})

    def titles(url):
        return [q['title'] for q in client.get(url).get_json()]

    assert titles('/api/quests') == ['Rescue the mayor', 'Find the smugglers', 'Old rumour']
    assert titles(f"/api/quests?adventure={adventure['id']}") == [
        'Rescue the mayor', 'Find the smugglers']
    assert titles('/api/quests?status=completed') == ['Old rumour']
    assert titles('/api/quests?priority=high') == ['Rescue the mayor']
    assert titles('/api/quests?type=side') == ['Rescue the mayor']


def test_objectives_lifecycle(client, quest):
    first = _add_objective(client, quest['id'], 'Question the harbourmaster')
    second = _add_objective(client, quest['id'], 'Search the old house')
    assert first['completed'] is False

    url = f"/api/quests/{quest['id']}/objectives/{first['id']}"
    patched = client.patch(url, json={'completed': True}).get_json()
    assert patched['completed'] is True
    assert patched['description'] == 'Question the harbourmaster'

    replaced = client.put(url, json={'description': 'Bribe the harbourmaster'}).get_json()
    assert replaced['description'] == 'Bribe the harbourmaster'
    assert replaced['completed'] is False

    data = client.get(f"/api/quests/{quest['id']}").get_json()
    assert [o['id'] for o in data['objectives']] == [first['id'], second['id']]

    assert client.delete(url).status_code == 200
    data = client.get(f"/api/quests/{quest['id']}").get_json()
    assert [o['id'] for o in data['objectives']] == [second['id']]


def test_objective_requires_description(client, quest):
    response = client.post(f"/api/quests/{quest['id']}/objectives", json={'completed': True})
    assert response.status_code == 400


def test_objective_of_another_quest_is_404(client, quest):
    other = client.post('/api/quests', json={'title': 'Other'}).get_json()
    objective = _add_objective(client, other['id'], 'Elsewhere')

    response = client.patch(f"/api/quests/{quest['id']}/objectives/{objective['id']}",
                            json={'completed': True})
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Objective not found'}
    url = f"/api/quests/{quest['id']}/objectives/{objective['id']}"
    assert client.delete(url).status_code == 404


def test_objective_on_missing_quest_is_404(client):
    response = client.post('/api/quests/9999/objectives', json={'description': 'Nope'})
    assert response.status_code == 404


def test_deleting_quest_deletes_objectives(client, quest, db_path):
    _add_objective(client, quest['id'], 'One')
    _add_objective(client, quest['id'], 'Two')

    assert client.delete(f"/api/quests/{quest['id']}").status_code == 200
    assert query(db_path, 'SELECT COUNT(*) FROM quest_objectives') == [(0,)]


def test_patch_bumps_updated_at(client, quest):
    updated = client.patch(f"/api/quests/{quest['id']}", json={'status': 'on_hold'}).get_json()
    assert updated['status'] == 'on_hold'
    assert updated['updated_at'] >= quest['updated_at']
