def _create(client, **fields):
    body = {'title': 'Session', 'date': '2024-01-01'}
    body.update(fields)
    response = client.post('/api/sessions', json=body)
    assert response.status_code == 201
    return response.get_json()


def test_sessions_are_listed_newest_first(client):
    _create(client, title='First', date='2024-01-01')
    _create(client, title='Third', date='2024-03-01')
    _create(client, title='Second', date='2024-02-01')

    titles = [s['title'] for s in client.get('/api/sessions').get_json()]
    assert titles == ['Third', 'Second', 'First']


def test_sessions_filter_by_adventure(client, adventure):
    _create(client, title='In', adventure_id=adventure['id'])
    _create(client, title='Out')

    titles = [s['title'] for s in
              client.get(f"/api/sessions?adventure={adventure['id']}").get_json()]
    assert titles == ['In']


def test_session_requires_title_and_date(client):
    response = client.post('/api/sessions', json={'title': 'No date'})
    assert response.status_code == 400


def test_session_with_unknown_adventure_is_rejected(client):
    response = client.post('/api/sessions', json={'title': 'Lost', 'date': '2024-01-01',
                                                  'adventure_id': 9999})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Referenced resource does not exist'}


def test_update_and_delete_session(client):
    session = _create(client, text='We met in a tavern.')

    response = client.patch(f"/api/sessions/{session['id']}", json={'text': 'We met at sea.'})
    assert response.get_json()['text'] == 'We met at sea.'
    assert response.get_json()['date'] == '2024-01-01'

    assert client.delete(f"/api/sessions/{session['id']}").status_code == 200
    assert client.get(f"/api/sessions/{session['id']}").status_code == 404
