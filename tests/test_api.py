import pytest
from fastapi.testclient import TestClient

from notification_store.db.session import get_session
from notification_store.main import app

TARGET_URL = '/api/v1/targets/User/1/notifications'


@pytest.fixture
def client(session):
    def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def _create(client: TestClient, **overrides) -> dict:
    payload = {
        'target': {'type': 'User', 'id': '1'},
        'notifiable': {'type': 'Comment', 'id': '1'},
        'key': 'comment.reply',
        'group': {'type': 'Article', 'id': '10'},
        'parameters': {'excerpt': 'nice post'},
    }
    payload.update(overrides)
    response = client.post('/api/v1/notifications', json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get('/api/v1/health')
    assert response.status_code == 200
    assert response.json() == {'status': 'ok'}


def test_notification_feed_flow(client):
    owner = _create(client)
    assert owner['target'] == {'type': 'User', 'id': '1'}
    assert owner['group_owner_id'] is None
    assert owner['parameters'] == {'excerpt': 'nice post'}
    assert owner['opened_at'] is None

    member = _create(
        client,
        notifiable={'type': 'Comment', 'id': '2'},
        group_owner_id=owner['id'],
        notifier={'type': 'User', 'id': '7'},
    )
    assert member['group_owner_id'] == owner['id']

    unopened = client.get(TARGET_URL, params={'filter': 'unopened'})
    assert unopened.status_code == 200
    assert [item['id'] for item in unopened.json()] == [owner['id']]

    members = client.get(f"/api/v1/notifications/{owner['id']}/group-members")
    assert members.status_code == 200
    assert [item['id'] for item in members.json()] == [member['id']]

    opened = client.post(f"/api/v1/notifications/{owner['id']}/open", params={'with_members': True})
    assert opened.status_code == 200
    assert opened.json()['opened'] is True
    assert opened.json()['notification']['opened_at'] is not None

    again = client.post(f"/api/v1/notifications/{owner['id']}/open")
    assert again.json()['opened'] is False
    assert again.json()['notification']['opened_at'] == opened.json()['notification']['opened_at']

    fetched_member = client.get(f"/api/v1/notifications/{member['id']}")
    assert fetched_member.json()['opened_at'] is not None

    opened_feed = client.get(TARGET_URL, params={'filter': 'opened', 'limit': 5})
    assert [item['id'] for item in opened_feed.json()] == [owner['id']]
    assert client.get(TARGET_URL, params={'filter': 'unopened'}).json() == []


def test_auto_feed_lists_unopened_first(client):
    first = _create(client, notifiable={'type': 'Comment', 'id': '1'})
    second = _create(client, notifiable={'type': 'Comment', 'id': '2'}, key='comment.new')
    client.post(f"/api/v1/notifications/{first['id']}/open")

    feed = client.get(TARGET_URL)
    assert [item['id'] for item in feed.json()] == [second['id'], first['id']]

    filtered = client.get(TARGET_URL, params={'key': 'comment.new'})
    assert [item['id'] for item in filtered.json()] == [second['id']]


def test_open_all_for_target(client):
    _create(client, notifiable={'type': 'Comment', 'id': '1'})
    _create(client, notifiable={'type': 'Like', 'id': '1'}, key='like.created')
    _create(client, target={'type': 'User', 'id': '2'})

    response = client.post(f'{TARGET_URL}/open-all', params={'notifiable_type': 'Like'})
    assert response.json() == {'status': 'ok', 'opened': 1}

    response = client.post(f'{TARGET_URL}/open-all')
    assert response.json() == {'status': 'ok', 'opened': 1}

    other = client.get('/api/v1/targets/User/2/notifications', params={'filter': 'unopened'})
    assert len(other.json()) == 1


def test_group_filter_requires_both_parts(client):
    response = client.get(TARGET_URL, params={'group_type': 'Article'})
    assert response.status_code == 400


def test_member_cannot_own_a_group(client):
    owner = _create(client)
    member = _create(client, group_owner_id=owner['id'])
    response = client.post(
        '/api/v1/notifications',
        json={
            'target': {'type': 'User', 'id': '1'},
            'notifiable': {'type': 'Comment', 'id': '3'},
            'key': 'comment.reply',
            'group_owner_id': member['id'],
        },
    )
    assert response.status_code == 422
    assert response.json()['field'] == 'group_owner'


def test_missing_key_is_rejected(client):
    response = client.post(
        '/api/v1/notifications',
        json={'target': {'type': 'User', 'id': '1'}, 'notifiable': {'type': 'Comment', 'id': '1'}},
    )
    assert response.status_code == 422


def test_unknown_notification_is_404(client):
    assert client.get('/api/v1/notifications/999').status_code == 404
    assert client.post('/api/v1/notifications/999/open').status_code == 404
