import pytest

from wordrun import create_app
from wordrun.config import TestingConfig
from wordrun.websocket.notifier import SocketIONotifier


@pytest.fixture
def app_and_socketio(services):
    app, socketio = create_app(TestingConfig, services=services)
    return app, socketio


@pytest.fixture
def client(app_and_socketio):
    app, _ = app_and_socketio
    return app.test_client()


def register_and_login(client, username, password="secret123"):
    response = client.post('/api/auth/register', json={'username': username, 'password': password})
    assert response.status_code == 201
    response = client.post('/api/auth/login', json={'username': username, 'password': password})
    assert response.status_code == 200
    body = response.get_json()
    return body['token'], body['user']


def auth(token):
    return {'Authorization': f'Bearer {token}'}


def test_register_login_verify(client):
    token, user = register_and_login(client, "Alice")

    assert user['username'] == "alice"
    response = client.get('/api/auth/verify', headers=auth(token))
    assert response.status_code == 200
    assert response.get_json()['user']['id'] == user['id']


def test_register_duplicate_and_bad_login(client):
    register_and_login(client, "alice")

    duplicate = client.post('/api/auth/register', json={'username': 'alice', 'password': 'secret123'})
    bad_login = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrong-pass'})

    assert duplicate.status_code == 409
    assert bad_login.status_code == 401
    assert bad_login.get_json() == {'success': False, 'error': 'Invalid username or password'}


def test_game_routes_require_token(client):
    assert client.post('/api/infinite/start').status_code == 401
    response = client.get('/api/infinite/run', headers=auth('not-a-token'))
    assert response.status_code == 401
    assert response.get_json()['success'] is False


def test_solo_run_flow(client, services):
    token, user = register_and_login(client, "alice")

    started = client.post('/api/infinite/start', headers=auth(token)).get_json()
    assert started['success'] is True
    assert started['run']['status'] == 'active'
    assert started['total_words'] == 5

    target = services.stores.runs.find_active_for_user(user['id']).target_word
    won = client.post('/api/infinite/guess', headers=auth(token), json={'guess': target.lower()})
    body = won.get_json()

    assert won.status_code == 200
    assert body['outcome'] == 'word_won'
    assert body['evaluation']['pattern'] == '22222'
    assert body['run']['current_score'] == 1
    assert body['user']['progress']['record'] == 1

    current = client.get('/api/infinite/run', headers=auth(token)).get_json()
    assert current['run']['words_completed'] == 1


def test_error_codes(client):
    token, _ = register_and_login(client, "alice")

    assert client.get('/api/infinite/run', headers=auth(token)).status_code == 404

    client.post('/api/infinite/start', headers=auth(token))
    invalid = client.post('/api/infinite/guess', headers=auth(token), json={'guess': 'QQQQQ'})
    assert invalid.status_code == 400
    assert invalid.get_json() == {'success': False, 'error': 'Guess word is not allowed'}

    client.post('/api/infinite/guess', headers=auth(token), json={'guess': 'CRANE'})
    duplicate = client.post('/api/infinite/guess', headers=auth(token), json={'guess': 'CRANE'})
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"] == "You already tried this word"


def test_words_and_ranking(client):
    token, _ = register_and_login(client, "alice")

    words = client.get('/api/infinite/words?page=1&page_size=2', headers=auth(token)).get_json()
    ranking = client.get('/api/infinite/ranking', headers=auth(token)).get_json()

    assert words['items'] == ['ALLOY', 'LOYAL']
    assert words['total_pages'] == 3
    assert ranking['ranking'][0]['username'] == 'alice'


def test_coop_flow_over_http(client, services):
    alice_token, alice = register_and_login(client, "alice")
    bruno_token, bruno = register_and_login(client, "bruno")

    created = client.post('/api/infinite/coop/rooms', headers=auth(alice_token))
    assert created.status_code == 201
    room_id = created.get_json()['room']['room_id']

    again = client.post('/api/infinite/coop/rooms', headers=auth(alice_token)).get_json()
    assert again['already_in_room'] is True

    joined = client.post(f'/api/infinite/coop/rooms/{room_id}/join', headers=auth(bruno_token)).get_json()
    assert joined['room']['status'] == 'playing'
    assert joined['current_turn_player']['user_id'] == alice['id']
    assert joined['is_my_turn'] is False

    out_of_turn = client.post('/api/infinite/coop/guess', headers=auth(bruno_token), json={'guess': 'CRANE'})
    assert out_of_turn.status_code == 403
    assert out_of_turn.get_json()['error'] == 'Not your turn! Wait for alice to play.'

    target = services.coop_runs.get_coop_run(room_id).target_word
    won = client.post('/api/infinite/coop/guess', headers=auth(alice_token), json={'guess': target}).get_json()
    assert won['outcome'] == 'word_won'
    assert won['next_turn_player_id'] == bruno['id']

    view = client.get(f'/api/infinite/coop/rooms/{room_id}', headers=auth(bruno_token)).get_json()
    assert view['is_my_turn'] is True
    assert view['room']['games_played'] == 1

    abandoned = client.post('/api/infinite/coop/abandon', headers=auth(bruno_token), json={})
    assert abandoned.get_json()['outcome'] == 'abandoned'

    rematch = client.post(f'/api/infinite/coop/rooms/{room_id}/rematch', headers=auth(alice_token))
    assert rematch.status_code == 200
    answer = client.post(
        f'/api/infinite/coop/rooms/{room_id}/rematch/respond',
        headers=auth(bruno_token), json={'accepted': True},
    ).get_json()
    assert answer['new_room_id'] != room_id
    assert answer['new_room']['current_turn_player']['user_id'] == bruno['id']


def test_room_view_requires_membership(client):
    alice_token, _ = register_and_login(client, "alice")
    carla_token, _ = register_and_login(client, "carla")
    room_id = client.post('/api/infinite/coop/rooms', headers=auth(alice_token)).get_json()['room']['room_id']

    assert client.get(f'/api/infinite/coop/rooms/{room_id}', headers=auth(carla_token)).status_code == 403
    assert client.get('/api/infinite/coop/rooms/ZZZZZZ', headers=auth(carla_token)).status_code == 404


def test_health(client):
    body = client.get('/api/health').get_json()

    assert body['status'] == 'healthy'
    assert body['storage'] == 'memory'
    assert body['total_words'] == 5


def test_room_events_reach_socket_watchers(app_and_socketio, client, services):
    app, socketio = app_and_socketio
    services.set_notifier(SocketIONotifier(socketio))
    alice_token, _ = register_and_login(client, "alice")
    bruno_token, _ = register_and_login(client, "bruno")
    room_id = client.post('/api/infinite/coop/rooms', headers=auth(alice_token)).get_json()['room']['room_id']

    watcher = socketio.test_client(app)
    watcher.emit('room:join', {'token': alice_token, 'room_id': room_id})
    received = watcher.get_received()
    assert received[-1]['name'] == 'room:state'
    assert received[-1]['args'][0]['room']['room_id'] == room_id
    assert app.room_registry.watchers(room_id)

    client.post(f'/api/infinite/coop/rooms/{room_id}/join', headers=auth(bruno_token))

    names = [message['name'] for message in watcher.get_received()]
    assert names == ['room:player-joined', 'room:game-started']

    watcher.disconnect()
    assert app.room_registry.watchers(room_id) == []


def test_socket_join_rejects_outsiders(app_and_socketio, client):
    app, socketio = app_and_socketio
    alice_token, _ = register_and_login(client, "alice")
    carla_token, _ = register_and_login(client, "carla")
    room_id = client.post('/api/infinite/coop/rooms', headers=auth(alice_token)).get_json()['room']['room_id']

    watcher = socketio.test_client(app)
    watcher.emit('room:join', {'token': carla_token, 'room_id': room_id})

    received = watcher.get_received()
    assert received[-1]['name'] == 'error'
    assert received[-1]['args'][0]['status_code'] == 403


def test_non_text_guess_and_room_id_are_bad_requests(client):
    alice_token, _ = register_and_login(client, "alice")
    client.post('/api/infinite/start', headers=auth(alice_token))

    solo = client.post('/api/infinite/guess', headers=auth(alice_token), json={'guess': 12345})
    coop = client.post('/api/infinite/coop/guess', headers=auth(alice_token),
                       json={'room_id': 123, 'guess': 'CRANE'})

    assert solo.status_code == 400
    assert solo.get_json() == {'success': False, 'error': 'Guess word must be text'}
    assert coop.status_code == 400
    assert coop.get_json()['error'] == 'Room ID must be a non-empty string'


def test_daily_puzzle_routes(client, services):
    token, user = register_and_login(client, "alice")

    status = client.get('/api/words/puzzles/daily', headers=auth(token)).get_json()
    assert status['status'] == 'in_progress'
    assert status['remaining_attempts'] == 6

    word = services.daily.get_puzzle().puzzle_word
    won = client.post('/api/words/puzzles/daily/guess', headers=auth(token), json={'guess': word})
    assert won.status_code == 200
    assert won.get_json()['status'] == 'won'
    assert won.get_json()['user']['daily'] == {'score': 10, 'streak': 1}

    replay = client.post('/api/words/puzzles/daily/guess', headers=auth(token), json={'guess': word})
    assert replay.status_code == 409

    history = client.get('/api/words/history', headers=auth(token)).get_json()
    assert history['total_items'] == 1
    assert history['items'][0]['puzzle_word'] == word

    bad_date = client.get('/api/words/puzzles/daily?date=not-a-date', headers=auth(token))
    assert bad_date.status_code == 400
