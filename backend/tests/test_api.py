import json


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'


def test_rooms_lists_lobby(client, make_sio_client):
    res = client.get('/api/rooms')
    assert res.status_code == 200
    rooms = res.get_json()
    assert [r['id'] for r in rooms] == list(range(1, 11))
    assert all(r['status'] == 'open' and r['count'] == 0 for r in rooms)

    make_sio_client().emit('join-room', 6, namespace='/')
    rooms = client.get('/api/rooms').get_json()
    assert rooms[5] == {'id': 6, 'count': 1, 'status': 'waiting', 'timeLeft': 30}
    # Lobby view never exposes who is seated
    assert 'players' not in rooms[5]


def test_spawn_sample_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['spawn-sample', '--count', '3', '--seed', '1'])
    assert result.exit_code == 0
    lines = [json.loads(line) for line in result.output.strip().splitlines()]
    assert len(lines) == 3
    assert all(set(e) == {'id', 'char', 'x', 'y', 'vx', 'vy'} for e in lines)
