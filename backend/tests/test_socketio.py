from conftest import make_payload


def test_socket_connect_and_subscribe(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    # Flush any initial events
    try:
        sio_client.get_received('/ws')
    except Exception:
        pass

    sio_client.emit('subscribe_leaderboard', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'subscribed' for pkt in received)


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    pongs = [pkt for pkt in received if pkt['name'] == 'pong']
    assert pongs and pongs[0]['args'][0] == {'n': 1}


def test_subscribers_get_leaderboard_updates(sio_client, client):
    sio_client.emit('subscribe_leaderboard', {}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    res = client.post('/submit-score', json=make_payload(90))
    assert res.status_code == 200

    events = sio_client.get_received('/ws')
    updates = [e for e in events if e['name'] == 'leaderboard_update']
    assert len(updates) == 1
    assert updates[0]['args'][0]['rank'] == 1
    assert updates[0]['args'][0]['score'] == 90


def test_unsubscribed_clients_get_nothing(sio_client, client):
    sio_client.emit('subscribe_leaderboard', {}, namespace='/ws')
    sio_client.emit('unsubscribe_leaderboard', {}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    client.post('/submit-score', json=make_payload(90))
    events = sio_client.get_received('/ws')
    assert not any(e['name'] == 'leaderboard_update' for e in events)
