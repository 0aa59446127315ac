from flask_socketio import join_room, leave_room, emit
from arcade import socketio
from arcade.api.leaderboard import LEADERBOARD_ROOM


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_subscribe_leaderboard(data=None):
    join_room(LEADERBOARD_ROOM)
    emit('subscribed', {'room': LEADERBOARD_ROOM})


def handle_unsubscribe_leaderboard(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('unsubscribed', {'room': LEADERBOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('subscribe_leaderboard', handle_subscribe_leaderboard, namespace=namespace)
        socketio.on_event('unsubscribe_leaderboard', handle_unsubscribe_leaderboard, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
