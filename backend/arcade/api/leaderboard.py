from flask import Blueprint, jsonify, request, current_app
from arcade import socketio
from arcade.services.leaderboard.errors import LeaderboardError, StoreUnavailable
from arcade.services.leaderboard.registry import get_services


leaderboard = Blueprint('leaderboard', __name__)

LEADERBOARD_ROOM = 'leaderboard'


def _source_address() -> str:
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


@leaderboard.errorhandler(LeaderboardError)
def handle_leaderboard_error(exc):
    return jsonify({'success': False, 'error': exc.message}), exc.status


@leaderboard.route('/submit-score', methods=['POST'])
def submit_score():
    # Malformed bodies still go through admission control, then fail validation
    data = request.get_json(silent=True)
    try:
        result = get_services().submissions.submit(data, _source_address())
    except LeaderboardError:
        raise
    except Exception:
        current_app.logger.exception("[submit-error] unexpected failure")
        return jsonify({'success': False, 'error': 'Server error'}), 500

    if result.rank is not None:
        socketio.emit(
            'leaderboard_update',
            {'rank': result.rank, 'score': result.entry.score, 'lastUpdated': result.snapshot.last_updated},
            to=LEADERBOARD_ROOM,
            namespace='/ws',
        )
    return jsonify({'success': True, 'rank': result.rank, 'message': result.message})


@leaderboard.route('/get-leaderboard', methods=['GET'])
def get_leaderboard():
    try:
        snapshot = get_services().queries.current()
    except StoreUnavailable:
        return jsonify({'success': False, 'error': 'Server error', 'scores': []}), 500
    except Exception:
        current_app.logger.exception("[leaderboard-error] unexpected failure")
        return jsonify({'success': False, 'error': 'Server error', 'scores': []}), 500

    response = jsonify({
        'success': True,
        'scores': [e.to_dict() for e in snapshot.scores],
        'lastUpdated': snapshot.last_updated,
    })
    ttl_sec = int(current_app.config.get('LEADERBOARD_CACHE_TTL_MS', 5000)) // 1000
    response.headers['Cache-Control'] = f'public, max-age={ttl_sec}'
    return response
