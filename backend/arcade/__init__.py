from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from arcade.main import main
    flask_app.register_blueprint(main)

    from arcade.api.leaderboard import leaderboard
    # Paths match what the game client calls: /submit-score, /get-leaderboard
    flask_app.register_blueprint(leaderboard)

    # Routing rejects wrong methods before any blueprint handler runs
    @flask_app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({'success': False, 'error': 'Method not allowed'}), 405

    from arcade.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Rate-limit windows and the leaderboard cache are per app instance
    from arcade.services.leaderboard import registry
    registry.init_app(flask_app, db)

    @click.command('leaderboard-reset')
    def leaderboard_reset_command():
        """Drops and recreates the tables, then writes an empty leaderboard."""
        import arcade.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            registry.get_services().store.reset()
            print('Leaderboard has been reset!')

    flask_app.cli.add_command(leaderboard_reset_command)

    return flask_app
