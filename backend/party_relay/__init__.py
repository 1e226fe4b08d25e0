from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    origins = [o.strip() for o in (value or '*').split(',') if o.strip()]
    if not origins or origins == ['*']:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from party_relay.main import main
    flask_app.register_blueprint(main)

    # One registry per app
    from party_relay.socketio_events import init_relay, register_socketio_handlers, start_heartbeat
    relay = init_relay(flask_app)
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))
    start_heartbeat(flask_app, relay)

    @click.command('serve')
    @click.option('--host', default=None, help='Interface to bind (defaults to HOST).')
    @click.option('--port', default=None, type=int, help='Port to listen on (defaults to PORT).')
    def serve_command(host, port):
        """Runs the party relay Socket.IO server."""
        host = host or flask_app.config.get('HOST', '0.0.0.0')
        port = port or int(flask_app.config.get('PORT', 8080))
        flask_app.logger.info(f"[serve] party relay listening on {host}:{port}")
        socketio.run(flask_app, host=host, port=port, allow_unsafe_werkzeug=True)

    flask_app.cli.add_command(serve_command)

    return flask_app
