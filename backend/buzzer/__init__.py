from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from buzzer.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Process-wide party state lives on the app, created once per app
    from buzzer.channel import SocketIOChannel
    from buzzer.services.party import PartyService
    from buzzer.services.party.scheduler import PartyScheduler

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    channel = SocketIOChannel(socketio, namespace=namespace)
    scheduler = PartyScheduler(socketio, app=flask_app)
    flask_app.extensions['buzzer'] = PartyService.from_config(flask_app.config, channel, scheduler)

    from buzzer.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from buzzer.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    return flask_app
