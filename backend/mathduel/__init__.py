from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


class DuelServices:
    """Process-wide game state, created once per app and kept in app.extensions."""

    def __init__(self, registry, leaderboard, engine, channel):
        self.registry = registry
        self.leaderboard = leaderboard
        self.engine = engine
        self.channel = channel

    @property
    def scheduler(self):
        return self.engine.scheduler


def _allowed_origins(config):
    origins = config.get('CORS_ORIGINS') or '*'
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(',') if o.strip()]
    return '*' if '*' in origins else origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config)
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from mathduel.rooms import SocketIOChannel
    from mathduel.services.leaderboard import LeaderboardStore
    from mathduel.services.duel.engine import RoundEngine, RoundSettings
    from mathduel.services.duel.registry import MatchRegistry
    from mathduel.services.duel.scheduler import make_scheduler

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    leaderboard = LeaderboardStore(flask_app.config['LEADERBOARD_FILE'], logger=flask_app.logger)
    leaderboard.load()
    registry = MatchRegistry()
    channel = SocketIOChannel(socketio, namespace)
    engine = RoundEngine(
        registry,
        leaderboard,
        channel,
        make_scheduler(flask_app, socketio),
        settings=RoundSettings.from_config(flask_app.config),
        logger=flask_app.logger,
    )
    flask_app.extensions['mathduel'] = DuelServices(registry, leaderboard, engine, channel)

    from mathduel.main import main
    flask_app.register_blueprint(main)

    from mathduel.api.duel import duel
    flask_app.register_blueprint(duel, url_prefix='/api')

    from mathduel.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('leaderboard-show')
    def leaderboard_show_command():
        """Prints the win table, best first."""
        table = flask_app.extensions['mathduel'].leaderboard.snapshot()
        if not table:
            click.echo('Leaderboard is empty.')
            return
        for name, wins in sorted(table.items(), key=lambda item: (-item[1], item[0])):
            click.echo(f'{wins:>5}  {name}')

    @click.command('leaderboard-reset')
    @click.confirmation_option(prompt='Erase every recorded win?')
    def leaderboard_reset_command():
        """Clears the win table on disk."""
        flask_app.extensions['mathduel'].leaderboard.reset()
        click.echo('Leaderboard has been reset!')

    flask_app.cli.add_command(leaderboard_show_command)
    flask_app.cli.add_command(leaderboard_reset_command)

    return flask_app
