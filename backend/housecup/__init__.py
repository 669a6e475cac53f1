from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

DEFAULT_CATEGORIES = [
    ('kids', 'Kids'),
    ('elders', 'Elders'),
    ('adult-men', 'Adult Men'),
    ('adult-women', 'Adult Women'),
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', [])
    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Admin login required', 'code': 'Unauthorized'}), 401

    # Import and register blueprints here
    from housecup.routes import main
    flask_app.register_blueprint(main)

    from housecup.api.events import events
    flask_app.register_blueprint(events, url_prefix='/api/events')

    from housecup.api.roster import roster
    flask_app.register_blueprint(roster, url_prefix='/api')

    from housecup.api.standings import standings
    flask_app.register_blueprint(standings, url_prefix='/api')

    # Domain errors carry their own kind and HTTP status
    from housecup.services.competition.errors import CompetitionError

    @flask_app.errorhandler(CompetitionError)
    def handle_competition_error(exc):
        return jsonify(exc.to_dict()), exc.status

    from housecup.competition import init_competition
    init_competition(flask_app)

    from housecup.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from housecup.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('seed')
    def seed_command():
        """Drops, recreates, and seeds the database."""
        from housecup.competition import get_competition
        from housecup.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin = User(username=flask_app.config['ADMIN_USERNAME'])
            admin.set_password(flask_app.config['ADMIN_PASSWORD'])
            db.session.add(admin)
            db.session.commit()

            competition = get_competition()
            for name, label in DEFAULT_CATEGORIES:
                competition.categories.ensure(name, label)
            for name, color in [('Red Dragons', '#E53935'), ('Blue Eagles', '#1E88E5'),
                                ('Green Lions', '#43A047'), ('Yellow Tigers', '#FDD835')]:
                competition.houses.create({'name': name, 'color_hex': color})
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(seed_command)

    return flask_app
