from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import json
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from turntimer.main import main
    flask_app.register_blueprint(main)

    from turntimer.api.timer import timer
    flask_app.register_blueprint(timer, url_prefix='/api/timer')

    from turntimer.api.campaign import campaign
    flask_app.register_blueprint(campaign, url_prefix='/api/campaign')

    # The script binds to the app before socket handlers can reach it
    from turntimer.services.timer import turn_timer
    turn_timer.init_app(flask_app)

    from turntimer.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from turntimer.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return User.query.get(int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with a demo encounter."""
        from turntimer.models import Campaign, Character, Token
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            gm = User(username='gm', is_gm=True)
            gm.set_password('password')
            db.session.add(gm)

            campaign = Campaign(name='Demo Encounter')
            db.session.add(campaign)

            entries = []
            for name in ['Aria', 'Borin', 'Cassia']:
                character = Character(name=name)
                db.session.add(character)
                db.session.flush()
                token = Token(name=f"{name} token", represents=character.id, page_id=campaign.player_page_id)
                db.session.add(token)
                db.session.flush()
                entries.append({'id': token.id, 'pr': '0', 'custom': ''})
            entries.append({'id': '-1', 'pr': '0', 'custom': 'Lair Action'})
            campaign.turnorder = json.dumps(entries)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
