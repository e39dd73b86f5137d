from turntimer import db, bcrypt
from flask_login import UserMixin
import string
import random


def generate_object_id(length=19):
    """Generate a host-style object id (``-`` followed by random characters)."""
    return '-' + ''.join(random.choices(string.ascii_letters + string.digits + '_', k=length))


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    is_gm = db.Column(db.Boolean, default=False, nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'is_gm': bool(self.is_gm),
        }


class Campaign(db.Model):
    __tablename__ = 'campaign'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, default='Campaign')
    # JSON-encoded list of turn entries, owned by the host
    turnorder = db.Column(db.Text, nullable=False, default='[]')
    player_page_id = db.Column(db.String(32), nullable=False)

    def __init__(self, **kwargs):
        super(Campaign, self).__init__(**kwargs)
        if not self.player_page_id:
            self.player_page_id = generate_object_id()
        if self.turnorder is None:
            self.turnorder = '[]'

    @classmethod
    def current(cls):
        """Return the single active campaign, creating it on first use."""
        campaign = cls.query.order_by(cls.id).first()
        if campaign is None:
            campaign = cls()
            db.session.add(campaign)
            db.session.commit()
        return campaign

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'player_page_id': self.player_page_id,
        }


class Character(db.Model):
    __tablename__ = 'character'
    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(128), nullable=False, default='')

    def __init__(self, **kwargs):
        super(Character, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_object_id()

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class Token(db.Model):
    __tablename__ = 'graphic'
    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(128), nullable=True)
    page_id = db.Column(db.String(32), nullable=True)
    represents = db.Column(db.String(32), db.ForeignKey('character.id'), nullable=True)
    character = db.relationship('Character', foreign_keys=[represents])

    def __init__(self, **kwargs):
        super(Token, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_object_id()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'page_id': self.page_id,
            'represents': self.represents,
        }


class TextObject(db.Model):
    __tablename__ = 'text_object'
    id = db.Column(db.String(32), primary_key=True)
    page_id = db.Column(db.String(32), nullable=True)
    layer = db.Column(db.String(32), nullable=False, default='objects')
    left = db.Column(db.Float, nullable=False, default=0)
    top = db.Column(db.Float, nullable=False, default=0)
    text = db.Column(db.Text, nullable=False, default='')
    font_size = db.Column(db.Integer, nullable=False, default=16)
    font_family = db.Column(db.String(64), nullable=False, default='Arial')
    color = db.Column(db.String(16), nullable=False, default='#000000')
    controlled_by = db.Column(db.String(256), nullable=False, default='')

    def __init__(self, **kwargs):
        super(TextObject, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_object_id()

    def to_dict(self):
        return {
            'id': self.id,
            'page_id': self.page_id,
            'layer': self.layer,
            'left': self.left,
            'top': self.top,
            'text': self.text,
            'font_size': self.font_size,
            'font_family': self.font_family,
            'color': self.color,
            'controlled_by': self.controlled_by,
        }


class ScriptState(db.Model):
    """Persistent key-value store for script state blobs."""
    __tablename__ = 'script_state'
    key = db.Column(db.String(64), primary_key=True)
    data = db.Column(db.Text, nullable=False, default='{}')
