from community import db
from flask_login import UserMixin
from passlib.hash import sha256_crypt
from sqlalchemy.types import TypeDecorator

from community.utils.helpers import get_current_utc, as_utc, to_iso, normalize_id_list


class IntegerList(TypeDecorator):
    """
    Stores a list of ints as a comma-delimited string.

    Values are normalized on the way in and on the way out, so legacy rows
    holding a delimited string, a JSON-ish list or NULL all read back as a
    plain list of ints.
    """
    impl = db.Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        ids = normalize_id_list(value)
        return ','.join(str(i) for i in ids) if ids else None

    def process_result_value(self, value, dialect):
        return normalize_id_list(value)


class User(db.Model, UserMixin):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    login_id = db.Column(db.String(20), index=True, unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    name = db.Column(db.String(20), nullable=False)
    image = db.Column(db.String(255), nullable=True)
    giturl = db.Column(db.String(255), nullable=True)

    posts = db.relationship('Post', backref='author', lazy='dynamic', cascade='all, delete-orphan')
    comments = db.relationship('Comment', backref='author', lazy='dynamic', cascade='all, delete-orphan')
    sent_messages = db.relationship('Message', backref='sender', lazy='dynamic',
                                    foreign_keys='Message.sender_id', cascade='all, delete-orphan')
    received_messages = db.relationship('Message', backref='receiver', lazy='dynamic',
                                        foreign_keys='Message.receiver_id', cascade='all, delete-orphan')
    semesters = db.relationship('Semester', backref='author', lazy='dynamic', cascade='all, delete-orphan')
    member_profile = db.relationship('Member', backref='user', uselist=False, cascade='all, delete-orphan')
    refresh_tokens = db.relationship('RefreshToken', backref='user', lazy='dynamic', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<User {self.login_id}>'

    def set_password(self, password):
        self.password_hash = sha256_crypt.hash(password)

    def check_password(self, password):
        return sha256_crypt.verify(password, self.password_hash)

    def to_summary(self):
        return {
            "id": self.id,
            "loginId": self.login_id,
            "name": self.name,
            "image": self.image,
            "giturl": self.giturl,
        }

    def to_dict(self):
        return self.to_summary()


class RefreshToken(db.Model):
    __tablename__ = 'refresh_tokens'
    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(255), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=get_current_utc)

    def is_expired(self):
        return get_current_utc() > as_utc(self.expires_at)

    def __repr__(self):
        return f'<RefreshToken for User {self.user_id}>'


class Post(db.Model):
    __tablename__ = 'posts'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, index=True, default=get_current_utc)
    views = db.Column(db.Integer, nullable=False, default=0)
    image = db.Column(db.String(255), nullable=True)

    # Oldest comment first when accessing post.comments
    comments = db.relationship('Comment', backref='post', lazy='dynamic', cascade='all, delete-orphan',
                               order_by='Comment.created_at.asc()')

    def __repr__(self):
        return f'<Post {self.title[:50]}>'

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "userId": self.user_id,
            "createdAt": to_iso(self.created_at),
            "views": self.views or 0,
            "image": self.image,
        }


class Comment(db.Model):
    __tablename__ = 'comments'
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.Text, nullable=False)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    parent_id = db.Column(db.Integer, db.ForeignKey('comments.id'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, index=True, default=get_current_utc)
    likes = db.Column(db.Integer, nullable=False, default=0)
    liked_user_ids = db.Column(IntegerList, nullable=True)

    children = db.relationship('Comment', backref=db.backref('parent', remote_side=[id]),
                               cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Comment {self.text[:50]}>'

    def to_dict(self):
        return {
            "id": self.id,
            "text": self.text,
            "postId": self.post_id,
            "userId": self.user_id,
            "parentId": self.parent_id,
            "createdAt": to_iso(self.created_at),
            "likes": self.likes or 0,
            "likedUserIds": normalize_id_list(self.liked_user_ids),
        }


class Message(db.Model):
    __tablename__ = 'messages'
    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    receiver_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, index=True, default=get_current_utc)
    is_read = db.Column(db.Boolean, nullable=False, default=False)

    def __repr__(self):
        return f'<Message {self.id} from User {self.sender_id} to User {self.receiver_id}>'

    def to_dict(self):
        return {
            "id": self.id,
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "title": self.title,
            "content": self.content,
            "createdAt": to_iso(self.created_at),
            "isRead": bool(self.is_read),
        }


class Member(db.Model):
    __tablename__ = 'members'
    id = db.Column(db.Integer, primary_key=True)
    # One profile per user
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, unique=True, index=True)
    name = db.Column(db.String(50), nullable=False)
    introduction = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(255), nullable=True)

    def __repr__(self):
        return f'<Member {self.name} of User {self.user_id}>'

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "introduction": self.introduction,
            "imageUrl": self.image_url,
        }


class Semester(db.Model):
    __tablename__ = 'semester'
    id = db.Column(db.Integer, primary_key=True)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=get_current_utc)

    def __repr__(self):
        return f'<Semester {self.title[:50]}>'

    def to_dict(self):
        return {
            "id": self.id,
            "authorId": self.author_id,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "createdAt": to_iso(self.created_at),
            "author": self.author.to_summary() if self.author else None,
        }


class ChatRoom(db.Model):
    __tablename__ = 'chat_rooms'
    room_id = db.Column(db.String(50), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    # NULL when the room was opened by an anonymous connection
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=get_current_utc)
    updated_at = db.Column(db.DateTime, default=get_current_utc, onupdate=get_current_utc)

    messages = db.relationship('ChatMessage', backref='room', lazy='dynamic', cascade='all, delete-orphan',
                               order_by='ChatMessage.created_at.asc()')
    participants = db.relationship('ChatRoomParticipant', backref='room', lazy='dynamic',
                                   cascade='all, delete-orphan')
    creator = db.relationship('User', foreign_keys=[created_by])

    def __repr__(self):
        return f'<ChatRoom {self.room_id}>'


class ChatMessage(db.Model):
    __tablename__ = 'chat_messages'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(50), db.ForeignKey('chat_rooms.room_id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, index=True, default=get_current_utc)

    user = db.relationship('User', foreign_keys=[user_id])

    def __repr__(self):
        return f'<ChatMessage {self.id} from User {self.user_id} in Room {self.room_id}>'


class ChatRoomParticipant(db.Model):
    __tablename__ = 'chat_room_participants'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(50), db.ForeignKey('chat_rooms.room_id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, default=get_current_utc)
    last_read_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (db.UniqueConstraint('room_id', 'user_id', name='_room_user_participant_uc'),)

    def __repr__(self):
        return f'<ChatRoomParticipant User {self.user_id} in Room {self.room_id}>'
