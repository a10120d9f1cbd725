from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

from scattered_lights.chakras import CHAKRA_KEYS, is_default_profile
from scattered_lights.streaks import format_entry_date

db = SQLAlchemy()


def iso(value):
    return value.isoformat() + "Z" if value else None


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    bio = db.Column(db.Text)
    avatar_url = db.Column(db.Text)
    lights = db.Column(db.Integer, default=0, nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def public(self):
        return {"id": self.id, "name": self.name, "username": self.username}

    def to_dict(self):
        return {
            **self.public(),
            "email": self.email,
            "bio": self.bio,
            "avatar_url": self.avatar_url,
            "lights": self.lights,
            "is_admin": self.is_admin,
            "created_at": iso(self.created_at),
        }

    def __repr__(self):
        return f"<User id={self.id} username={self.username}>"


class ChakraProfile(db.Model):
    __tablename__ = "chakra_profiles"

    id = db.Column(db.Integer, primary_key=True)
    # one row per user, overwritten on reassessment
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False)

    crown = db.Column(db.Float, nullable=False, default=5.0)
    third_eye = db.Column(db.Float, nullable=False, default=5.0)
    throat = db.Column(db.Float, nullable=False, default=5.0)
    heart = db.Column(db.Float, nullable=False, default=5.0)
    solar_plexus = db.Column(db.Float, nullable=False, default=5.0)
    sacral = db.Column(db.Float, nullable=False, default=5.0)
    root = db.Column(db.Float, nullable=False, default=5.0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def values(self):
        return {key: float(getattr(self, key)) for key in CHAKRA_KEYS}

    def to_dict(self):
        values = self.values()
        return {
            "id": self.id,
            "user_id": self.user_id,
            **values,
            "is_default": is_default_profile(values),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class JournalEntry(db.Model):
    __tablename__ = "journal_entries"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    content = db.Column(db.Text, nullable=False, default="")
    gratitude = db.Column(db.JSON, nullable=False, default=list)
    affirmation = db.Column(db.Text)
    short_term_goals = db.Column(db.JSON, nullable=False, default=list)
    long_term_vision = db.Column(db.Text)
    language = db.Column(db.String(40), default="english", nullable=False)

    sentiment_score = db.Column(db.Integer)           # 1-10
    emotion_tags = db.Column(db.JSON, nullable=False, default=list)
    chakra_tags = db.Column(db.JSON, nullable=False, default=list)
    emotion_scores = db.Column(db.JSON, nullable=False, default=dict)
    ai_insights = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def full_text(self):
        parts = [self.content or ""]
        if self.gratitude:
            parts.append("Gratitude: " + ", ".join(self.gratitude))
        if self.affirmation:
            parts.append(self.affirmation)
        if self.short_term_goals:
            parts.append("Goals: " + ", ".join(self.short_term_goals))
        if self.long_term_vision:
            parts.append(self.long_term_vision)
        return "\n".join(p for p in parts if p)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "content": self.content,
            "gratitude": self.gratitude or [],
            "affirmation": self.affirmation,
            "short_term_goals": self.short_term_goals or [],
            "long_term_vision": self.long_term_vision,
            "language": self.language,
            "sentiment_score": self.sentiment_score,
            "emotion_tags": self.emotion_tags or [],
            "chakra_tags": self.chakra_tags or [],
            "emotion_scores": self.emotion_scores or {},
            "ai_insights": self.ai_insights,
            "display_date": format_entry_date(self.created_at),
            "created_at": iso(self.created_at),
        }

    def __repr__(self):
        return f"<JournalEntry id={self.id}>"


class EmotionTracking(db.Model):
    __tablename__ = "emotion_tracking"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    emotion = db.Column(db.String(50), nullable=False)
    intensity = db.Column(db.Integer, nullable=False)  # 1-10
    note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "emotion": self.emotion,
            "intensity": self.intensity,
            "note": self.note,
            "created_at": iso(self.created_at),
        }


class CoachConversation(db.Model):
    __tablename__ = "coach_conversations"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    coach_type = db.Column(db.String(40), nullable=False)
    messages = db.Column(db.JSON, nullable=False, default=list)
    emotion_scores = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "coach_type": self.coach_type,
            "messages": self.messages or [],
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class CommunityPost(db.Model):
    __tablename__ = "community_posts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    media_url = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship("User")
    comments = db.relationship("PostComment", cascade="all, delete-orphan", lazy="dynamic")
    reactions = db.relationship("PostReaction", cascade="all, delete-orphan", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "content": self.content,
            "media_url": self.media_url,
            "user": self.user.public() if self.user else None,
            "reaction_count": self.reactions.count(),
            "comment_count": self.comments.count(),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class PostComment(db.Model):
    __tablename__ = "post_comments"

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("community_posts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "post_id": self.post_id,
            "user_id": self.user_id,
            "content": self.content,
            "user": self.user.public() if self.user else None,
            "created_at": iso(self.created_at),
        }


class PostReaction(db.Model):
    __tablename__ = "post_reactions"
    __table_args__ = (db.UniqueConstraint("post_id", "user_id"),)

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("community_posts.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    type = db.Column(db.String(20), default="like", nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "post_id": self.post_id,
            "user_id": self.user_id,
            "type": self.type,
            "created_at": iso(self.created_at),
        }


class CommunityEvent(db.Model):
    __tablename__ = "community_events"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    event_date = db.Column(db.DateTime, nullable=False)
    event_time = db.Column(db.String(40), nullable=False)
    duration = db.Column(db.Integer)                    # minutes
    is_virtual = db.Column(db.Boolean, default=True, nullable=False)
    is_free = db.Column(db.Boolean, default=False, nullable=False)
    zoom_link = db.Column(db.Text)
    max_attendees = db.Column(db.Integer)
    status = db.Column(db.String(20), default="upcoming", nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    attendees = db.relationship("EventAttendee", cascade="all, delete-orphan", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "event_date": iso(self.event_date),
            "event_time": self.event_time,
            "duration": self.duration,
            "is_virtual": self.is_virtual,
            "is_free": self.is_free,
            "zoom_link": self.zoom_link,
            "max_attendees": self.max_attendees,
            "attendee_count": self.attendees.count(),
            "status": self.status,
            "created_at": iso(self.created_at),
        }


class EventAttendee(db.Model):
    __tablename__ = "event_attendees"
    __table_args__ = (db.UniqueConstraint("event_id", "user_id"),)

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("community_events.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    registration_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    attended = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "registration_date": iso(self.registration_date),
            "attended": self.attended,
        }
