import logging
import os
from datetime import datetime

from flask import Flask, request, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.security import generate_password_hash

from scattered_lights.models import (
    db,
    User,
    ChakraProfile,
    JournalEntry,
    EmotionTracking,
    CoachConversation,
    CommunityPost,
    PostComment,
    PostReaction,
    CommunityEvent,
    EventAttendee,
)
from scattered_lights import gpt_service
from scattered_lights.chakras import (
    CHAKRA_KEYS,
    DEFAULT_VALUE,
    chakra_coaching_context,
    chakra_recommendations,
    clamp_chakra_value,
    get_chakra_status,
    is_default_profile,
    overall_balance,
)
from scattered_lights.emotions import PERIODS, aggregate_emotions, tracking_sample
from scattered_lights.sentiment_service import (
    analyze_sentiment,
    determine_chakra_tags,
    extract_emotion_tags,
    sentiment_to_scale,
)
from scattered_lights.streaks import calculate_streak, entry_day, month_calendar

# Load .env locally; in deployment, env vars are injected automatically.
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
log = logging.getLogger(__name__)

app = Flask(__name__)

# --- Database config ---
app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///scattered_lights.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

# Init DB
db.init_app(app)
with app.app_context():
    db.create_all()

# --- CORS (allow your deployed frontend origin if provided) ---
frontend_origin = os.getenv("FRONTEND_ORIGIN")
if frontend_origin:
    CORS(app, resources={r"/api/*": {"origins": [frontend_origin]}})
else:
    # Dev fallback: allow all
    CORS(app)

EVENT_STATUSES = ("upcoming", "ongoing", "completed", "cancelled")


# ---------- Helpers ----------

def error(message, status):
    return jsonify({"error": message}), status


def body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def acting_user_id(data=None):
    """The user performing the request, from the JSON body or query string."""
    data = data if data is not None else body()
    return as_int(data.get("user_id", request.args.get("user_id")))


def string_list(value):
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError("expected a list of strings")
    return [v.strip() for v in value if v.strip()]


class InvalidField(ValueError):
    pass


def text_field(data, key, default=""):
    """Stripped string at ``data[key]``; InvalidField for non-string values."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidField(f"'{key}' must be a string")
    return value.strip()


@app.errorhandler(InvalidField)
def invalid_field(e):
    return error(str(e), 400)


# ---------- Health ----------

@app.route("/api/health")
def health():
    """Simple health check + DB connectivity test."""
    db_ok = True
    try:
        with db.engine.connect() as conn:
            conn.execute(db.text("SELECT 1"))
    except Exception:
        log.exception("Database health check failed")
        db_ok = False
    return jsonify({
        "ok": True,
        "db_ok": db_ok,
        "model": gpt_service.OPENROUTER_MODEL,
        "time": datetime.utcnow().isoformat() + "Z"
    }), 200


@app.route("/api/init-db")
def init_db():
    """Optional: safe-guarded table creation endpoint (disable in prod)."""
    if os.getenv("ALLOW_INIT_DB") != "1":
        return error("init disabled", 403)
    db.create_all()
    return jsonify({"ok": True, "message": "Tables created"}), 200


# ---------- Users ----------

@app.route("/api/users", methods=["POST"])
def create_user():
    data = body()
    fields = {k: text_field(data, k) for k in ("username", "email", "name", "password")}
    missing = [k for k, v in fields.items() if not v]
    if missing:
        return error(f"Missing fields: {', '.join(missing)}", 400)

    if User.query.filter_by(username=fields["username"]).first():
        return error("Username already exists", 409)
    if User.query.filter_by(email=fields["email"]).first():
        return error("Email already registered", 409)

    user = User(
        username=fields["username"],
        email=fields["email"],
        name=fields["name"],
        password_hash=generate_password_hash(fields["password"]),
        bio=text_field(data, "bio", None),
        avatar_url=text_field(data, "avatar_url", None),
    )
    db.session.add(user)
    db.session.commit()
    log.info("Created user %s", user.id)
    return jsonify(user.to_dict()), 201


@app.route("/api/users/<int:user_id>", methods=["GET"])
def get_user(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        return error("User not found", 404)
    return jsonify(user.to_dict()), 200


@app.route("/api/users/<int:user_id>", methods=["PATCH"])
def update_user(user_id: int):
    user = db.session.get(User, user_id)
    if not user:
        return error("User not found", 404)
    data = body()
    if "name" in data:
        name = text_field(data, "name")
        if not name:
            return error("Name cannot be empty", 400)
        user.name = name
    for field in ("bio", "avatar_url"):
        if field in data:
            setattr(user, field, text_field(data, field, None))
    db.session.commit()
    return jsonify(user.to_dict()), 200


# ---------- Chakra profiles ----------

def chakra_values_from(data, partial=False):
    """Clamped chakra values present in ``data``; ValueError on bad input."""
    values = {}
    for key in CHAKRA_KEYS:
        if key not in data:
            if partial:
                continue
            raise ValueError(f"Missing chakra value '{key}'")
        try:
            values[key] = clamp_chakra_value(data[key])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid value for '{key}'")
    return values


@app.route("/api/chakra-profiles", methods=["POST"])
def create_chakra_profile():
    data = body()
    user_id = as_int(data.get("user_id"))
    if user_id is None:
        return error("Missing user_id", 400)
    if not db.session.get(User, user_id):
        return error("User not found", 404)
    if ChakraProfile.query.filter_by(user_id=user_id).first():
        return error("User already has a chakra profile", 409)

    try:
        values = chakra_values_from(data)
    except ValueError as e:
        return error(str(e), 400)

    profile = ChakraProfile(user_id=user_id, **values)
    db.session.add(profile)
    db.session.commit()
    return jsonify(profile.to_dict()), 201


@app.route("/api/chakra-profiles/<int:profile_id>", methods=["PATCH"])
def update_chakra_profile(profile_id: int):
    profile = db.session.get(ChakraProfile, profile_id)
    if not profile:
        return error("Chakra profile not found", 404)
    try:
        values = chakra_values_from(body(), partial=True)
    except ValueError as e:
        return error(str(e), 400)

    for key, value in values.items():
        setattr(profile, key, value)
    profile.updated_at = datetime.utcnow()
    db.session.commit()
    log.info("Updated chakra profile %s (%s)", profile.id, ", ".join(values) or "no fields")
    return jsonify(profile.to_dict()), 200


def profile_for(user_id):
    """Existing profile, or a freshly stored all-5 placeholder."""
    profile = ChakraProfile.query.filter_by(user_id=user_id).first()
    if not profile:
        profile = ChakraProfile(user_id=user_id, **{k: DEFAULT_VALUE for k in CHAKRA_KEYS})
        db.session.add(profile)
        db.session.commit()
        log.info("Created default chakra profile for user %s", user_id)
    return profile


@app.route("/api/users/<int:user_id>/chakra-profile", methods=["GET"])
def get_chakra_profile(user_id: int):
    if not db.session.get(User, user_id):
        return error("User not found", 404)
    return jsonify(profile_for(user_id).to_dict()), 200


@app.route("/api/users/<int:user_id>/chakra-report", methods=["GET"])
def get_chakra_report(user_id: int):
    if not db.session.get(User, user_id):
        return error("User not found", 404)
    profile = ChakraProfile.query.filter_by(user_id=user_id).first()
    values = profile.values() if profile else {}
    assessed = not is_default_profile(values)
    scored = values if assessed else {}

    return jsonify({
        "user_id": user_id,
        "assessed": assessed,
        "chakras": [
            {"key": key, "value": value, **get_chakra_status(value, key).to_dict()}
            for key, value in scored.items()
        ],
        "overall": overall_balance(scored),
        "recommendations": chakra_recommendations(scored),
    }), 200


@app.route("/api/chakras/status", methods=["GET"])
def chakra_status():
    try:
        value = clamp_chakra_value(request.args.get("value", ""))
    except ValueError:
        return error("Query parameter 'value' must be a finite number", 400)
    chakra = request.args.get("chakra") or None
    return jsonify(get_chakra_status(value, chakra).to_dict()), 200


# ---------- Journal ----------

@app.route("/api/journal-entries", methods=["POST"])
def create_journal_entry():
    """Create one journal entry: sentiment + tags + insight + emotion scores."""
    data = body()
    user_id = as_int(data.get("user_id"))
    if user_id is None:
        return error("Missing user_id", 400)
    if not db.session.get(User, user_id):
        return error("User not found", 404)

    try:
        gratitude = string_list(data.get("gratitude"))
        goals = string_list(data.get("short_term_goals"))
    except ValueError:
        return error("'gratitude' and 'short_term_goals' must be lists of strings", 400)
    content = text_field(data, "content")
    affirmation = text_field(data, "affirmation")
    vision = text_field(data, "long_term_vision")

    if not (content or gratitude or affirmation or goals or vision):
        return error("At least one journal section must be filled", 400)

    entry = JournalEntry(
        user_id=user_id,
        content=content,
        gratitude=gratitude,
        affirmation=affirmation or None,
        short_term_goals=goals,
        long_term_vision=vision or None,
        language=text_field(data, "language") or "english",
    )
    text = entry.full_text()

    # 1) Last few entries as lightweight memory, oldest first
    recent = (
        JournalEntry.query
        .filter_by(user_id=user_id)
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .limit(5)
        .all()
    )
    history_texts = [j.full_text() for j in recent][::-1]

    # 2) Local analysis
    mood = analyze_sentiment(text)
    entry.sentiment_score = sentiment_to_scale(mood["score"])
    entry.emotion_tags = extract_emotion_tags(content, gratitude, affirmation)
    entry.chakra_tags = determine_chakra_tags(content, affirmation, goals)

    # 3) LLM analysis (falls back to canned text / zero scores)
    entry.ai_insights = gpt_service.generate_journal_insight(text, history_texts)
    entry.emotion_scores = gpt_service.score_emotions(text)

    db.session.add(entry)
    db.session.commit()

    return jsonify({**entry.to_dict(), "mood": mood}), 201


@app.route("/api/users/<int:user_id>/journal-entries", methods=["GET"])
def list_journal_entries(user_id: int):
    """List a user's entries (latest first)."""
    items = (
        JournalEntry.query
        .filter_by(user_id=user_id)
        .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        .all()
    )
    return jsonify([it.to_dict() for it in items]), 200


@app.route("/api/journal-entries/<int:entry_id>", methods=["DELETE"])
def delete_journal_entry(entry_id: int):
    """Delete a single entry by id (owner only)."""
    it = db.session.get(JournalEntry, entry_id)
    if not it:
        return error("Not found", 404)
    if acting_user_id() != it.user_id:
        return error("Not allowed to delete this entry", 403)
    db.session.delete(it)
    db.session.commit()
    return jsonify({"ok": True, "deleted": entry_id}), 200


@app.route("/api/users/<int:user_id>/journal-streak", methods=["GET"])
def journal_streak(user_id: int):
    if not db.session.get(User, user_id):
        return error("User not found", 404)
    today = datetime.utcnow().date()
    if request.args.get("today"):
        today = entry_day(request.args["today"])
        if today is None:
            return error("Query parameter 'today' must be an ISO date", 400)

    entries = JournalEntry.query.filter_by(user_id=user_id).all()
    summary = calculate_streak(entries, today=today)
    return jsonify({
        **summary.to_dict(),
        "calendar": month_calendar(entries, today=today),
    }), 200


# ---------- Emotions ----------

@app.route("/api/emotion-tracking", methods=["POST"])
def create_emotion_tracking():
    data = body()
    user_id = as_int(data.get("user_id"))
    emotion = text_field(data, "emotion").lower()
    if user_id is None or not emotion:
        return error("Missing user_id or emotion", 400)
    intensity = data.get("intensity")
    if isinstance(intensity, bool) or not isinstance(intensity, int) or not 1 <= intensity <= 10:
        return error("'intensity' must be an integer between 1 and 10", 400)
    if not db.session.get(User, user_id):
        return error("User not found", 404)

    sample = EmotionTracking(user_id=user_id, emotion=emotion, intensity=intensity, note=text_field(data, "note", None))
    db.session.add(sample)
    db.session.commit()
    return jsonify(sample.to_dict()), 201


@app.route("/api/users/<int:user_id>/emotion-tracking", methods=["GET"])
def list_emotion_tracking(user_id: int):
    items = (
        EmotionTracking.query
        .filter_by(user_id=user_id)
        .order_by(EmotionTracking.created_at.desc(), EmotionTracking.id.desc())
        .all()
    )
    return jsonify([it.to_dict() for it in items]), 200


def emotion_samples(user_id):
    samples = []
    for e in JournalEntry.query.filter_by(user_id=user_id).all():
        samples.append({"emotions": e.emotion_scores, "created_at": e.created_at, "source": "journal"})
    for c in CoachConversation.query.filter_by(user_id=user_id).all():
        if c.emotion_scores:
            samples.append({"emotions": c.emotion_scores, "created_at": c.updated_at, "source": "chat"})
    for t in EmotionTracking.query.filter_by(user_id=user_id).all():
        samples.append({
            "emotions": tracking_sample(t.emotion, t.intensity),
            "created_at": t.created_at,
            "source": "tracking",
        })
    return samples


@app.route("/api/users/<int:user_id>/emotion-aggregates", methods=["GET"])
def emotion_aggregates(user_id: int):
    period = request.args.get("period", "day")
    if period not in PERIODS:
        return error("Invalid period. Must be 'day', 'week', or 'month'", 400)
    return jsonify(aggregate_emotions(emotion_samples(user_id), period)), 200


# ---------- Coach ----------

@app.route("/api/coach-chat", methods=["POST"])
def coach_chat():
    data = body()
    user_id = as_int(data.get("user_id"))
    coach_type = text_field(data, "coach_type")
    message = text_field(data, "message")
    if user_id is None or not coach_type or not message:
        return error("Missing required fields", 400)
    if not db.session.get(User, user_id):
        return error("User not found", 404)

    conversation_id = data.get("conversation_id")
    if conversation_id:
        conversation = db.session.get(CoachConversation, as_int(conversation_id) or 0)
        if not conversation or conversation.user_id != user_id:
            return error("Conversation not found", 404)
        if conversation.coach_type != coach_type:
            return error("Coach type mismatch. The conversation belongs to a different coach type.", 400)
        history = [m for m in conversation.messages or [] if m.get("role") != "system"]
    else:
        conversation = None
        # carry context over from the latest conversation with this coach
        previous = (
            CoachConversation.query
            .filter_by(user_id=user_id, coach_type=coach_type)
            .order_by(CoachConversation.updated_at.desc())
            .first()
        )
        history = [m for m in previous.messages or [] if m.get("role") != "system"] if previous else []

    profile = ChakraProfile.query.filter_by(user_id=user_id).first()
    context = None
    if profile and not is_default_profile(profile.values()):
        context = chakra_coaching_context(profile.values())

    reply = gpt_service.generate_coach_reply(coach_type, message, history, context)

    exchange = [{"role": "user", "content": message}, {"role": "assistant", "content": reply}]
    if conversation:
        conversation.messages = list(conversation.messages or []) + exchange
        conversation.updated_at = datetime.utcnow()
    else:
        conversation = CoachConversation(user_id=user_id, coach_type=coach_type, messages=exchange)
        db.session.add(conversation)

    user_text = "\n".join(m["content"] for m in conversation.messages if m.get("role") == "user")
    conversation.emotion_scores = gpt_service.score_emotions(user_text)
    db.session.commit()

    return jsonify({"conversation": conversation.to_dict(), "message": reply}), 200


@app.route("/api/users/<int:user_id>/coach-conversations", methods=["GET"])
def list_coach_conversations(user_id: int):
    coach_type = request.args.get("coach_type")
    if not coach_type:
        return error("Missing coach_type parameter", 400)
    items = (
        CoachConversation.query
        .filter_by(user_id=user_id, coach_type=coach_type)
        .order_by(CoachConversation.updated_at.desc())
        .all()
    )
    return jsonify([it.to_dict() for it in items]), 200


@app.route("/api/coach-conversations/<int:conversation_id>", methods=["DELETE"])
def delete_coach_conversation(conversation_id: int):
    it = db.session.get(CoachConversation, conversation_id)
    if not it:
        return error("Conversation not found", 404)
    db.session.delete(it)
    db.session.commit()
    return jsonify({"ok": True, "deleted": conversation_id}), 200


# ---------- Community posts ----------

@app.route("/api/community/posts", methods=["GET"])
def list_posts():
    posts = CommunityPost.query.order_by(CommunityPost.created_at.desc(), CommunityPost.id.desc()).all()
    return jsonify([p.to_dict() for p in posts]), 200


@app.route("/api/users/<int:user_id>/posts", methods=["GET"])
def list_user_posts(user_id: int):
    posts = (
        CommunityPost.query
        .filter_by(user_id=user_id)
        .order_by(CommunityPost.created_at.desc())
        .all()
    )
    return jsonify([p.to_dict() for p in posts]), 200


@app.route("/api/community/posts", methods=["POST"])
def create_post():
    data = body()
    user_id = as_int(data.get("user_id"))
    content = text_field(data, "content")
    if user_id is None or not content:
        return error("Missing user_id or content", 400)
    if not db.session.get(User, user_id):
        return error("User not found", 404)

    post = CommunityPost(user_id=user_id, content=content, media_url=text_field(data, "media_url", None))
    db.session.add(post)
    db.session.commit()
    return jsonify(post.to_dict()), 201


def owned_post(post_id, data=None):
    """(post, None) for the acting owner, otherwise (None, error response)."""
    post = db.session.get(CommunityPost, post_id)
    if not post:
        return None, error("Post not found", 404)
    if acting_user_id(data) != post.user_id:
        return None, error("You can only modify your own posts", 403)
    return post, None


@app.route("/api/community/posts/<int:post_id>", methods=["PUT"])
def update_post(post_id: int):
    data = body()
    post, failure = owned_post(post_id, data)
    if failure:
        return failure
    content = text_field(data, "content")
    if not content:
        return error("Missing content", 400)
    post.content = content
    if "media_url" in data:
        post.media_url = text_field(data, "media_url", None)
    db.session.commit()
    return jsonify(post.to_dict()), 200


@app.route("/api/community/posts/<int:post_id>", methods=["DELETE"])
def delete_post(post_id: int):
    post, failure = owned_post(post_id)
    if failure:
        return failure
    db.session.delete(post)
    db.session.commit()
    return jsonify({"ok": True, "deleted": post_id}), 200


@app.route("/api/community/posts/<int:post_id>/react", methods=["POST"])
def react_to_post(post_id: int):
    data = body()
    user_id = as_int(data.get("user_id"))
    if user_id is None:
        return error("Missing user_id", 400)
    if not db.session.get(CommunityPost, post_id):
        return error("Post not found", 404)
    if not db.session.get(User, user_id):
        return error("User not found", 404)

    existing = PostReaction.query.filter_by(post_id=post_id, user_id=user_id).first()
    if existing:
        reaction_id = existing.id
        db.session.delete(existing)
        db.session.commit()
        return jsonify({"action": "removed", "reaction_id": reaction_id}), 200

    reaction = PostReaction(post_id=post_id, user_id=user_id, type=text_field(data, "type") or "like")
    db.session.add(reaction)
    db.session.commit()
    return jsonify({"action": "added", "reaction": reaction.to_dict()}), 201


@app.route("/api/community/posts/<int:post_id>/reactions", methods=["GET"])
def list_reactions(post_id: int):
    items = PostReaction.query.filter_by(post_id=post_id).all()
    return jsonify([it.to_dict() for it in items]), 200


@app.route("/api/community/posts/<int:post_id>/comments", methods=["GET"])
def list_comments(post_id: int):
    items = (
        PostComment.query
        .filter_by(post_id=post_id)
        .order_by(PostComment.created_at.asc())
        .all()
    )
    return jsonify([it.to_dict() for it in items]), 200


@app.route("/api/community/posts/<int:post_id>/comments", methods=["POST"])
def create_comment(post_id: int):
    data = body()
    user_id = as_int(data.get("user_id"))
    content = text_field(data, "content")
    if user_id is None or not content:
        return error("Missing user_id or content", 400)
    if not db.session.get(CommunityPost, post_id):
        return error("Post not found", 404)
    if not db.session.get(User, user_id):
        return error("User not found", 404)

    comment = PostComment(post_id=post_id, user_id=user_id, content=content)
    db.session.add(comment)
    db.session.commit()
    return jsonify(comment.to_dict()), 201


@app.route("/api/community/posts/<int:post_id>/comments/<int:comment_id>", methods=["DELETE"])
def delete_comment(post_id: int, comment_id: int):
    comment = db.session.get(PostComment, comment_id)
    if not comment or comment.post_id != post_id:
        return error("Comment not found", 404)
    if acting_user_id() != comment.user_id:
        return error("You can only delete your own comments", 403)
    db.session.delete(comment)
    db.session.commit()
    return jsonify({"ok": True, "deleted": comment_id}), 200


# ---------- Community events ----------

@app.route("/api/community/events", methods=["GET"])
def list_events():
    events = CommunityEvent.query.order_by(CommunityEvent.event_date.asc()).all()
    return jsonify([e.to_dict() for e in events]), 200


@app.route("/api/community/events/<int:event_id>", methods=["GET"])
def get_event(event_id: int):
    event = db.session.get(CommunityEvent, event_id)
    if not event:
        return error("Event not found", 404)
    return jsonify(event.to_dict()), 200


@app.route("/api/community/events", methods=["POST"])
def create_event():
    data = body()
    required = ("title", "description", "event_date", "event_time")
    missing = [k for k in required if not data.get(k)]
    if missing:
        return error(f"Missing fields: {', '.join(missing)}", 400)
    try:
        event_date = datetime.fromisoformat(str(data["event_date"]).replace("Z", ""))
    except ValueError:
        return error("'event_date' must be an ISO date", 400)
    status = data.get("status") or "upcoming"
    if status not in EVENT_STATUSES:
        return error(f"'status' must be one of {', '.join(EVENT_STATUSES)}", 400)
    max_attendees = data.get("max_attendees")
    if max_attendees is not None and (as_int(max_attendees) is None or as_int(max_attendees) < 1):
        return error("'max_attendees' must be a positive integer", 400)

    event = CommunityEvent(
        title=text_field(data, "title"),
        description=text_field(data, "description"),
        event_date=event_date,
        event_time=text_field(data, "event_time"),
        duration=as_int(data.get("duration")),
        is_virtual=bool(data.get("is_virtual", True)),
        is_free=bool(data.get("is_free", False)),
        zoom_link=text_field(data, "zoom_link", None),
        max_attendees=as_int(max_attendees) if max_attendees is not None else None,
        status=status,
    )
    db.session.add(event)
    db.session.commit()
    return jsonify(event.to_dict()), 201


@app.route("/api/community/events/<int:event_id>/register", methods=["POST"])
def register_for_event(event_id: int):
    data = body()
    user_id = as_int(data.get("user_id"))
    if user_id is None:
        return error("Missing user_id", 400)
    event = db.session.get(CommunityEvent, event_id)
    if not event:
        return error("Event not found", 404)
    if not db.session.get(User, user_id):
        return error("User not found", 404)
    if event.status in ("completed", "cancelled"):
        return error(f"Event is {event.status}", 400)
    if EventAttendee.query.filter_by(event_id=event_id, user_id=user_id).first():
        return error("Already registered for this event", 409)
    if event.max_attendees is not None and event.attendees.count() >= event.max_attendees:
        return error("Event is full", 400)

    attendee = EventAttendee(event_id=event_id, user_id=user_id)
    db.session.add(attendee)
    db.session.commit()
    return jsonify(attendee.to_dict()), 201


if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        debug=os.getenv("FLASK_DEBUG") == "1"
    )
