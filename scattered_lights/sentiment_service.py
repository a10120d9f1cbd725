from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

analyzer = SentimentIntensityAnalyzer()

EMOTION_KEYWORDS = {
    "happy": "joy",
    "sad": "sadness",
    "angry": "anger",
    "fear": "fear",
    "love": "love",
    "peace": "peace",
    "grateful": "gratitude",
    "excited": "excitement",
    "worried": "anxiety",
    "content": "contentment",
}

CHAKRA_KEYWORDS = {
    "ground": "root",
    "secure": "root",
    "create": "sacral",
    "emotion": "sacral",
    "confidence": "solar_plexus",
    "power": "solar_plexus",
    "love": "heart",
    "compassion": "heart",
    "speak": "throat",
    "voice": "throat",
    "insight": "third_eye",
    "intuition": "third_eye",
    "spiritual": "crown",
    "connection": "crown",
}


def analyze_sentiment(text):
    score = analyzer.polarity_scores(text or "")
    compound = score["compound"]
    if compound >= 0.05:
        mood = "positive"
    elif compound <= -0.05:
        mood = "negative"
    else:
        mood = "neutral"
    return {"score": compound, "mood": mood}


def sentiment_to_scale(compound):
    """Map a VADER compound score in [-1, 1] onto the 1-10 journal scale."""
    compound = max(-1.0, min(1.0, compound))
    return int(round((compound + 1) * 4.5 + 1))


def _matches(text, keywords):
    found = []
    for keyword, tag in keywords.items():
        if keyword in text and tag not in found:
            found.append(tag)
    return found


def extract_emotion_tags(content, gratitude=None, affirmation=""):
    gratitude = gratitude or []
    text = " ".join([content or "", " ".join(gratitude), affirmation or ""]).lower()
    tags = _matches(text, EMOTION_KEYWORDS)
    if not tags:
        if any(g.strip() for g in gratitude):
            tags.append("gratitude")
        else:
            tags.append("reflection")
    return tags


def determine_chakra_tags(content, affirmation="", goals=None):
    goals = goals or []
    text = " ".join([content or "", affirmation or "", " ".join(goals)]).lower()
    tags = _matches(text, CHAKRA_KEYWORDS)
    if not tags:
        if "I am" in (affirmation or ""):
            tags.append("heart")
        elif goals:
            tags.append("solar_plexus")
        else:
            tags.append("third_eye")
    return tags
