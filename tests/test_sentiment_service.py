from scattered_lights.sentiment_service import (
    analyze_sentiment,
    determine_chakra_tags,
    extract_emotion_tags,
    sentiment_to_scale,
)


def test_analyze_sentiment_moods() -> None:
    assert analyze_sentiment("I am so happy and grateful today!")["mood"] == "positive"
    assert analyze_sentiment("This is terrible, I hate everything.")["mood"] == "negative"
    assert analyze_sentiment("") == {"score": 0.0, "mood": "neutral"}


def test_sentiment_scale_bounds() -> None:
    assert sentiment_to_scale(-1.0) == 1
    assert sentiment_to_scale(1.0) == 10
    assert sentiment_to_scale(3.0) == 10
    assert 1 <= sentiment_to_scale(0.3) <= 10


def test_emotion_tags_from_keywords() -> None:
    assert extract_emotion_tags("I felt happy but worried") == ["joy", "anxiety"]


def test_emotion_tag_defaults() -> None:
    assert extract_emotion_tags("Nothing much", ["my dog"]) == ["gratitude"]
    assert extract_emotion_tags("Nothing much") == ["reflection"]


def test_chakra_tags_from_keywords() -> None:
    assert determine_chakra_tags("I want to speak with my own voice") == ["throat"]
    assert determine_chakra_tags("Feeling grounded", goals=["trust my intuition"]) == ["root", "third_eye"]


def test_chakra_tag_defaults() -> None:
    assert determine_chakra_tags("Nothing much", affirmation="I am enough") == ["heart"]
    assert determine_chakra_tags("Nothing much", goals=["run a mile"]) == ["solar_plexus"]
    assert determine_chakra_tags("Nothing much") == ["third_eye"]
