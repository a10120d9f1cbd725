"""Chakra lookup tables and the heuristics built on them.

Values are 1-10 per chakra. Everything here is static data plus threshold
comparisons; nothing touches the database.
"""
import math
from dataclasses import dataclass, asdict

CHAKRA_KEYS = ["crown", "third_eye", "throat", "heart", "solar_plexus", "sacral", "root"]

MIN_VALUE = 1.0
MAX_VALUE = 10.0
DEFAULT_VALUE = 5.0

CHAKRAS = [
    {
        "key": "crown",
        "name": "Crown Chakra",
        "sanskrit_name": "Sahasrara",
        "color": "#9370DB",
        "location": "Top of the head",
        "element": "Thought/Consciousness",
        "description": "Connection to universal consciousness and spirituality",
        "overactive_symptoms": ["Spiritual addiction", "Disconnection from physical reality", "Overthinking"],
        "underactive_symptoms": ["Spiritual skepticism", "Feeling disconnected", "Lack of purpose or meaning"],
        "healing_practices": ["Meditation", "Silent reflection", "Visualization", "Sound healing with high frequency tones"],
        "affirmations": ["I am connected to divine wisdom", "I am one with all that is"],
    },
    {
        "key": "third_eye",
        "name": "Third Eye Chakra",
        "sanskrit_name": "Ajna",
        "color": "#483D8B",
        "location": "Center of the forehead",
        "element": "Light/Intuition",
        "description": "Intuition, imagination, and clarity of thought",
        "overactive_symptoms": ["Headaches", "Nightmares", "Obsessive thoughts"],
        "underactive_symptoms": ["Poor memory", "Lack of imagination", "Denial of intuitive insights"],
        "healing_practices": ["Visualization", "Dream work", "Journaling insights", "Star gazing"],
        "affirmations": ["I trust my intuition", "I see clearly in all situations"],
    },
    {
        "key": "throat",
        "name": "Throat Chakra",
        "sanskrit_name": "Vishuddha",
        "color": "#1E90FF",
        "location": "Throat area",
        "element": "Sound/Ether",
        "description": "Expression, communication, and truth",
        "overactive_symptoms": ["Talking too much", "Interrupting", "Dominating conversations"],
        "underactive_symptoms": ["Fear of speaking up", "Shyness", "Difficulty expressing thoughts"],
        "healing_practices": ["Singing", "Chanting", "Writing", "Humming"],
        "affirmations": ["I speak my truth with clarity and confidence", "My voice matters"],
    },
    {
        "key": "heart",
        "name": "Heart Chakra",
        "sanskrit_name": "Anahata",
        "color": "#3CB371",
        "location": "Center of the chest",
        "element": "Air/Love",
        "description": "Love, compassion, and emotional balance",
        "overactive_symptoms": ["Codependency", "Poor boundaries", "Jealousy"],
        "underactive_symptoms": ["Isolation", "Fear of intimacy", "Holding grudges"],
        "healing_practices": ["Compassion meditation", "Deep breathing", "Forgiveness work", "Spending time in nature"],
        "affirmations": ["I am open to giving and receiving love", "My heart is open and filled with love"],
    },
    {
        "key": "solar_plexus",
        "name": "Solar Plexus Chakra",
        "sanskrit_name": "Manipura",
        "color": "#FFD700",
        "location": "Above the navel",
        "element": "Fire/Will",
        "description": "Personal power, will, and transformation",
        "overactive_symptoms": ["Need for control", "Anger issues", "Workaholism"],
        "underactive_symptoms": ["Low self-esteem", "Indecisiveness", "Seeking approval"],
        "healing_practices": ["Core strengthening", "Setting boundaries", "Affirmations", "Martial arts"],
        "affirmations": ["I am confident in my abilities", "I stand in my personal power"],
    },
    {
        "key": "sacral",
        "name": "Sacral Chakra",
        "sanskrit_name": "Svadhisthana",
        "color": "#FF7F50",
        "location": "Lower abdomen",
        "element": "Water/Emotion",
        "description": "Creativity, sexuality, and emotional flow",
        "overactive_symptoms": ["Emotional overwhelm", "Attachment issues", "Drama-seeking"],
        "underactive_symptoms": ["Creative blocks", "Emotional rigidity", "Resistance to change"],
        "healing_practices": ["Dancing", "Creative arts", "Hip-opening yoga", "Water therapy"],
        "affirmations": ["I embrace my creativity and emotional nature", "I flow with life's changes"],
    },
    {
        "key": "root",
        "name": "Root Chakra",
        "sanskrit_name": "Muladhara",
        "color": "#DC143C",
        "location": "Base of the spine",
        "element": "Earth/Stability",
        "description": "Grounding, stability, and basic needs",
        "overactive_symptoms": ["Materialism", "Greed", "Resistance to change"],
        "underactive_symptoms": ["Anxiety", "Fear", "Feeling ungrounded"],
        "healing_practices": ["Grounding exercises", "Walking in nature", "Gardening", "Physical exercise"],
        "affirmations": ["I am safe and secure", "I am grounded and centered"],
    },
]

CHAKRAS_BY_KEY = {c["key"]: c for c in CHAKRAS}

STATUS_LABELS = {
    "blocked": "Blocked/Severely Underactive",
    "underactive": "Underactive",
    "balanced": "Balanced",
    "overactive": "Overactive",
}

BASE_DESCRIPTIONS = {
    "blocked": "This chakra is significantly underactive and may be causing notable challenges in the associated areas of your life. Focused healing work is recommended.",
    "underactive": "This chakra is underactive, which may be causing some difficulties in the associated aspects of your life. Regular attention to this area would be beneficial.",
    "balanced": "This chakra is functioning well and in harmony with your other energy centers. Maintain current practices to sustain this balance.",
    "overactive": "This chakra is excessively active, which may create imbalances in how you express this energy. Working to calm and harmonize this chakra would be helpful.",
}

GENERIC_DESCRIPTION = "This chakra needs attention and balancing."

CHAKRA_DESCRIPTIONS = {
    "root": {
        "underactive": "The Root chakra appears to be underactive. This may manifest as feelings of instability, anxiety about basic needs, disconnection from the body, or difficulty feeling grounded.",
        "overactive": "The Root chakra appears to be overactive. This may manifest as rigidity, materialism, excessive focus on security, or resistance to change.",
        "balanced": "The Root chakra is well-balanced. This suggests a strong foundation of safety, security, and physical wellbeing.",
    },
    "sacral": {
        "underactive": "The Sacral chakra appears to be underactive. This may manifest as suppressed emotions, creative blocks, difficulty feeling joy, or fear of intimacy.",
        "overactive": "The Sacral chakra appears to be overactive. This may manifest as emotional volatility, obsessive attachments, addictive behaviors, or boundary issues in relationships.",
        "balanced": "The Sacral chakra is well-balanced. This suggests healthy emotional flow, creative expression, and comfort with pleasure and passion.",
    },
    "solar_plexus": {
        "underactive": "The Solar Plexus chakra appears to be underactive. This may manifest as low confidence, constant self-doubt, people-pleasing, or difficulty making decisions.",
        "overactive": "The Solar Plexus chakra appears to be overactive. This may manifest as domineering behavior, excessive control, perfectionism, or anger management issues.",
        "balanced": "The Solar Plexus chakra is well-balanced. This suggests healthy self-confidence, personal power, and the ability to meet challenges effectively.",
    },
    "heart": {
        "underactive": "The Heart chakra appears to be underactive. This may manifest as difficulty giving or receiving love, emotional isolation, resentment, or grief that hasn't been processed.",
        "overactive": "The Heart chakra appears to be overactive. This may manifest as codependency, emotional overwhelm, poor boundaries in relationships, or possessiveness.",
        "balanced": "The Heart chakra is well-balanced. This suggests the capacity for compassion, healthy relationships, self-love, and emotional openness.",
    },
    "throat": {
        "underactive": "The Throat chakra appears to be underactive. You may stay quiet when you want to speak, struggle to express your needs, or let others make decisions for you.",
        "overactive": "The Throat chakra appears to be overactive. This may manifest as excessive talking, interrupting others, inability to listen, or being domineering in communication.",
        "balanced": "The Throat chakra is well-balanced. This suggests clear communication, authentic self-expression, and the ability to listen as well as speak your truth.",
    },
    "third_eye": {
        "underactive": "The Third Eye chakra appears to be underactive. This may manifest as difficulty trusting your inner voice, confusion when making decisions, or feeling stuck in mental fog.",
        "overactive": "The Third Eye chakra appears to be overactive. This may manifest as overthinking, spiritual bypassing, detachment from reality, or confusion between intuition and imagination.",
        "balanced": "The Third Eye chakra is well-balanced. This suggests strong intuition, clear perception, imagination grounded in reality, and access to inner wisdom.",
    },
    "crown": {
        "underactive": "The Crown chakra appears to be underactive. This may manifest as feeling disconnected from life, a sense that something is missing, or difficulty trusting life's timing.",
        "overactive": "The Crown chakra appears to be overactive. This may manifest as spiritual addiction, escapism, disconnection from physical reality, or spiritual superiority.",
        "balanced": "The Crown chakra is well-balanced. This suggests spiritual connection, understanding of one's purpose, and the ability to live with awareness of both material and spiritual dimensions.",
    },
}


@dataclass
class ChakraStatus:
    status: str
    level: str
    label: str
    description: str

    def to_dict(self):
        return asdict(self)


def chakra_level(value):
    if value <= 3:
        return "blocked"
    if value <= 5:
        return "underactive"
    if value <= 7:
        return "balanced"
    return "overactive"


def level_direction(level):
    return "underactive" if level == "blocked" else level


def chakra_description(chakra_key, direction):
    return CHAKRA_DESCRIPTIONS.get(chakra_key, {}).get(direction, GENERIC_DESCRIPTION)


def get_chakra_status(value, chakra_key=None):
    """Classify a 1-10 value, with chakra-specific text when a key is given."""
    level = chakra_level(value)
    direction = level_direction(level)
    if chakra_key:
        description = chakra_description(chakra_key, direction)
    else:
        description = BASE_DESCRIPTIONS[level]
    return ChakraStatus(
        status=direction,
        level=level,
        label=STATUS_LABELS[level],
        description=description,
    )


def clamp_chakra_value(value):
    """Parse a number or numeric string into [1, 10] with one decimal.

    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a chakra value: {value!r}")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"Not a chakra value: {value!r}")
    return round(min(MAX_VALUE, max(MIN_VALUE, number)), 1)


def is_default_profile(values):
    """True for the all-5 placeholder profile that predates any assessment."""
    if not values:
        return True
    return all(float(values.get(key, DEFAULT_VALUE)) == DEFAULT_VALUE for key in CHAKRA_KEYS)


def overall_balance(values):
    if not values:
        return {
            "score": 0,
            "status": "Not assessed",
            "description": "Complete the chakra assessment to receive your personalized chakra balance report.",
        }

    avg = round(sum(values.values()) / len(values), 1)
    if avg < 4:
        status = "Significantly Underactive"
        description = "Your overall chakra system appears underactive. You may benefit from energizing practices like movement, active meditation, and connecting with your passions. Focus on gradually activating each chakra from the root upward."
    elif avg < 5.5:
        status = "Mildly Underactive"
        description = "Your chakra system is slightly underactive. Consider incorporating more dynamic and expressive practices into your routine, like creative activities, movement, and verbal expression of feelings."
    elif avg > 8:
        status = "Significantly Overactive"
        description = "Your overall chakra system appears overactive. You may benefit from grounding practices like meditation, deep breathing, and activities that promote calm and centeredness."
    elif avg > 6.5:
        status = "Mildly Overactive"
        description = "Your chakra system is slightly overactive. Consider incorporating more calming practices into your routine, like gentle meditation, mindful breathing, and activities that promote reflection."
    else:
        status = "Relatively Balanced"
        description = "Your chakra system is relatively balanced overall. Continue your current practices while paying attention to specific chakras that may be either overactive or underactive."
    return {"score": avg, "status": status, "description": description}


def _distance_from_balance(value):
    # balanced band is 5-7
    return 5 - value if value <= 5 else value - 7


def chakra_recommendations(values):
    if not values:
        return {
            "focus_areas": [],
            "practices": [],
            "insights": "Complete your chakra assessment to receive personalized recommendations.",
        }

    imbalanced = []
    for key, value in values.items():
        status = get_chakra_status(value)
        if status.level != "balanced":
            imbalanced.append((key, value, status))
    imbalanced.sort(key=lambda item: _distance_from_balance(item[1]), reverse=True)
    imbalanced = imbalanced[:3]

    focus_areas = []
    practices = []
    for key, value, status in imbalanced:
        info = CHAKRAS_BY_KEY.get(key)
        if not info:
            continue
        focus_areas.append(f"{info['name']} ({status.label})")
        if status.status == "underactive":
            practices.append(f"{info['healing_practices'][0]} to activate your {info['name']}")
        else:
            practices.append(f"Grounding meditation to balance your {info['name']}")
    practices.append("Daily chakra scan meditation to monitor your energy")
    practices.append("Journaling about emotional and energetic patterns")

    insights = "Based on your chakra assessment, you would benefit from focusing on creating greater balance between your energy centers. "
    if imbalanced:
        key, _, status = imbalanced[0]
        info = CHAKRAS_BY_KEY.get(key)
        if info:
            symptoms = info[f"{status.status}_symptoms"][:2]
            insights += f"Your {info['name']} is particularly {status.status}, which may manifest as {' and '.join(symptoms)}. "
    insights += "Regular practice of the recommended exercises, combined with self-reflection, will help you create greater harmony in your energy system over time."

    return {"focus_areas": focus_areas, "practices": practices, "insights": insights}


def chakra_coaching_context(values):
    """Prompt block describing the user's chakra profile for the AI coach."""
    if not values:
        return ""

    lines = []
    for key, value in values.items():
        name = CHAKRAS_BY_KEY.get(key, {}).get("name", key)
        lines.append(f"{name}: {value}/10 ({get_chakra_status(value).status})")

    key, value = max(values.items(), key=lambda kv: abs(kv[1] - DEFAULT_VALUE))
    if value < DEFAULT_VALUE:
        direction = "underactive"
    elif value > DEFAULT_VALUE:
        direction = "overactive"
    else:
        direction = "balanced"
    info = CHAKRAS_BY_KEY.get(key, {"name": key, "healing_practices": [], "description": ""})

    practices = "\n".join(f"- {p}" for p in info["healing_practices"])
    return (
        "CHAKRA ASSESSMENT CONTEXT:\n"
        "Overall Profile:\n"
        + "\n".join(lines)
        + f"\n\nPrimary Focus: {info['name']} ({value}/10, {direction})\n"
        + chakra_description(key, direction)
        + "\n\nRecommended healing practices:\n"
        + practices
        + f"\n\nCoaching considerations:\n- This user would benefit from focusing on their {info['name']}."
        + f"\n- The imbalance relates to {info['description'].lower()}.\n"
    )
