"""
Poise Configuration System
==========================

This file contains ALL configuration for the Poise practice engine.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (scoring tables and technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize Poise's behavior
# =============================================================================

# Google Cloud project used for Gemini, Speech-to-Text and Text-to-Speech
GOOGLE_CLOUD_PROJECT = "your-project-id"  # Change this!
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Hume AI key for emotion recognition (empty disables the live emotion feed)
HUME_API_KEY = ""

# Where profiles, sessions and achievements are stored
DATA_DIR = "./_poise"

# Practice settings
DEFAULT_SCENARIO = "coffee-shop"
DEFAULT_USER_ID = "current-user"

# Speech settings
ENABLE_TTS = True
TTS_VOICE = "en-US-Neural2-F"
LANGUAGE_CODE = "en-US"

# Logging
LOG_FILE = "./_poise/poise.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Live conversation scoring
POSITIVE_EMOTIONS = frozenset({"joy", "happiness", "confidence", "calm"})
NEGATIVE_EMOTIONS = frozenset({"anxiety", "nervousness", "anger", "sadness"})
POSITIVE_EMOTION_WEIGHT = 10
NEGATIVE_EMOTION_WEIGHT = 5
ENGAGEMENT_BONUS_PER_MESSAGE = 5
MIN_SCORE = 0
MAX_SCORE = 100

# Session bookkeeping
EMOTION_HISTORY_LIMIT = 50
EMOTIONS_PER_USER_MESSAGE = 3

# Medal progression
MEDAL_NAMES = (
    "friendliness",
    "composure",
    "charisma",
    "awareness",
    "persuasion",
    "empathy",
    "clarity",
    "adaptability",
)
FRIENDLINESS_EMOTIONS = ("joy", "happiness", "contentment")
STRESS_EMOTIONS = ("anxiety", "stress", "nervousness")
CHARISMA_EMOTIONS = ("confidence", "enthusiasm", "excitement")
COMPOSURE_BASELINE = 10.0
COMPOSURE_THRESHOLD = 5.0
MEDAL_PROGRESS_SCALE = 10.0
POINTS_PER_MEDAL_LEVEL = 20
MEDAL_LEVELS_PER_USER_LEVEL = 5

# Session report
REPORT_TOP_EMOTIONS = 5
SUGGESTION_SCORE_THRESHOLD = 60
SUGGESTION_ANXIETY_THRESHOLD = 0.6
SUGGESTION_MIN_USER_MESSAGES = 3
ANXIOUS_EMOTIONS = ("anxiety", "nervousness")

# LLM
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.5-flash-lite"
LLM_TIMEOUT = 60
MAX_OUTPUT_TOKENS = 150
REPLY_TEMPERATURE = 0.8
FEEDBACK_TEMPERATURE = 0.7
HISTORY_WINDOW = 10

# Text-to-speech technical
TTS_SAMPLE_RATE = 16000
TTS_BASE_SPEAKING_RATE = 1.0
TTS_BASE_PITCH = 0.0

# Hume batch API
HUME_BASE_URL = "https://api.hume.ai/v0"
HUME_POLL_ATTEMPTS = 10
HUME_POLL_INTERVAL = 1.0
HUME_TIMEOUT = 30
# Seconds stop() waits for each background analysis still in flight
EMOTION_WORKER_JOIN_TIMEOUT = 5.0

# Analytics
ANALYTICS_WINDOW_DAYS = 30
RECENT_SESSIONS_LIMIT = 10


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: str
    google_application_credentials: Optional[str] = None
    hume_api_key: str = HUME_API_KEY
    data_dir: str = DATA_DIR
    default_scenario: str = DEFAULT_SCENARIO
    default_user_id: str = DEFAULT_USER_ID
    enable_tts: bool = ENABLE_TTS
    tts_voice: str = TTS_VOICE
    language_code: str = LANGUAGE_CODE
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME

    @property
    def has_emotion_feed(self) -> bool:
        """True when a Hume key is configured."""
        return bool(self.hume_api_key)


def get_config(require_cloud: bool = True) -> Config:
    """
    Load configuration, letting environment variables override the settings above.

    Args:
        require_cloud: Reject the placeholder project id (offline runs pass False)

    Returns:
        Populated Config
    """
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if require_cloud and project == "your-project-id":
        raise ValueError("Please set GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    data_dir = os.getenv("POISE_DATA_DIR") or DATA_DIR
    return Config(
        google_cloud_project=project,
        google_application_credentials=credentials,
        hume_api_key=os.getenv("HUME_API_KEY") or HUME_API_KEY,
        data_dir=data_dir,
        log_file=os.path.join(data_dir, "poise.log"),
        log_level=os.getenv("POISE_LOG_LEVEL") or LOG_LEVEL,
    )
