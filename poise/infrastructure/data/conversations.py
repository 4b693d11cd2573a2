"""
JSON document shapes for session records, profiles and achievements.
Keys are camelCase to stay compatible with documents written by the mobile app.
"""
from dataclasses import asdict
from typing import Dict, Any

from ...coaching.models import (
    EmotionSample, ConversationMessage, SessionRecord, Speaker,
    UserProfile, UserPreferences, AchievementEntry, default_medals,
)


def emotion_to_dict(sample: EmotionSample) -> Dict[str, Any]:
    return {
        'emotion': sample.emotion,
        'intensity': sample.intensity,
        'confidence': sample.confidence,
        'timestamp': sample.timestamp,
    }


def emotion_from_dict(data: Dict[str, Any]) -> EmotionSample:
    return EmotionSample(
        emotion=data['emotion'],
        intensity=float(data['intensity']),
        confidence=float(data.get('confidence', 1.0)),
        timestamp=int(data['timestamp']),
    )


def message_to_dict(message: ConversationMessage) -> Dict[str, Any]:
    data = {
        'id': message.id,
        'type': message.speaker.value,
        'content': message.content,
        'timestamp': message.timestamp,
    }
    if message.audio_ref is not None:
        data['audioUri'] = message.audio_ref
    if message.emotions:
        data['emotions'] = [emotion_to_dict(e) for e in message.emotions]
    return data


def message_from_dict(data: Dict[str, Any]) -> ConversationMessage:
    return ConversationMessage(
        id=data['id'],
        speaker=Speaker(data['type']),
        content=data['content'],
        timestamp=int(data['timestamp']),
        audio_ref=data.get('audioUri'),
        emotions=tuple(emotion_from_dict(e) for e in data.get('emotions', [])),
    )


def record_to_dict(record: SessionRecord) -> Dict[str, Any]:
    """Serialize a session record; the id is the document name, not a field."""
    return {
        'userId': record.user_id,
        'scenarioId': record.scenario_id,
        'startTime': record.start_time,
        'endTime': record.end_time,
        'messages': [message_to_dict(m) for m in record.messages],
        'emotions': [emotion_to_dict(e) for e in record.emotions],
        'score': record.score,
        'achievements': list(record.achievements),
        'transcript': record.transcript,
    }


def record_from_dict(record_id: str, data: Dict[str, Any]) -> SessionRecord:
    return SessionRecord(
        id=record_id,
        user_id=data['userId'],
        scenario_id=data['scenarioId'],
        start_time=int(data['startTime']),
        end_time=data.get('endTime'),
        messages=tuple(message_from_dict(m) for m in data.get('messages', [])),
        emotions=tuple(emotion_from_dict(e) for e in data.get('emotions', [])),
        score=int(data.get('score', 0)),
        achievements=tuple(data.get('achievements', [])),
        transcript=data.get('transcript', ''),
    )


def profile_to_dict(profile: UserProfile) -> Dict[str, Any]:
    return {
        'id': profile.id,
        'email': profile.email,
        'name': profile.name,
        'level': profile.level,
        'totalSessions': profile.total_sessions,
        'averageScore': profile.average_score,
        'medals': dict(profile.medals),
        'preferences': {
            'voiceEnabled': profile.preferences.voice_enabled,
            'emotionAnalysis': profile.preferences.emotion_analysis,
            'difficulty': profile.preferences.difficulty,
        },
        'revision': profile.revision,
    }


def profile_from_dict(data: Dict[str, Any]) -> UserProfile:
    prefs = data.get('preferences', {})
    medals = default_medals()
    medals.update({name: int(level) for name, level in data.get('medals', {}).items()})
    return UserProfile(
        id=data['id'],
        email=data.get('email', ''),
        name=data.get('name', ''),
        level=int(data.get('level', 1)),
        total_sessions=int(data.get('totalSessions', 0)),
        average_score=float(data.get('averageScore', 0.0)),
        medals=medals,
        preferences=UserPreferences(
            voice_enabled=prefs.get('voiceEnabled', True),
            emotion_analysis=prefs.get('emotionAnalysis', True),
            difficulty=prefs.get('difficulty', 'beginner'),
        ),
        revision=int(data.get('revision', 0)),
    )


def achievement_to_dict(entry: AchievementEntry) -> Dict[str, Any]:
    data = asdict(entry)
    return {
        'userId': data['user_id'],
        'medalType': data['medal_type'],
        'level': data['level'],
        'timestamp': data['timestamp'],
    }


def achievement_from_dict(data: Dict[str, Any]) -> AchievementEntry:
    return AchievementEntry(
        user_id=data['userId'],
        medal_type=data['medalType'],
        level=int(data['level']),
        timestamp=int(data['timestamp']),
    )
