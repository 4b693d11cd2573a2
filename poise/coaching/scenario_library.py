"""
Built-in practice scenarios.

Each entry carries both the dialogue graph and its display projection, so the
practice menu and the conversation engine read the same record.
"""
from typing import List, Dict, Any

from .scenarios import ScenarioCatalog, ScenarioScript, scenario_from_dict


BUILTIN_SCENARIOS: List[Dict[str, Any]] = [
    {
        "id": "coffee-shop",
        "title": "Coffee Shop Approach",
        "description": "Approach someone reading and start a natural conversation",
        "opening_node": "initial",
        "nodes": {
            "initial": {
                "content": "Hi there! I couldn't help but notice you're reading. Mind if I ask what book that is?",
                "responses": [
                    {"id": "book-response", "content": "Oh, it's 'The Midnight Library' by Matt Haig. Have you read it?",
                     "next_node_id": "book-discussion"},
                    {"id": "private-response", "content": "I'm actually trying to focus on reading right now.",
                     "next_node_id": "respectful-exit"},
                ],
            },
            "book-discussion": {
                "content": "I've heard great things about it! What do you think so far?",
                "conditions": {"emotion": "interest", "min_intensity": 0.3},
                "responses": [
                    {"id": "positive-book", "content": "It's really thought-provoking! Makes you think about life choices.",
                     "next_node_id": "deeper-conversation", "score_modifier": 10},
                    {"id": "neutral-book", "content": "It's okay, not really my usual genre.",
                     "next_node_id": "genre-discussion", "score_modifier": 5},
                ],
            },
            "genre-discussion": {
                "content": "Fair enough! What do you usually like to read?",
                "responses": [
                    {"id": "genre-share", "content": "Mostly mysteries. I like trying to solve them before the end.",
                     "next_node_id": "deeper-conversation", "score_modifier": 10},
                    {"id": "genre-shrug", "content": "A bit of everything, really.", "score_modifier": 3},
                ],
            },
            "deeper-conversation": {
                "content": "That sounds fascinating. I love books that make you reflect. Are you a regular here?",
                "responses": [
                    {"id": "regular-yes", "content": "Yeah, I come here most mornings. The atmosphere is perfect for reading.",
                     "next_node_id": "connection-building", "score_modifier": 15},
                    {"id": "regular-no", "content": "Not really, just discovered this place. It's nice though.",
                     "next_node_id": "place-discussion", "score_modifier": 10},
                ],
            },
            "place-discussion": {
                "content": "Same here, it's my first week. The pastries alone might make me a regular.",
                "responses": [
                    {"id": "pastry-tip", "content": "Try the almond croissant. Worth every crumb.",
                     "next_node_id": "connection-building", "score_modifier": 12},
                ],
            },
            "respectful-exit": {
                "content": "Of course, I totally understand. Enjoy your reading!",
                "responses": [
                    {"id": "polite-thanks", "content": "Thanks for understanding. Have a great day!", "score_modifier": 5},
                ],
            },
            "connection-building": {
                "content": "That's great! I'm always looking for good reading spots. Maybe I'll see you here again sometime.",
                "responses": [
                    {"id": "positive-connection", "content": "That would be nice! I'm usually here around 9 AM on weekdays.",
                     "score_modifier": 20},
                ],
            },
        },
        "success_conditions": {
            "min_score": 50,
            "required_emotions": ["interest", "friendliness"],
            "max_duration": 300000,
        },
        "display": {
            "difficulty": "Beginner",
            "mode": "social",
            "background": "cafe",
            "icon": "coffee",
            "gradient": ["#8B5CF6", "#3B82F6"],
            "avatar": "alex",
            "primary_objective": "Start a conversation and exchange 3 messages",
            "bonus_objectives": [
                "Make an observational comment about their book/drink",
                "Get them to smile or laugh",
                "Find one thing in common",
            ],
            "success_behaviors": ["Eye contact", "Genuine smile", "Natural conversation flow"],
            "failure_behaviors": ["One-word answers", "Closed body language", "Awkward silence"],
        },
    },
    {
        "id": "house-party",
        "title": "House Party Group Join",
        "description": "Join a group conversation without being awkward",
        "opening_node": "join",
        "nodes": {
            "join": {
                "content": "Hey! We were just arguing about the best place we've ever travelled. Got a favourite?",
                "responses": [
                    {"id": "travel-story", "content": "Lisbon, easily. I got lost for a whole day and loved every minute.",
                     "next_node_id": "group-laugh", "score_modifier": 15},
                    {"id": "travel-deflect", "content": "Oh, I haven't been many places. What about you?",
                     "next_node_id": "group-share", "score_modifier": 5},
                ],
            },
            "group-laugh": {
                "content": "Ha! Lost on purpose or lost lost? Sam over here once missed a flight doing that.",
                "responses": [
                    {"id": "include-sam", "content": "Sam, you have to tell me that story.",
                     "next_node_id": "group-share", "score_modifier": 15},
                ],
            },
            "group-share": {
                "content": "Honestly, I think the best trips are the unplanned ones. Anyway, do you know the host?",
                "responses": [
                    {"id": "host-friend", "content": "We work together. She never stops talking about you lot.",
                     "score_modifier": 10},
                ],
            },
        },
        "success_conditions": {
            "min_score": 55,
            "required_emotions": ["joy", "confidence"],
            "max_duration": 480000,
        },
        "display": {
            "difficulty": "Intermediate",
            "mode": "social",
            "background": "party",
            "icon": "music",
            "gradient": ["#F59E0B", "#EF4444"],
            "avatar": "sara",
            "primary_objective": "Successfully join and contribute to group conversation",
            "bonus_objectives": [
                "Make the group laugh",
                "Include a quieter member in conversation",
                "Get invited to continue hanging out",
            ],
            "success_behaviors": ["Listen first", "Contribute meaningfully", "Include others"],
            "failure_behaviors": ["Interrupt others", "Talk too much", "Off-topic remarks"],
        },
    },
    {
        "id": "bar-flirtation",
        "title": "Bar Flirtation",
        "description": "Seated next to someone intriguing - start and maintain engaging conversation",
        "opening_node": "song",
        "nodes": {
            "song": {
                "content": "Hi! I hope you don't mind me saying, but you have great taste in music. This song is one of my favorites.",
                "responses": [
                    {"id": "playful-tease", "content": "You're just saying that because I asked the bartender to play it.",
                     "next_node_id": "banter", "score_modifier": 15},
                    {"id": "flat-thanks", "content": "Oh. Thanks.", "score_modifier": -5},
                ],
            },
            "banter": {
                "content": "Busted. So what else should I know about your questionable jukebox powers?",
                "conditions": {"emotion": "confidence", "min_intensity": 0.4},
                "responses": [
                    {"id": "invite", "content": "Only that they work best over a second drink. Want to find out?",
                     "score_modifier": 20},
                ],
            },
        },
        "success_conditions": {
            "min_score": 60,
            "required_emotions": ["confidence", "joy"],
            "max_duration": 300000,
        },
        "display": {
            "difficulty": "Advanced",
            "mode": "romantic",
            "background": "date",
            "icon": "heart",
            "gradient": ["#EC4899", "#8B5CF6"],
            "avatar": "amy",
            "primary_objective": "Break the ice and have engaging 5-minute conversation",
            "bonus_objectives": [
                "Use playful teasing appropriately",
                "Maintain eye contact 60% of the time",
                "Get agreement to meet again",
            ],
            "success_behaviors": ["Confident teasing", "Active listening", "Smooth responses"],
            "failure_behaviors": ["Being overbearing", "Missing social cues", "Unconfident tone"],
        },
    },
    {
        "id": "job-interview",
        "title": "Job Interview",
        "description": "Navigate a challenging job interview with confidence",
        "opening_node": "greeting",
        "nodes": {
            "greeting": {
                "content": "Good morning! Please, have a seat. Thank you for coming in today.",
                "responses": [
                    {"id": "confident-greeting", "content": "Good morning! Thank you for having me. I'm excited to be here.",
                     "next_node_id": "opening-question", "score_modifier": 10},
                    {"id": "nervous-greeting", "content": "Hi... thanks for, um, meeting with me.",
                     "next_node_id": "opening-question", "score_modifier": -5},
                ],
            },
            "opening-question": {
                "content": "So, tell me about yourself and why you're interested in this position.",
                "conditions": {"emotion": "confidence", "min_intensity": 0.4},
                "responses": [
                    {"id": "strong-answer",
                     "content": "I have 5 years of experience in this field and I'm passionate about the company's mission.",
                     "next_node_id": "follow-up", "score_modifier": 20},
                    {"id": "weak-answer", "content": "Well, I need a job and this seemed like a good opportunity.",
                     "next_node_id": "clarification", "score_modifier": -10},
                ],
            },
            "clarification": {
                "content": "I appreciate the honesty. What specifically about this role caught your attention?",
                "responses": [
                    {"id": "recovered-answer",
                     "content": "The chance to work on products people use every day. That's what I enjoy most.",
                     "next_node_id": "follow-up", "score_modifier": 10},
                ],
            },
            "follow-up": {
                "content": "That's impressive. Can you give me a specific example of a challenge you overcame?",
                "responses": [
                    {"id": "detailed-example",
                     "content": "Certainly. Last year, I led a project that was behind schedule and managed to deliver it on time by reorganizing the team structure.",
                     "score_modifier": 25},
                    {"id": "vague-example", "content": "I've faced many challenges and always found ways to solve them.",
                     "next_node_id": "pressure-question", "score_modifier": 5},
                ],
            },
            "pressure-question": {
                "content": "Could you be more concrete? Walk me through one situation step by step.",
                "responses": [
                    {"id": "star-answer",
                     "content": "Sure. Our release was slipping, so I split the backlog, paired people up, and we shipped a week later than planned instead of a month.",
                     "score_modifier": 15},
                ],
            },
        },
        "success_conditions": {
            "min_score": 60,
            "required_emotions": ["confidence", "professionalism"],
            "max_duration": 600000,
        },
        "display": {
            "difficulty": "Intermediate",
            "mode": "professional",
            "background": "office",
            "icon": "briefcase",
            "gradient": ["#0EA5E9", "#6366F1"],
            "primary_objective": "Answer every question with a concrete example",
        },
    },
    {
        "id": "first-date",
        "title": "First Date Conversation",
        "description": "Navigate the excitement and nerves of a first date",
        "opening_node": "arrival",
        "nodes": {
            "arrival": {
                "content": "Hi! You look great. I'm so glad we could meet up tonight.",
                "responses": [
                    {"id": "confident-response",
                     "content": "Thank you! You look wonderful too. I've been looking forward to this all week.",
                     "next_node_id": "restaurant-choice", "score_modifier": 15},
                    {"id": "shy-response", "content": "Thanks... you too. This place looks nice.",
                     "next_node_id": "restaurant-choice", "score_modifier": 5},
                ],
            },
            "restaurant-choice": {
                "content": "I hope this restaurant is okay. I read great reviews about their pasta.",
                "conditions": {"emotion": "nervousness", "min_intensity": 0.2},
                "responses": [
                    {"id": "enthusiastic-food", "content": "Perfect choice! I love Italian food. Have you been here before?",
                     "next_node_id": "personal-sharing", "score_modifier": 10},
                    {"id": "polite-food", "content": "It looks lovely. I'm not too picky about food.",
                     "next_node_id": "conversation-starter", "score_modifier": 5},
                ],
            },
            "conversation-starter": {
                "content": "Easy to please, I like that. So what do you get up to when you're not on dates with strangers?",
                "responses": [
                    {"id": "hobby-share", "content": "I climb on weekends. Badly, but enthusiastically.",
                     "next_node_id": "deeper-connection", "score_modifier": 12},
                ],
            },
            "personal-sharing": {
                "content": "Actually, this is my first time here too. I wanted to try somewhere new with you.",
                "responses": [
                    {"id": "sweet-response", "content": "That's really sweet! I love that we're discovering it together.",
                     "next_node_id": "deeper-connection", "score_modifier": 20},
                    {"id": "casual-response", "content": "Cool, well I'm sure it'll be good.",
                     "next_node_id": "menu-discussion", "score_modifier": 8},
                ],
            },
            "menu-discussion": {
                "content": "Want to share a couple of starters? I can never decide on just one.",
                "responses": [
                    {"id": "share-yes", "content": "Deal. You pick one, I pick one, no vetoes.",
                     "next_node_id": "deeper-connection", "score_modifier": 10},
                ],
            },
            "deeper-connection": {
                "content": "I have to say, I was nervous about tonight, but this is really easy. I'm having a great time.",
                "responses": [
                    {"id": "mutual-feeling", "content": "Me too. We should do this again soon.", "score_modifier": 20},
                ],
            },
        },
        "success_conditions": {
            "min_score": 55,
            "required_emotions": ["attraction", "comfort", "interest"],
            "max_duration": 900000,
        },
        "display": {
            "difficulty": "Intermediate",
            "mode": "romantic",
            "background": "date",
            "icon": "heart",
            "gradient": ["#F472B6", "#FB7185"],
            "primary_objective": "Keep the conversation flowing through dinner",
        },
    },
    {
        "id": "conflict-resolution",
        "title": "Conflict Resolution",
        "description": "Handle a disagreement with a friend diplomatically",
        "opening_node": "confrontation",
        "nodes": {
            "confrontation": {
                "content": "I need to talk to you about what happened at the party last weekend. I felt really hurt by what you said.",
                "responses": [
                    {"id": "defensive-response", "content": "I don't know what you're talking about. You're being too sensitive.",
                     "next_node_id": "escalation", "score_modifier": -15},
                    {"id": "empathetic-response",
                     "content": "I'm sorry you felt hurt. Can you help me understand what I said that upset you?",
                     "next_node_id": "explanation", "score_modifier": 15},
                ],
            },
            "escalation": {
                "content": "See, this is exactly what I mean. You never take me seriously.",
                "responses": [
                    {"id": "de-escalate", "content": "You're right, I brushed that off. Tell me what happened from your side.",
                     "next_node_id": "explanation", "score_modifier": 10},
                    {"id": "walk-away", "content": "I'm not doing this right now.", "score_modifier": -10},
                ],
            },
            "explanation": {
                "content": "When you made that joke about my career choice in front of everyone, it felt like you were dismissing something really important to me.",
                "conditions": {"emotion": "empathy", "min_intensity": 0.4},
                "responses": [
                    {"id": "genuine-apology",
                     "content": "I'm really sorry. I didn't realize how that came across. Your career is important and I shouldn't have joked about it.",
                     "next_node_id": "resolution", "score_modifier": 25},
                    {"id": "partial-apology", "content": "I'm sorry if it came across wrong. I was just trying to be funny.",
                     "next_node_id": "clarification-needed", "score_modifier": 10},
                ],
            },
            "clarification-needed": {
                "content": "I know you didn't mean it badly, but 'sorry if' doesn't really feel like an apology.",
                "responses": [
                    {"id": "full-apology", "content": "Fair. I'm sorry, full stop. It was a cheap joke at your expense.",
                     "next_node_id": "resolution", "score_modifier": 15},
                ],
            },
            "resolution": {
                "content": "Thank you for understanding. I really value our friendship and I'm glad we could talk about this.",
                "responses": [
                    {"id": "friendship-affirmation",
                     "content": "I value our friendship too. I'll be more mindful of my words in the future.",
                     "score_modifier": 20},
                ],
            },
        },
        "success_conditions": {
            "min_score": 50,
            "required_emotions": ["empathy", "understanding", "resolution"],
            "max_duration": 480000,
        },
        "display": {
            "difficulty": "Advanced",
            "mode": "social",
            "background": "home",
            "icon": "handshake",
            "gradient": ["#10B981", "#14B8A6"],
            "primary_objective": "Acknowledge the hurt and agree on a way forward",
        },
    },
]


def builtin_scenarios() -> List[ScenarioScript]:
    """Parse the built-in scenario data."""
    return [scenario_from_dict(data) for data in BUILTIN_SCENARIOS]


def default_catalog() -> ScenarioCatalog:
    """A catalog pre-loaded with every built-in scenario."""
    return ScenarioCatalog(builtin_scenarios())
