# File: lexistack_app/modules/learning/config.py
# Learning Module Configuration: delays, batch sizes and game tuning.


class LearningModuleConfig:
    """Default settings for the learning session engine and its variants."""

    # Seconds before an automatic transition fires
    QUIZ_CORRECT_DELAY = 0.5
    LISTENING_CORRECT_DELAY = 0.5
    DEFINITION_CORRECT_DELAY = 0.8
    TYPING_CORRECT_DELAY = 0.8
    MISSING_LETTER_CORRECT_DELAY = 0.8
    MATCHING_CORRECT_DELAY = 0.3
    MATCHING_WRONG_DELAY = 1.0
    DEFENSE_WRONG_DELAY = 1.0

    # Matching board: pairs per section (a section shows 2x this many cards)
    MATCHING_SECTION_SIZE = 5

    # Spelling bee: plays per queue entry, the automatic first play included
    SPELLING_LISTEN_LIMIT = 4

    # Missing letter: (max alphabetic length, letters hidden); longer words hide 3
    MISSING_LETTER_RULES = ((4, 1), (7, 2))
    MISSING_LETTER_MAX_HIDDEN = 3

    # Which activities each content category can run
    CATEGORY_VARIANTS = {
        'quiz': ('quiz',),
        'flashcard': ('typing', 'translate', 'missing_letter', 'spelling', 'matching', 'browse'),
        'speak': ('listening', 'definition'),
        'phonetic': ('phonetic',),
        'repair': ('repair',),
        'defense': ('defense',),
    }


class DefenseGameConfig:
    """Tower-defense tuning (the playing field itself is rendered client-side)."""

    TOWER_HP_MAX = 5

    # Probability of spawning skin 1/2/3 per difficulty tier
    DIFFICULTIES = {
        'Noob': (0.8, 0.2, 0.0),
        'Beginner': (0.6, 0.4, 0.0),
        'Master': (0.5, 0.4, 0.1),
        'Hell': (0.2, 0.6, 0.2),
        'Legend': (0.0, 0.5, 0.5),
    }
    DEFAULT_DIFFICULTY = 'Noob'

    SKIN_PROPS = {
        1: {'hp': 1, 'size': 180, 'speed_mod': 1.0},
        2: {'hp': 2, 'size': 240, 'speed_mod': 0.8},
        3: {'hp': 3, 'size': 300, 'speed_mod': 0.6},
    }

    DEFAULT_ENEMY_COUNT = 20
    DEFAULT_SPAWN_RATE = 2000  # ms
