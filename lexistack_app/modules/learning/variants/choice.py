"""
Selection-based variants: quiz, definition, listening, phonetic and the
defense mini-game. The learner picks one of the entry's shuffled options.
"""

from typing import Any, Dict, List, Optional

from ..config import LearningModuleConfig
from ..engine.schemas import AUTO_DELAY, MANUAL, AdvancePolicy
from ..engine.shuffle import shuffled
from .base import SessionVariant


def correct_answer_of(item: Dict[str, Any]) -> Optional[str]:
    """Quiz-like items name the right option ``correctAnswer``; older sets use ``answer``."""
    value = item.get('correctAnswer')
    if value is None:
        value = item.get('answer')
    return value


def _option_list(item: Dict[str, Any]) -> List[Any]:
    options = item.get('options')
    return list(options) if isinstance(options, (list, tuple)) else []


class QuizVariant(SessionVariant):
    key = 'quiz'
    label = 'Quiz'
    uses_options = True
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=MANUAL,
        correct_delay=LearningModuleConfig.QUIZ_CORRECT_DELAY,
    )

    def prompt(self, item):
        return str(item.get('text') or item.get('question') or '').strip()

    def is_usable(self, item):
        options = _option_list(item)
        return bool(options) and correct_answer_of(item) in options

    def prepare_entry(self, item, entry, rng):
        entry.options = shuffled(_option_list(item), rng)

    def judge(self, item, entry, candidate):
        if not isinstance(candidate, str):
            return False
        return candidate == correct_answer_of(item)

    def expected(self, item, entry):
        return correct_answer_of(item)


class DefinitionVariant(QuizVariant):
    """Pick the word matching a definition (speak sets)."""
    key = 'definition'
    label = 'Definition'
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=MANUAL,
        correct_delay=LearningModuleConfig.DEFINITION_CORRECT_DELAY,
    )

    def prompt(self, item):
        return str(item.get('question') or item.get('text') or '').strip()


class ListeningVariant(SessionVariant):
    """
    Listen and pick: the prompt is audio only.

    Every entry, retries included, draws its own speak target among the
    shuffled options, so a retry usually asks for a different word.
    """
    key = 'listening'
    label = 'Listening'
    uses_options = True
    autoplay = True
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=MANUAL,
        correct_delay=LearningModuleConfig.LISTENING_CORRECT_DELAY,
    )

    def is_usable(self, item):
        return any(str(option).strip() for option in _option_list(item))

    def prepare_entry(self, item, entry, rng):
        entry.options = shuffled(_option_list(item), rng)
        entry.extras['speak_target'] = entry.options[rng.randrange(len(entry.options))]

    def judge(self, item, entry, candidate):
        if candidate is None:
            return False
        return str(candidate).strip() == str(entry.extras.get('speak_target')).strip()

    def expected(self, item, entry):
        return entry.extras.get('speak_target')

    def display(self, item, entry):
        # the target word is never shown; the front end asks for playback
        return {'prompt': '', 'choices': list(entry.options or []), 'audio': True}

    def request_playback(self, item, entry):
        return str(entry.extras.get('speak_target') or '').strip() or None


class PhoneticVariant(SessionVariant):
    """Find the word whose highlighted letters make the target sound."""
    key = 'phonetic'
    label = 'Phonetic'
    uses_options = True
    advance_policy = AdvancePolicy(on_correct=MANUAL, on_incorrect=MANUAL)

    @staticmethod
    def _word(option: Any) -> Optional[str]:
        if isinstance(option, dict):
            return option.get('word')
        return option if isinstance(option, str) else None

    def prompt(self, item):
        return str(item.get('instruction') or item.get('question') or '').strip()

    def is_usable(self, item):
        words = [self._word(option) for option in _option_list(item)]
        return bool(words) and item.get('correctAnswer') in words

    def prepare_entry(self, item, entry, rng):
        entry.options = shuffled(_option_list(item), rng)

    def judge(self, item, entry, candidate):
        word = self._word(candidate)
        return word is not None and word == item.get('correctAnswer')

    def expected(self, item, entry):
        return item.get('correctAnswer')

    def display(self, item, entry):
        choices = []
        for option in entry.options or []:
            if isinstance(option, dict):
                choices.append({
                    'word': option.get('word'),
                    'highlightIndexes': list(option.get('highlightIndexes') or []),
                })
            else:
                choices.append({'word': option, 'highlightIndexes': []})
        return {
            'prompt': self.prompt(item),
            'instruction': item.get('instruction', ''),
            'highlight': item.get('highlight', ''),
            'choices': choices,
        }


class DefenseVariant(QuizVariant):
    """
    Quiz judging for the tower-defense game.

    The game keeps its own kill count, so a wrong pick is never re-queued: the
    reveal clears after a short delay and the same question stays up.

    Flashcard sources carry no options; their entries get the card's meaning
    plus ``distractors`` meanings drawn from the rest of the pool.
    """
    key = 'defense'
    label = 'Defense'
    requeue_on_failure = False
    distractors = 2
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=AUTO_DELAY,
        correct_delay=0,
        incorrect_delay=LearningModuleConfig.DEFENSE_WRONG_DELAY,
    )

    def __init__(self, pool: Optional[List[Dict[str, Any]]] = None):
        self.pool = pool or []

    @staticmethod
    def meaning_of(item: Dict[str, Any]) -> Optional[str]:
        return correct_answer_of(item) or item.get('meaning')

    def prompt(self, item):
        return str(item.get('text') or item.get('question') or item.get('word') or '').strip()

    def is_usable(self, item):
        if _option_list(item):
            return super().is_usable(item)
        return bool(self.meaning_of(item)) and bool(self.prompt(item))

    def prepare_entry(self, item, entry, rng):
        options = _option_list(item)
        if not options:
            correct = self.meaning_of(item)
            others = []
            for other in self.pool:
                meaning = self.meaning_of(other)
                if meaning and meaning != correct and meaning not in others:
                    others.append(meaning)
            picked = shuffled(others, rng)[:self.distractors]
            options = [correct] + picked
        entry.options = shuffled(options, rng)

    def judge(self, item, entry, candidate):
        if not isinstance(candidate, str):
            return False
        return candidate == self.meaning_of(item)

    def expected(self, item, entry):
        return self.meaning_of(item)
