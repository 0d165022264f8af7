"""Flashcard view mode: flip through a shuffled deck, nothing is scored."""

import random
from typing import Any, Dict, List, Optional

from lexistack_app.core.error_handlers import EmptyContentError

from ..engine.preparer import collect_questions
from ..engine.shuffle import shuffled


class FlashcardDeck:

    key = 'browse'

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self.cards: List[Dict[str, Any]] = []
        self.index = 0
        self.closed = False

    def start(self, content: Any) -> 'FlashcardDeck':
        cards = [card for card in collect_questions(content) if card.get('question') or card.get('speak')]
        if not cards:
            raise EmptyContentError('No questions found.', resource=self.key)
        self.cards = shuffled(cards, self._rng)
        self.index = 0
        return self

    restart = start

    @property
    def current(self) -> Optional[Dict[str, Any]]:
        return self.cards[self.index] if self.cards else None

    def next(self) -> bool:
        if self.index < len(self.cards) - 1:
            self.index += 1
            return True
        return False

    def prev(self) -> bool:
        if self.index > 0:
            self.index -= 1
            return True
        return False

    def speak_text(self) -> Optional[str]:
        card = self.current
        if card is None:
            return None
        return str(card.get('speak') or card.get('question') or '').strip() or None

    def close(self) -> None:
        self.closed = True

    def snapshot(self) -> Dict[str, Any]:
        card = self.current or {}
        return {
            'variant': self.key,
            'status': 'closed' if self.closed else 'active',
            'position': self.index,
            'total': len(self.cards),
            'has_prev': self.index > 0,
            'has_next': self.index < len(self.cards) - 1,
            'card': {
                'question': card.get('question'),
                'answer': card.get('answer'),
                'speak': card.get('speak'),
                'phonetic': card.get('phonetic'),
                'example': card.get('example'),
            },
        }
