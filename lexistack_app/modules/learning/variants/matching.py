"""
Matching Game.

Cards are processed in sections of ``MATCHING_SECTION_SIZE`` pairs. Each
section runs its own retry-queue engine over its pairs: a correct pick advances
that engine by one, so the section is done exactly when every pair is matched.
Wrong picks are never re-queued; the selection just clears after a delay.
"""

import logging
import random
from typing import Any, Dict, List, Optional

from lexistack_app.core.error_handlers import EmptyContentError

from ..config import LearningModuleConfig
from ..engine.core import RetryQueueEngine
from ..engine.preparer import collect_questions
from ..engine.schemas import AUTO_DELAY, AdvancePolicy, SessionResult, SubmitOutcome
from ..engine.shuffle import shuffled
from .base import SessionVariant

logger = logging.getLogger(__name__)


def front_of(item: Dict[str, Any]) -> str:
    return str(item.get('speak') or item.get('question') or '').strip()


def back_of(item: Dict[str, Any]) -> str:
    return str(item.get('answer') or '').strip()


class MatchingVariant(SessionVariant):
    key = 'matching'
    label = 'Matching'
    requeue_on_failure = False
    advance_policy = AdvancePolicy(
        on_correct=AUTO_DELAY,
        on_incorrect=AUTO_DELAY,
        correct_delay=LearningModuleConfig.MATCHING_CORRECT_DELAY,
        incorrect_delay=LearningModuleConfig.MATCHING_WRONG_DELAY,
    )

    def is_usable(self, item):
        return bool(front_of(item)) and bool(back_of(item))

    def judge(self, item, entry, candidate):
        """``candidate`` is a pair of card dicts; any unmatched pair may be picked."""
        first, second = candidate
        if first['uid'] == second['uid'] or first['side'] == second['side']:
            return False
        return first['pair_id'] == second['pair_id']

    def expected(self, item, entry):
        return None

    def reveal(self, item, entry):
        return {}

    def display(self, item, entry):
        return {}


class MatchingSection:
    """One board of up to 2 x section-size cards."""

    def __init__(self, items: List[Dict[str, Any]], rng: random.Random,
                 clock=None, number: int = 0):
        self.number = number
        self.engine = RetryQueueEngine(MatchingVariant(), rng=rng, clock=clock)
        self.engine.start({'questions': items})

        deck = []
        for pair_id, item in enumerate(self.engine.items):
            deck.append({'uid': f'q-{pair_id}', 'pair_id': pair_id, 'side': 'question',
                         'content': front_of(item)})
            deck.append({'uid': f'a-{pair_id}', 'pair_id': pair_id, 'side': 'answer',
                         'content': back_of(item)})
        self.cards = shuffled(deck, rng)
        self._by_uid = {card['uid']: card for card in self.cards}
        self.matched: set = set()
        self.selected: List[str] = []

    @property
    def finished(self) -> bool:
        return self.engine.status == 'finished'

    @property
    def pairs(self) -> int:
        return self.engine.total_items

    def pick(self, first_uid: str, second_uid: str) -> SubmitOutcome:
        first = self._by_uid.get(first_uid)
        second = self._by_uid.get(second_uid)
        if first is None or second is None:
            return SubmitOutcome.ignored('unknown_card')
        if first_uid == second_uid:
            return SubmitOutcome.ignored('same_card')
        if first_uid in self.matched or second_uid in self.matched:
            return SubmitOutcome.ignored('already_matched')

        outcome = self.engine.submit_answer((first, second))
        if outcome.status == 'ignored':
            return outcome
        if outcome.is_correct:
            self.matched.update((first_uid, second_uid))
            self.selected = []
        else:
            self.selected = [first_uid, second_uid]
        return outcome

    def to_dict(self) -> Dict[str, Any]:
        # a wrong selection stays highlighted until its delay has run out
        selected = self.selected if self.engine.awaiting == 'delay' else []
        return {
            'number': self.number,
            'cards': [
                {'uid': card['uid'], 'content': card['content'], 'side': card['side'],
                 'matched': card['uid'] in self.matched}
                for card in self.cards
            ],
            'selected': list(selected),
            'matched_pairs': len(self.matched) // 2,
            'pairs': self.pairs,
            'finished': self.finished,
        }

    def close(self) -> None:
        self.engine.close()


class MatchingBoard:
    """Runs the sections one after another over a shuffled item list."""

    key = 'matching'

    def __init__(self, rng: Optional[random.Random] = None, clock=None,
                 section_size: int = LearningModuleConfig.MATCHING_SECTION_SIZE):
        self._rng = rng or random.Random()
        self._clock = clock
        self.section_size = section_size
        self.sections_done: List[SessionResult] = []
        self.chunks: List[List[Dict[str, Any]]] = []
        self.section: Optional[MatchingSection] = None
        self._next_section = 0
        self.closed = False

    def start(self, content: Any) -> 'MatchingBoard':
        variant = MatchingVariant()
        items = [item for item in collect_questions(content) if variant.is_usable(item)]
        if not items:
            raise EmptyContentError('No questions found.', resource='matching')

        items = shuffled(items, self._rng)
        if self.section is not None:
            self.section.close()
        self.sections_done = []
        self.chunks = [items[i:i + self.section_size] for i in range(0, len(items), self.section_size)]
        self._next_section = 0
        self.section = None
        self._load_next()
        logger.debug("Matching board: %d pairs in %d sections", len(items), len(self.chunks))
        return self

    restart = start

    def _load_next(self) -> None:
        if self._next_section >= len(self.chunks):
            return
        chunk = self.chunks[self._next_section]
        self.section = MatchingSection(chunk, self._rng, clock=self._clock, number=self._next_section)
        self._next_section += 1

    def _sync(self) -> None:
        """Load the next section once the current one is fully matched."""
        if self.section is not None and self.section.finished and self._next_section < len(self.chunks):
            self.sections_done.append(self.section.engine.result())
            self._load_next()

    @property
    def total_pairs(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    @property
    def finished(self) -> bool:
        self._sync()
        return (self.section is not None and self.section.finished
                and self._next_section >= len(self.chunks))

    def pick(self, first_uid: str, second_uid: str) -> SubmitOutcome:
        if self.closed:
            return SubmitOutcome.ignored('closed')
        self._sync()
        if self.section is None:
            return SubmitOutcome.ignored('not_started')
        if self.finished:
            return SubmitOutcome.ignored('finished')
        return self.section.pick(first_uid, second_uid)

    def result(self) -> SessionResult:
        finished = self.finished
        done = list(self.sections_done)
        if self.section is not None:
            done.append(self.section.engine.result())
        return SessionResult(
            score=sum(r.score for r in done),
            total_items=self.total_pairs,
            entries_processed=sum(r.entries_processed for r in done),
            retried_items=0,
            finished=finished,
        )

    def snapshot(self) -> Dict[str, Any]:
        finished = self.finished
        data = {
            'variant': self.key,
            'status': 'closed' if self.closed else ('finished' if finished else 'active'),
            'section': self._next_section,
            'sections': len(self.chunks),
            'total': self.total_pairs,
            'board': self.section.to_dict() if self.section else None,
        }
        if finished:
            data['result'] = self.result().to_dict()
        return data

    def close(self) -> None:
        if self.section is not None:
            self.section.close()
        self.closed = True
