"""Tests for the tower-defense game state driven by the quiz engine."""

import random
from collections import Counter

import pytest

from lexistack_app.core.error_handlers import EmptyContentError, ValidationError
from lexistack_app.modules.learning.services.defense_game import DefenseGame


def level(enemy_count=5, questions=None):
    if questions is None:
        questions = [
            {'text': 'dog', 'options': ['con chó', 'con mèo', 'con gà'], 'correctAnswer': 'con chó'},
            {'text': 'cat', 'options': ['con chó', 'con mèo', 'con gà'], 'correctAnswer': 'con mèo'},
        ]
    return {'id': 'def-1', 'title': 'Farm', 'type': 'quiz', 'sourceId': 'q1',
            'questions': questions, 'enemyCount': enemy_count, 'spawnRate': 1500, 'difficulty': 'Noob'}


def correct_option(game):
    return game.engine.variant.meaning_of(game.engine.current_item)


@pytest.fixture
def game(clock):
    return DefenseGame(level(), rng=random.Random(3), clock=clock)


class TestSetup:

    def test_unknown_difficulty(self):
        with pytest.raises(ValidationError):
            DefenseGame(level(), difficulty='Impossible')

    def test_empty_source(self):
        with pytest.raises(EmptyContentError):
            DefenseGame(level(questions=[]))

    def test_flashcard_source_gets_generated_options(self, clock):
        cards = [{'question': w, 'answer': m} for w, m in
                 (('dog', 'con chó'), ('cat', 'con mèo'), ('hen', 'con gà'), ('duck', 'con vịt'))]
        game = DefenseGame(level(questions=cards), rng=random.Random(0), clock=clock)
        question = game.snapshot()['question']
        assert len(question['choices']) == 3
        assert correct_option(game) in question['choices']

    def test_initial_snapshot(self, game):
        snapshot = game.snapshot()
        assert snapshot['status'] == 'playing'
        assert snapshot['tower_hp'] == 5
        assert snapshot['difficulty'] == 'Noob'
        assert snapshot['enemies'] == []
        assert snapshot['question']['prompt'] in ('dog', 'cat')


class TestEnemies:

    def test_spawn_stops_at_enemy_count(self, game):
        spawned = [game.spawn() for _ in range(7)]
        assert all(enemy is not None for enemy in spawned[:5])
        assert spawned[5:] == [None, None]
        assert game.spawned == 5

    def test_skins_follow_difficulty_weights(self):
        noob = DefenseGame(level(), difficulty='Noob', rng=random.Random(1))
        legend = DefenseGame(level(), difficulty='Legend', rng=random.Random(1))
        noob_skins = Counter(noob.pick_skin() for _ in range(500))
        legend_skins = Counter(legend.pick_skin() for _ in range(500))
        assert 3 not in noob_skins
        assert 1 not in legend_skins
        assert noob_skins[1] > noob_skins[2]

    def test_breaches_lose_the_game(self, game):
        enemies = [game.spawn() for _ in range(5)]
        for enemy in enemies[:4]:
            assert game.breach(enemy['id']) is True
        assert game.tower_hp == 1
        assert game.state == 'playing'
        game.breach(enemies[4]['id'])
        assert game.tower_hp == 0
        assert game.state == 'lost'
        assert game.answer(correct_option(game)) == {'status': 'ignored', 'reason': 'lost'}
        assert game.spawn() is None

    def test_unknown_breach_is_ignored(self, game):
        assert game.breach(999) is False
        assert game.tower_hp == 5


class TestAnswers:

    def test_correct_answer_hits_nearest_enemy(self, game):
        first = game.spawn()
        second = game.spawn()
        game.report_positions({first['id']: 300.0, str(second['id']): 120.0})
        outcome = game.answer(correct_option(game))
        assert outcome['status'] == 'correct'
        assert outcome['hit'] == second['id']

    def test_wrong_answer_does_not_hit(self, game):
        game.spawn()
        options = game.snapshot()['question']['choices']
        wrong = next(option for option in options if option != correct_option(game))
        outcome = game.answer(wrong)
        assert outcome['status'] == 'incorrect'
        assert 'hit' not in outcome
        assert game.enemies[0]['hp'] == game.enemies[0]['max_hp']

    def test_win_when_all_enemies_killed(self, clock):
        game = DefenseGame(level(enemy_count=5), rng=random.Random(8), clock=clock)
        for _ in range(5):
            game.spawn()
        for _ in range(40):
            if game.state != 'playing':
                break
            game.answer(correct_option(game))
        assert game.state == 'won'
        assert game.kills == 5
        assert game.snapshot()['question'] is None

    def test_question_supply_is_reshuffled(self, game):
        game.spawn()
        for _ in range(6):
            outcome = game.answer(correct_option(game))
            assert outcome['status'] == 'correct'
        assert game.engine.status == 'active'
