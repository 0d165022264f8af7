# File: lexistack_app/modules/learning/routes.py
# Learner-facing JSON API: one live session per activity, owned by the browser.

from flask import jsonify, request

from lexistack_app.core.error_handlers import ValidationError, success_response

from . import learning_bp
from .services.session_service import LearningSessionService


def _payload():
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


# ----------------------------------------------------------------------
# Retry-queue sessions (quiz, typing, translate, listening, ...)
# ----------------------------------------------------------------------
@learning_bp.route('/api/sessions', methods=['POST'])
def start_session():
    data = LearningSessionService.start_session(_payload())
    return jsonify(success_response(data)), 201


@learning_bp.route('/api/sessions/<session_id>', methods=['GET'])
def session_state(session_id):
    return jsonify(success_response(LearningSessionService.get_state(session_id)))


@learning_bp.route('/api/sessions/<session_id>/answer', methods=['POST'])
def submit_answer(session_id):
    payload = _payload()
    if 'answer' not in payload:
        raise ValidationError("Field 'answer' is required")
    return jsonify(success_response(LearningSessionService.submit_answer(session_id, payload['answer'])))


@learning_bp.route('/api/sessions/<session_id>/acknowledge', methods=['POST'])
def acknowledge(session_id):
    return jsonify(success_response(LearningSessionService.acknowledge(session_id)))


@learning_bp.route('/api/sessions/<session_id>/continue', methods=['POST'])
def continue_session(session_id):
    return jsonify(success_response(LearningSessionService.continue_session(session_id)))


@learning_bp.route('/api/sessions/<session_id>/restart', methods=['POST'])
def restart_session(session_id):
    return jsonify(success_response(LearningSessionService.restart(session_id)))


@learning_bp.route('/api/sessions/<session_id>/listen', methods=['POST'])
def listen(session_id):
    return jsonify(success_response(LearningSessionService.listen(session_id)))


@learning_bp.route('/api/sessions/<session_id>/result', methods=['GET'])
def session_result(session_id):
    return jsonify(success_response(LearningSessionService.get_result(session_id)))


@learning_bp.route('/api/sessions/<session_id>', methods=['DELETE'])
def end_session(session_id):
    LearningSessionService.end_session(session_id)
    return jsonify(success_response(message='Session closed'))


# ----------------------------------------------------------------------
# Matching board
# ----------------------------------------------------------------------
@learning_bp.route('/api/matching', methods=['POST'])
def start_matching():
    return jsonify(success_response(LearningSessionService.start_matching(_payload()))), 201


@learning_bp.route('/api/matching/<session_id>', methods=['GET'])
def matching_state(session_id):
    return jsonify(success_response(LearningSessionService.matching_state(session_id)))


@learning_bp.route('/api/matching/<session_id>/pick', methods=['POST'])
def matching_pick(session_id):
    payload = _payload()
    if not payload.get('first') or not payload.get('second'):
        raise ValidationError("Fields 'first' and 'second' are required")
    data = LearningSessionService.matching_pick(session_id, payload['first'], payload['second'])
    return jsonify(success_response(data))


# ----------------------------------------------------------------------
# Tower defense
# ----------------------------------------------------------------------
@learning_bp.route('/api/defense/<defense_id>', methods=['POST'])
def start_defense(defense_id):
    difficulty = _payload().get('difficulty') or request.args.get('difficulty')
    return jsonify(success_response(LearningSessionService.start_defense(defense_id, difficulty))), 201


@learning_bp.route('/api/defense/<session_id>', methods=['GET'])
def defense_state(session_id):
    return jsonify(success_response(LearningSessionService.defense_state(session_id)))


@learning_bp.route('/api/defense/<session_id>/spawn', methods=['POST'])
def defense_spawn(session_id):
    return jsonify(success_response(LearningSessionService.defense_spawn(session_id)))


@learning_bp.route('/api/defense/<session_id>/answer', methods=['POST'])
def defense_answer(session_id):
    payload = _payload()
    if 'answer' not in payload:
        raise ValidationError("Field 'answer' is required")
    distances = payload.get('distances')
    if distances is not None and not isinstance(distances, dict):
        raise ValidationError("Field 'distances' must map enemy ids to distances")
    if distances:
        bad = [key for key, value in distances.items()
               if isinstance(value, bool) or not isinstance(value, (int, float))]
        if bad:
            raise ValidationError("Distances must be numbers", errors={'distances': bad})
    data = LearningSessionService.defense_answer(session_id, payload['answer'], distances)
    return jsonify(success_response(data))


@learning_bp.route('/api/defense/<session_id>/breach', methods=['POST'])
def defense_breach(session_id):
    payload = _payload()
    if payload.get('enemy_id') is None:
        raise ValidationError("Field 'enemy_id' is required")
    return jsonify(success_response(LearningSessionService.defense_breach(session_id, payload['enemy_id'])))


# ----------------------------------------------------------------------
# Flashcard browse
# ----------------------------------------------------------------------
@learning_bp.route('/api/browse', methods=['POST'])
def start_browse():
    return jsonify(success_response(LearningSessionService.start_browse(_payload()))), 201


@learning_bp.route('/api/browse/<session_id>/<direction>', methods=['POST'])
def browse_move(session_id, direction):
    if direction == 'speak':
        return jsonify(success_response(LearningSessionService.browse_speak(session_id)))
    if direction not in ('next', 'prev'):
        raise ValidationError(f"Unknown direction: {direction}")
    return jsonify(success_response(LearningSessionService.browse_move(session_id, direction)))
