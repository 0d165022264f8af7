# File: lexistack_app/modules/admin/routes.py
# Content management API behind the admin passcode.

import logging
import time

from flask import jsonify, request
from flask_login import login_required

from lexistack_app.core.error_handlers import (
    DuplicateContentError,
    NotFoundError,
    ValidationError,
    success_response,
)
from lexistack_app.modules.content.forms import DefenseConfigForm, ImportForm
from lexistack_app.modules.content.logics.validators import validate_document
from lexistack_app.modules.content.services import ContentRepository, ImportService

from . import admin_bp

logger = logging.getLogger(__name__)

# Tag filter values with special meaning in the manager lists
TAG_ALL = 'all'
TAG_NONE = 'none'


@admin_bp.route('/api/<category>', methods=['GET'])
@login_required
def list_content(category):
    """
    ?tag=all (default) lists everything, ?tag=none lists untagged sets,
    any other value filters by that tag.
    """
    repository = ContentRepository(category)
    tag = (request.args.get('tag') or TAG_ALL).strip()
    if tag == TAG_ALL:
        documents = repository.get_all()
    elif tag == TAG_NONE:
        documents = repository.get_untagged()
    else:
        documents = repository.get_by_tag(tag)
    rows = [
        {
            'id': d['id'],
            'title': d.get('title'),
            'type': d.get('type'),
            'tags': d.get('tags') or [],
            'count': len(d.get('questions') or []),
            **({'sourceId': d.get('sourceId'), 'enemyCount': d.get('enemyCount'),
                'spawnRate': d.get('spawnRate')} if category == 'defense' else {}),
        }
        for d in documents
    ]
    return jsonify(success_response(rows))


@admin_bp.route('/api/<category>/import', methods=['POST'])
@login_required
def import_content(category):
    """Multipart batch of JSON files, or a JSON body holding one document or a list."""
    service = ImportService(category)
    if request.is_json:
        payload = request.get_json(silent=True)
        if payload is None:
            raise ValidationError('Invalid JSON body')
        documents = payload if isinstance(payload, list) else [payload]
        named = [(f"document-{index + 1}", document) for index, document in enumerate(documents)]
        results = service.import_documents(named)
    else:
        form = ImportForm()
        if not form.validate_on_submit():
            raise ValidationError('Invalid upload', errors=form.errors)
        files = [f for f in (form.files.data or []) if getattr(f, 'filename', None)]
        if not files:
            raise ValidationError('No files uploaded')
        results = service.import_files(files)

    summary = ImportService.summarize(results)
    logger.info("Import %s: %s", category, summary)
    return jsonify(success_response({
        'results': [r.to_dict() for r in results],
        'summary': summary,
    }))


@admin_bp.route('/api/<category>/<set_id>', methods=['DELETE'])
@login_required
def delete_content(category, set_id):
    if not ContentRepository(category).delete(set_id):
        raise NotFoundError('Failed to delete', resource=set_id)
    return jsonify(success_response(message='Item deleted'))


@admin_bp.route('/api/<category>/bulk-delete', methods=['POST'])
@login_required
def bulk_delete_content(category):
    payload = request.get_json(silent=True) or {}
    ids = payload.get('ids')
    if not isinstance(ids, list) or not ids:
        raise ValidationError("Field 'ids' must be a non-empty list")
    repository = ContentRepository(category)
    deleted = [set_id for set_id in ids if repository.delete(set_id)]
    missing = [set_id for set_id in ids if set_id not in deleted]
    message = f"Deleted {len(deleted)} items"
    if missing:
        message = 'Failed to delete some items'
    return jsonify(success_response({'deleted': deleted, 'missing': missing}, message))


@admin_bp.route('/api/defense', methods=['POST'])
@login_required
def create_defense():
    form = DefenseConfigForm()
    if not form.validate_on_submit():
        raise ValidationError('Invalid defense config', errors=form.errors)
    set_id = f"def-{int(time.time() * 1000)}"
    outcome = ContentRepository('defense').save(form.to_document(set_id))
    if not outcome['success']:
        raise DuplicateContentError(outcome['message'], resource=set_id)
    return jsonify(success_response({'id': set_id}, 'Defense Level Created Successfully!')), 201


@admin_bp.route('/api/defense/<set_id>', methods=['PUT'])
@login_required
def update_defense(set_id):
    repository = ContentRepository('defense')
    if repository.get_by_id(set_id) is None:
        raise NotFoundError('Defense level not found', resource=set_id)
    form = DefenseConfigForm()
    if not form.validate_on_submit():
        raise ValidationError('Invalid defense config', errors=form.errors)
    repository.update(set_id, form.to_document(set_id))
    return jsonify(success_response({'id': set_id}, 'Defense Level Updated Successfully!'))


@admin_bp.route('/api/phonetic/<set_id>', methods=['PUT'])
@login_required
def update_phonetic(set_id):
    """Raw JSON edit of a phonetic set; the id of an existing set cannot change."""
    repository = ContentRepository('phonetic')
    if repository.get_by_id(set_id) is None:
        raise NotFoundError('Phonetic set not found', resource=set_id)
    document = request.get_json(silent=True)
    if not isinstance(document, dict):
        raise ValidationError('Invalid JSON format')
    if str(document.get('id') or '') != set_id:
        raise ValidationError(
            'You cannot change the ID of an existing item. Please create a new one instead.',
            errors={'id': document.get('id')},
        )
    validate_document('phonetic', document)
    repository.update(set_id, document)
    return jsonify(success_response({'id': set_id}, 'Item updated successfully'))
