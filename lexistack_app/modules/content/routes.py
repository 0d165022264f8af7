# File: lexistack_app/modules/content/routes.py
# Public, read-only navigation over the content sets.

from flask import jsonify, request, url_for

from lexistack_app.core.error_handlers import NotFoundError, success_response

from . import content_bp
from .services.repository import ContentRepository


def _summary(document):
    """List rows carry everything but the questions themselves."""
    data = {key: value for key, value in document.items() if key != 'questions'}
    data['count'] = len(document.get('questions') or [])
    return data


@content_bp.route('/api/tags', methods=['GET'])
def list_tags():
    return jsonify(success_response(ContentRepository.all_tags()))


@content_bp.route('/api/<category>', methods=['GET'])
def list_sets(category):
    repository = ContentRepository(category)
    tag = (request.args.get('tag') or '').strip()
    documents = repository.get_by_tag(tag) if tag else repository.get_all()
    return jsonify(success_response([_summary(d) for d in documents]))


@content_bp.route('/api/<category>/<set_id>', methods=['GET'])
def get_set(category, set_id):
    repository = ContentRepository(category)
    document = repository.get_by_id(set_id)
    if document is None:
        raise NotFoundError(
            f"{category.capitalize()} set not found",
            resource=set_id,
            back=url_for('content.list_sets', category=category),
        )
    return jsonify(success_response(document))
