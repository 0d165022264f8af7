"""Tests for the batch import service."""

import io
import json

from werkzeug.datastructures import FileStorage

from lexistack_app.modules.content.services import ContentRepository, ImportService


def upload(name, payload):
    raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode('utf-8')
    return FileStorage(stream=io.BytesIO(raw), filename=name)


class TestImportService:

    def test_batch_continues_past_bad_files(self, app):
        ContentRepository('quiz').save({'id': 'dup', 'questions': []})
        files = [
            upload('good.json', {'id': 'q1', 'title': 'Quiz 1', 'questions': [{'text': 'x'}]}),
            upload('broken.json', b'{"id": '),
            upload('dup.json', {'id': 'dup', 'questions': []}),
            upload('noid.json', {'questions': []}),
            upload('good2.json', {'id': 'q2', 'questions': []}),
        ]
        results = ImportService('quiz').import_files(files)
        by_name = {r.name: r for r in results}

        assert by_name['good.json'].status == 'imported'
        assert by_name['good.json'].message == 'Imported: Quiz 1'
        assert by_name['broken.json'].status == 'error'
        assert by_name['dup.json'].status == 'skipped'
        assert by_name['dup.json'].message == 'Skipped dup.json: ID already exists'
        assert by_name['noid.json'].status == 'error'
        assert 'Missing ID' in by_name['noid.json'].message
        assert by_name['good2.json'].status == 'imported'
        assert ImportService.summarize(results) == {'imported': 2, 'skipped': 1, 'error': 2}

    def test_duplicate_does_not_overwrite(self, app):
        service = ImportService('flashcard')
        service.import_document('a.json', {'id': 'fc', 'title': 'First', 'questions': []})
        result = service.import_document('b.json', {'id': 'fc', 'title': 'Second', 'questions': []})
        assert result.status == 'skipped'
        assert ContentRepository('flashcard').get_by_id('fc')['title'] == 'First'

    def test_defense_documents_need_source(self, app):
        service = ImportService('defense')
        bad = service.import_document('d.json', {'id': 'def-1', 'type': 'quiz'})
        good = service.import_document('e.json', {'id': 'def-2', 'type': 'quiz', 'sourceId': 'q1'})
        assert bad.status == 'error'
        assert good.status == 'imported'

    def test_utf8_bom_is_accepted(self, app):
        raw = '\ufeff'.encode('utf-8') + json.dumps({'id': 'v', 'questions': []}).encode('utf-8')
        results = ImportService('speak').import_files([upload('bom.json', raw)])
        assert results[0].status == 'imported'
        assert results[0].to_dict()['id'] == 'v'
