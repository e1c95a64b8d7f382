"""
Shared fixtures: GitLab-shaped payloads and mocked HTTP responses.
"""
from unittest.mock import Mock

from config import Config


def make_config(**overrides) -> Config:
    values = dict(gitlab_base_url='https://gitlab.example.com', gitlab_token='glpat-test-token', request_timeout=5.0, max_retries=3)
    values.update(overrides)
    return Config(**values)


def make_user(uid=1, username='alice', name='Alice'):
    return {'id': uid, 'username': username, 'name': name}


_DEFAULT = object()


def make_note(note_id, created_at='2024-01-01T10:00:00.000Z', body=None, author=_DEFAULT, system=False, **extra):
    note = {
        'id': note_id,
        'body': body if body is not None else f'note {note_id}',
        'author': make_user() if author is _DEFAULT else author,
        'created_at': created_at,
        'updated_at': created_at,
        'system': system,
    }
    note.update(extra)
    return note


def make_discussion(thread_id, notes):
    return {'id': thread_id, 'individual_note': False, 'notes': notes}


def mock_response(status=200, body=None, headers=None):
    resp = Mock()
    resp.status_code = status
    resp.reason = 'OK' if status == 200 else 'Error'
    resp.headers = headers or {}
    resp.json.return_value = body if body is not None else []
    return resp
