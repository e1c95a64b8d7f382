import unittest

from normalize.models import CommentSource
from normalize.util import extract_file_path, normalize_author, normalize_comments
from helpers import make_discussion, make_note, make_user


class TestNormalize(unittest.TestCase):
    def test_normalize_author_minimal(self):
        author = normalize_author({'id': 7, 'username': 'bob', 'name': 'Bob', 'avatar_url': 'x'})
        self.assertEqual(author.id, 7)
        self.assertEqual(author.username, 'bob')
        self.assertEqual(author.name, 'Bob')
        self.assertIsNone(normalize_author(None))

    def test_file_path_prefers_new_path(self):
        self.assertEqual(extract_file_path({'old_path': 'old/path.ts', 'new_path': 'new/path.ts'}), 'new/path.ts')
        self.assertEqual(extract_file_path({'old_path': 'old/path.ts'}), 'old/path.ts')
        self.assertIsNone(extract_file_path({}))
        self.assertIsNone(extract_file_path(None))

    def test_discussion_note_mapping(self):
        position = {'old_path': 'old/path.ts', 'new_path': 'new/path.ts', 'old_line': None, 'new_line': 12}
        note = make_note(10, resolvable=True, resolved=True, resolved_by=make_user(2, 'rev', 'Reviewer'), position=position)
        [c] = normalize_comments([make_discussion('abc123', [note])], [])
        self.assertEqual(c.source, CommentSource.DISCUSSION)
        self.assertEqual(c.thread_id, 'abc123')
        self.assertEqual(c.note_id, 10)
        self.assertEqual(c.file_path, 'new/path.ts')
        self.assertTrue(c.resolvable)
        self.assertTrue(c.resolved)
        self.assertEqual(c.resolved_by.username, 'rev')
        self.assertEqual(c.position['new_line'], 12)
        self.assertEqual(c.body, 'note 10')

    def test_unresolved_note_has_no_resolver(self):
        note = make_note(1, resolvable=True, resolved=False, resolved_by=make_user(2, 'rev', 'Reviewer'))
        [c] = normalize_comments([make_discussion('t', [note])], [])
        self.assertFalse(c.resolved)
        self.assertIsNone(c.resolved_by)

    def test_standalone_note_never_carries_thread_semantics(self):
        raw = make_note(
            5,
            resolvable=True,
            resolved=True,
            resolved_by=make_user(),
            position={'new_path': 'a.py'},
        )
        [c] = normalize_comments([], [raw])
        self.assertEqual(c.source, CommentSource.NOTE)
        self.assertIsNone(c.thread_id)
        self.assertFalse(c.resolvable)
        self.assertIsNone(c.resolved)
        self.assertIsNone(c.resolved_by)
        self.assertIsNone(c.file_path)
        self.assertIsNone(c.position)

    def test_missing_author_and_defaults(self):
        raw = {'id': 3, 'body': 'ghost', 'created_at': '2024-01-01T00:00:00Z', 'author': None}
        [c] = normalize_comments([make_discussion('t', [raw])], [])
        self.assertIsNone(c.author)
        self.assertIsNone(c.updated_at)
        self.assertFalse(c.system)
        self.assertFalse(c.resolvable)
        self.assertIsNone(c.resolved)

    def test_completeness_and_order(self):
        discussions = [
            make_discussion('t1', [make_note(1, '2024-01-03T00:00:00Z'), make_note(2, '2024-01-01T00:00:00Z')]),
            make_discussion('t2', [make_note(3)]),
            make_discussion('t3', []),
        ]
        notes = [make_note(4), make_note(5, system=True)]
        comments = normalize_comments(discussions, notes)
        expected = sum(len(d['notes']) for d in discussions) + len(notes)
        self.assertEqual(len(comments), expected)
        # thread order then note order; no time sorting at this stage
        self.assertEqual([c.note_id for c in comments], [1, 2, 3, 4, 5])
        self.assertEqual([c.thread_id for c in comments], ['t1', 't1', 't2', None, None])

    def test_null_body_becomes_empty_string(self):
        note = make_note(1)
        note['body'] = None
        discussion_note = make_note(2)
        discussion_note['body'] = None
        comments = normalize_comments([make_discussion('t', [discussion_note])], [note])
        self.assertEqual([c.body for c in comments], ['', ''])

    def test_to_dict_serializes_source(self):
        [c] = normalize_comments([], [make_note(1)])
        data = c.to_dict()
        self.assertEqual(data['source'], 'note')
        self.assertEqual(data['author'], {'id': 1, 'username': 'alice', 'name': 'Alice'})


if __name__ == '__main__':
    unittest.main()
