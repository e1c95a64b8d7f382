import unittest
from unittest.mock import Mock

from errors import (
    AuthError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    ToolError,
    UnclassifiedError,
    ValidationError,
    error_from_response,
    error_from_status,
    to_tool_error,
)


class TestErrorClassification(unittest.TestCase):
    def test_error_from_status(self):
        self.assertIsInstance(error_from_status(401), AuthError)
        self.assertIsInstance(error_from_status(403), AuthError)
        self.assertIsInstance(error_from_status(404), NotFoundError)
        self.assertIsInstance(error_from_status(429), RateLimitError)
        self.assertIsInstance(error_from_status(500), ServerError)
        self.assertIsInstance(error_from_status(504), ServerError)
        self.assertIsInstance(error_from_status(418), UnclassifiedError)

    def test_codes_and_hints(self):
        err = error_from_status(403)
        self.assertEqual(err.code, 'HTTP_403')
        self.assertIn('read_api', err.remediation)
        self.assertIsNotNone(error_from_status(404).remediation)
        self.assertIsNotNone(error_from_status(429).remediation)
        self.assertIn('unavailable', error_from_status(503).remediation)
        self.assertIsNone(error_from_status(418).remediation)

    def test_error_from_response_uses_message_field(self):
        resp = Mock(status_code=404, reason='Not Found')
        resp.json.return_value = {'message': '404 Project Not Found'}
        err = error_from_response(resp)
        self.assertEqual(err.message, 'GitLab API error: 404 Project Not Found')

    def test_error_from_response_non_json_body(self):
        resp = Mock(status_code=502, reason='Bad Gateway')
        resp.json.side_effect = ValueError('not json')
        err = error_from_response(resp)
        self.assertIsInstance(err, ServerError)
        self.assertIn('502', err.message)


class TestToolErrorMapping(unittest.TestCase):
    def test_remediation_appended(self):
        tool_err = to_tool_error(NotFoundError('GitLab API error: 404 Not found', 'HTTP_404', 404, 'Check ids'))
        self.assertIsInstance(tool_err, ToolError)
        self.assertEqual(tool_err.code, 'HTTP_404')
        self.assertEqual(tool_err.message, 'GitLab API error: 404 Not found\n\nSuggestion: Check ids')
        self.assertEqual(str(tool_err), '[HTTP_404] GitLab API error: 404 Not found\n\nSuggestion: Check ids')

    def test_without_remediation(self):
        tool_err = to_tool_error(ValidationError('Cannot set both onlyResolved and onlyUnresolved'))
        self.assertEqual(tool_err.code, 'VALIDATION_ERROR')
        self.assertNotIn('Suggestion', tool_err.message)

    def test_timeout(self):
        tool_err = to_tool_error(RequestTimeoutError('Request timed out', remediation='Increase REQUEST_TIMEOUT'))
        self.assertEqual(tool_err.code, 'ETIMEDOUT')
        self.assertIn('Increase REQUEST_TIMEOUT', tool_err.message)

    def test_unexpected_exception(self):
        tool_err = to_tool_error(RuntimeError('kaboom'))
        self.assertEqual(tool_err.code, 'UNCLASSIFIED')
        self.assertEqual(tool_err.message, 'An unexpected error occurred: kaboom')


if __name__ == '__main__':
    unittest.main()
