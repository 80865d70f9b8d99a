import requests
from requests.adapters import BaseAdapter

from flask_record.exceptions import RequestError, InvalidResponse
from flask_record.transport import Endpoint
from tests import BaseTestCase


class UnreachableAdapter(BaseAdapter):

    def __init__(self):
        super(UnreachableAdapter, self).__init__()
        self.timeouts = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.timeouts.append(timeout)
        raise requests.ConnectionError('Connection refused', request=request)

    def close(self):
        pass


class TransportTestCase(BaseTestCase):

    def setUp(self):
        super(TransportTestCase, self).setUp()
        self.app.add_url_rule('/plain', 'plain', lambda: 'not json')
        self.app.add_url_rule('/empty', 'empty', lambda: '')
        self.app.add_url_rule('/broken', 'broken', lambda: ('Oops', 500))
        self.app.add_url_rule('/gone', 'gone', lambda: ({'status': 410, 'message': 'Gone'}, 410))

    def test_get(self):
        self.backend.seed('user', {'id': 1, 'name': 'Jan'})
        endpoint = Endpoint(self.api, 'api/v1/user')

        with self.assertLogs('flask_record.transport', level='DEBUG') as cm:
            self.assertEqual([{'id': 1, 'name': 'Jan'}], endpoint.all())

        self.assertEqual(['DEBUG:flask_record.transport:GET http://localhost/api/v1/user'], cm.output)
        self.assertEqual({'id': 1, 'name': 'Jan'}, endpoint.find(1))
        self.assertEqual('<Endpoint http://localhost/api/v1/user>', repr(endpoint))

    def test_empty_response(self):
        self.assertIsNone(Endpoint(self.api, 'empty').get())

    def test_invalid_response(self):
        with self.assertRaises(InvalidResponse) as cm:
            Endpoint(self.api, 'plain').get()

        self.assertEqual(b'not json', cm.exception.content)
        self.assertEqual('http://localhost/plain', cm.exception.url)

    def test_error_status(self):
        with self.assertRaises(RequestError) as cm:
            Endpoint(self.api, 'broken').get()

        self.assertEqual(500, cm.exception.status_code)
        self.assertIsNone(cm.exception.data)
        self.assertEqual('Internal Server Error', cm.exception.message)
        self.assertEqual({'status': 500, 'message': 'Internal Server Error'}, cm.exception.as_dict())

    def test_error_data(self):
        with self.assertRaises(RequestError) as cm:
            Endpoint(self.api, 'gone').get()

        self.assertEqual(410, cm.exception.status_code)
        self.assertEqual({
            'status': 410,
            'message': 'Gone',
            'data': {'status': 410, 'message': 'Gone'}
        }, cm.exception.as_dict())
        self.assertEqual('GET', cm.exception.method)
        self.assertEqual('http://localhost/gone', cm.exception.url)

    def test_connection_error(self):
        adapter = UnreachableAdapter()
        self.api.session.mount('http://unreachable', adapter)
        self.api.base_url = 'http://unreachable'
        self.api.config['RECORD_TIMEOUT'] = 3

        with self.assertRaises(RequestError) as cm:
            Endpoint(self.api, 'api/v1/user').find(1)

        self.assertIsNone(cm.exception.status_code)
        self.assertIsNone(cm.exception.response)
        self.assertIsInstance(cm.exception.__cause__, requests.ConnectionError)
        self.assertEqual('Connection refused', cm.exception.message)
        self.assertEqual([3], adapter.timeouts)
