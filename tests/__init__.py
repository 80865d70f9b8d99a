from unittest import TestCase
from urllib.parse import urlsplit

from flask import Flask, json, jsonify, request
from requests import Response
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from flask_record import Api


class FlaskAdapter(BaseAdapter):
    """
    A :mod:`requests` transport adapter that dispatches requests to the test client of a Flask application
    and keeps a history of the requests it handled.
    """

    def __init__(self, app):
        super(FlaskAdapter, self).__init__()
        self.client = app.test_client()
        self.history = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.history.append((request.method, request.url))

        url = urlsplit(request.url)
        headers = {k: v for k, v in request.headers.items() if k.lower() != 'content-length'}

        rv = self.client.open(url.path,
                              base_url='{}://{}'.format(url.scheme, url.netloc),
                              method=request.method,
                              query_string=url.query,
                              data=request.body,
                              headers=headers)

        response = Response()
        response.status_code = rv.status_code
        response.reason = rv.status.partition(' ')[2]
        response.headers = CaseInsensitiveDict(rv.headers.items())
        response._content = rv.get_data()
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


class FakeBackend(object):
    """
    An in-memory JSON API with collections of items, registered on a Flask application.

    Items of a collection are available at ``{prefix}/{name}`` and ``{prefix}/{name}/{id}``.
    ``GET {prefix}/{name}/{id}/{source}`` lists items of the collection named by ``source`` (without a trailing "s")
    whose ``{name}_id`` is ``id``; other sources, and any ``POST`` to a source, echo the request.
    Items with the name ``'invalid'`` are rejected with 422.
    """

    def __init__(self, app, prefix='/api/v1', envelope=None):
        self.prefix = prefix
        self.envelope = envelope
        self.collections = {}

        app.add_url_rule(prefix + '/<name>', 'instances', self.instances, methods=['GET', 'POST'])
        app.add_url_rule(prefix + '/<name>/<int:id>', 'item', self.item, methods=['GET', 'PUT', 'PATCH', 'DELETE'])
        app.add_url_rule(prefix + '/<name>/<int:id>/<source>', 'item_source', self.item_source,
                         methods=['GET', 'POST'])

    def seed(self, name, *items):
        collection = self.collections.setdefault(name, {})
        for item in items:
            collection[item['id']] = dict(item)

    def _respond(self, data, code=200):
        if self.envelope:
            data = {self.envelope: data}
        response = jsonify(data)
        response.status_code = code
        return response

    def _invalid(self, properties):
        if properties.get('name') == 'invalid':
            return self._respond({'status': 422, 'errors': {'name': ['invalid']}}, 422)
        return None

    def _collection(self, name):
        if name not in self.collections:
            return None
        return self.collections[name]

    def instances(self, name):
        collection = self.collections.setdefault(name, {})

        if request.method == 'GET':
            return self._respond([collection[id] for id in sorted(collection)])

        properties = request.get_json()
        invalid = self._invalid(properties)
        if invalid is not None:
            return invalid

        item = dict(properties)
        item['id'] = max(collection or [0]) + 1
        collection[item['id']] = item
        return self._respond(item, 201)

    def item(self, name, id):
        collection = self._collection(name)
        if collection is None or id not in collection:
            return self._respond({'status': 404, 'message': 'Not Found'}, 404)

        if request.method == 'GET':
            return self._respond(collection[id])

        if request.method == 'DELETE':
            del collection[id]
            return '', 204

        properties = request.get_json()
        invalid = self._invalid(properties)
        if invalid is not None:
            return invalid

        if request.method == 'PATCH':
            item = dict(collection[id])
            item.update(properties)
        else:
            item = dict(properties)
        item['id'] = id
        collection[id] = item
        return self._respond(item)

    def item_source(self, name, id, source):
        related = self._collection(source.rstrip('s'))

        if request.method == 'GET' and related is not None:
            foreign_key = '{}_id'.format(name)
            return self._respond([item for _, item in sorted(related.items()) if item.get(foreign_key) == id])

        return self._respond({
            'id': id,
            'source': source,
            'params': request.get_json() if request.method == 'POST' else request.args.to_dict()
        })


class BaseTestCase(TestCase):

    def setUp(self):
        self.app = self.create_app()
        self.backend = FakeBackend(self.app)
        self.api = Api(self.app)
        self.adapter = FlaskAdapter(self.app)
        self.api.session.mount('http://localhost', self.adapter)

    def create_app(self):
        app = Flask(__name__)
        app.config['RECORD_BASE_URL'] = 'http://localhost'
        app.testing = True
        return app

    @property
    def requests(self):
        return self.adapter.history

    def reset_requests(self):
        del self.adapter.history[:]

    def assertNoRequests(self, msg=None):
        self.assertEqual([], self.requests, msg)

    def assertRequested(self, method, path, msg=None):
        self.assertIn((method, 'http://localhost' + path), self.requests, msg)

    def assertJSONEqual(self, first, second, msg=None):
        self.assertEqual(json.loads(json.dumps(first)), json.loads(json.dumps(second)), msg)
