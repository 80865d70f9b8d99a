import logging

import requests

from .exceptions import RequestError, InvalidResponse

logger = logging.getLogger(__name__)


def join_url(*parts):
    """
    Join URL parts with a single ``'/'``. ``None`` and empty parts are skipped.

    >>> join_url('http://example.com/', '/api', 'v1', 'user', 1)
    'http://example.com/api/v1/user/1'
    """
    cleaned = []
    for part in parts:
        if part is None:
            continue
        part = str(part)
        part = part.rstrip('/') if not cleaned else part.strip('/')
        if part:
            cleaned.append(part)
    return '/'.join(cleaned)


class Endpoint(object):
    """
    A thin shim over the :class:`requests.Session` of an :class:`Api`, rooted at a resource path.

    :param Api api: the api providing session, base url and settings
    :param str path: resource path relative to the base url, e.g. ``'api/v1/user'``
    """

    def __init__(self, api, path):
        self.api = api
        self.path = path

    def uri(self, *parts):
        return self.api.url(self.path, *parts)

    def request(self, method, url, **kwargs):
        if self.api.timeout is not None:
            kwargs.setdefault('timeout', self.api.timeout)

        logger.debug('%s %s', method, url)

        try:
            response = self.api.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise RequestError(method, url, reason=e) from e

        if not 200 <= response.status_code < 300:
            raise RequestError(method, url, response=response, data=self._decode(response, strict=False))

        return self.unwrap(self._decode(response))

    def _decode(self, response, strict=True):
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            if strict:
                raise InvalidResponse(response.url, response.content)
            return None

    def unwrap(self, data):
        envelope = self.api.envelope
        if envelope and isinstance(data, dict) and envelope in data:
            return data[envelope]
        return data

    def get(self, *parts, **kwargs):
        return self.request('GET', self.uri(*parts), **kwargs)

    def post(self, *parts, **kwargs):
        return self.request('POST', self.uri(*parts), **kwargs)

    def put(self, *parts, **kwargs):
        return self.request('PUT', self.uri(*parts), **kwargs)

    def patch(self, *parts, **kwargs):
        return self.request('PATCH', self.uri(*parts), **kwargs)

    def delete(self, *parts, **kwargs):
        return self.request('DELETE', self.uri(*parts), **kwargs)

    def all(self, params=None):
        return self.get(params=params)

    def find(self, id):
        return self.get(id)

    def create(self, properties):
        return self.post(json=properties)

    def update(self, id, properties, method='PUT'):
        return self.request(method.upper(), self.uri(id), json=properties)

    def destroy(self, id):
        return self.delete(id)

    def relation(self, id, resource):
        return self.get(id, resource)

    def __repr__(self):
        return '<Endpoint {}>'.format(self.uri())
