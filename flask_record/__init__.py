import inspect
import logging

import requests

from .model import Model
from .relations import HasMany, BelongsTo
from .transport import join_url
from .validators import ActionValidator

__all__ = (
    'Api',
    'Model',
    'HasMany',
    'BelongsTo',
    'ActionValidator',
    'actions',
    'exceptions',
    'fields',
    'relations',
    'signals',
    'transport',
    'validators',
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'RECORD_BASE_URL': 'http://localhost',
    'RECORD_PREFIX': 'api',
    'RECORD_TIMEOUT': None,
    'RECORD_ENVELOPE': None,
    'RECORD_STORAGE': {},
}


class Api(object):
    """
    This is the Flask-Record extension. It holds the settings and the HTTP session used by the models registered
    with it.

    :class:`Api` can be used with or without a :class:`Flask` application. When an application is given, either upon
    initializing :class:`Api` or later using :meth:`init_app()`, settings not passed to the constructor are read from
    the ``RECORD_*`` keys of its configuration.

    :param app: a :class:`Flask` instance
    :param str base_url: scheme and host of the remote API, e.g. ``'http://example.com'``; default ``RECORD_BASE_URL``
    :param str prefix: first path segment of models without a ``Meta.prefix``; default ``RECORD_PREFIX``
    :param timeout: an optional timeout passed to :mod:`requests`; default ``RECORD_TIMEOUT``
    :param str envelope: an optional key the remote API wraps response data in, e.g. ``'data'``; default ``RECORD_ENVELOPE``
    :param requests.Session session: an optional session, e.g. with authentication configured
    """

    def __init__(self, app=None, base_url=None, prefix=None, timeout=None, envelope=None, session=None):
        self.app = app
        self.session = session or requests.Session()
        self.models = {}
        self.storage = {}
        self.config = {key: value for key, value in DEFAULT_CONFIG.items() if key != 'RECORD_STORAGE'}
        self._options = {key: value for key, value in (
            ('RECORD_BASE_URL', base_url.rstrip('/') if base_url else None),
            ('RECORD_PREFIX', prefix),
            ('RECORD_TIMEOUT', timeout),
            ('RECORD_ENVELOPE', envelope)) if value is not None}
        self.config.update(self._options)

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """
        :param app: a :class:`Flask` instance
        """
        for key, value in DEFAULT_CONFIG.items():
            app.config.setdefault(key, dict(value) if isinstance(value, dict) else value)

        for key in self.config:
            if key not in self._options:
                self.config[key] = app.config[key]

        self.fill(app.config['RECORD_STORAGE'])

        app.extensions['record'] = self

    @property
    def base_url(self):
        return self.config['RECORD_BASE_URL']

    @base_url.setter
    def base_url(self, url):
        self.config['RECORD_BASE_URL'] = self._options['RECORD_BASE_URL'] = url.rstrip('/')

    @property
    def prefix(self):
        return self.config['RECORD_PREFIX']

    @property
    def timeout(self):
        return self.config['RECORD_TIMEOUT']

    @property
    def envelope(self):
        return self.config['RECORD_ENVELOPE']

    def url(self, *parts):
        return join_url(self.base_url, *parts)

    def add_model(self, model):
        """
        Register a :class:`Model` class with the API.

        :param Model model: model
        :return: the model, so that this method can be used as a class decorator
        """
        if not (inspect.isclass(model) and issubclass(model, Model)):
            raise TypeError('Expected a Model subclass, got {!r}'.format(model))

        # prevent models from being added twice
        if model in self.models.values():
            return model

        if model.api is not None and model.api != self:
            raise RuntimeError("Attempted to register a model that is already registered with a different Api.")

        model.api = self
        self.models[model.meta.name] = model
        logger.debug('Registered model %s at %s', model.__name__, model.resource_path())
        return model

    def get_model(self, name):
        """
        Look up a registered model by its resource name or class name.
        """
        if name in self.models:
            return self.models[name]
        for model in self.models.values():
            if model.__name__ == name:
                return model
        return None

    @staticmethod
    def _storage_key(name):
        if inspect.isclass(name) and issubclass(name, Model):
            return name.meta.name
        return name.lower()

    def fill(self, items):
        """
        Prefill the storage. While a model has items in storage, :meth:`Model.all` and :meth:`Model.find` read from it
        and make no requests.

        :param dict items: a mapping of model names or classes to lists of items
        """
        for name, values in items.items():
            self.storage[self._storage_key(name)] = list(values)

    def clear_storage(self, name=None):
        if name is None:
            self.storage.clear()
        else:
            self.storage.pop(self._storage_key(name), None)
