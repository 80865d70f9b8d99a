import inspect
import logging

from .exceptions import ValidationError
from .utils import route_uri_to_attribute

logger = logging.getLogger(__name__)


def _format_param(value):
    from .model import Model
    if isinstance(value, Model):
        return value.id
    if isinstance(value, (list, tuple)):
        return [_format_param(v) for v in value]
    if isinstance(value, dict):
        return {k: _format_param(v) for k, v in value.items()}
    return value


class Interaction(object):
    """
    An action on an item (or, for items without an id, on the resource), addressed as
    ``{resource path}/{id}/{source}``.

    Before it is sent, the parameters are checked by the ``action_validator`` of the model, if it has a method named
    after ``source``.

    :param item: the :class:`Model` instance to act on
    :param str source: the name of the action, e.g. ``'rent-to'``
    :param dict params: optional parameters
    """
    method = None

    def __init__(self, item, source, params=None):
        self.item = item
        self.source = source
        self.params = params or {}

    @property
    def endpoint(self):
        return self.item.endpoint()

    @property
    def url(self):
        return self.endpoint.uri(self.item.id, self.source)

    def validator(self):
        validator = self.item.meta.action_validator
        if inspect.isclass(validator):
            validator = validator()
        return validator

    def validate(self):
        validator = self.validator()
        if validator is None:
            return

        check = getattr(validator, route_uri_to_attribute(self.source), None)
        if check is None:
            logger.debug('No validator for %s on %r', self.source, self.item)
            return

        errors = check(self.params)
        if errors:
            raise ValidationError(errors)

    def send(self, url, params):
        raise NotImplementedError()

    def perform(self):
        self.validate()
        return self.send(self.url, _format_param(self.params))

    def __repr__(self):
        return '<{} {} {}>'.format(self.__class__.__name__, self.method, self.url)


class InteractsWith(Interaction):
    method = 'POST'

    def send(self, url, params):
        return self.endpoint.request(self.method, url, json=params)


class LoadsFrom(Interaction):
    method = 'GET'

    def send(self, url, params):
        return self.endpoint.request(self.method, url, params=params)
