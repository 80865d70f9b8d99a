import calendar
from datetime import datetime, timezone

import aniso8601
from werkzeug.utils import cached_property

from .reference import ModelReference, ModelBound


class Raw(object):
    """
    This is the base class for all field types. Fields are declared in the ``Schema`` of a :class:`Model` and
    convert values between their JSON representation (as sent by the remote API) and Python.

    >>> f = fields.Raw(io="r")
    >>> f.convert('x')
    'x'

    :param io: one or more of "r" (read) and "w" (write), default: "rw"; fields without "w" are never sent
    :param default: optional initial value of the property on new items; may be a callable with no arguments
    """

    def __init__(self, io="rw", default=None):
        self._default = default
        self.io = io

    @property
    def default(self):
        if callable(self._default):
            return self._default()
        return self._default

    @default.setter
    def default(self, value):
        self._default = value

    def format(self, value):
        """
        Format a Python value representation for output in JSON. Noop by default.
        """
        if value is not None:
            return self.formatter(value)
        return value

    def convert(self, value):
        """
        Convert a JSON value representation to a Python object. Noop by default.
        """
        if value is not None:
            return self.converter(value)
        return value

    def formatter(self, value):
        return value

    def converter(self, value):
        return value

    def __repr__(self):
        return '{}(io={})'.format(self.__class__.__name__, repr(self.io))


def _field_from_object(parent, cls_or_instance):
    if isinstance(cls_or_instance, type):
        container = cls_or_instance()
    else:
        container = cls_or_instance
    if not isinstance(container, Raw):
        raise RuntimeError('{} expected Raw, but got {}'.format(parent, container.__class__.__name__))
    return container


class Custom(Raw):
    """
    A field type that can be passed optional formatter/converter transformers. It is a very thin
    wrapper over :class:`Raw`.

    :param callable converter: convert function
    :param callable formatter: format function
    """

    def __init__(self, converter=None, formatter=None, **kwargs):
        super(Custom, self).__init__(**kwargs)
        self._converter = converter
        self._formatter = formatter

    def formatter(self, value):
        if self._formatter is None:
            return value
        return self._formatter(value)

    def converter(self, value):
        if self._converter is None:
            return value
        return self._converter(value)


class Array(Raw, ModelBound):
    """
    A field for an array of a given field type.

    :param Raw cls_or_instance: field class or instance
    """

    def __init__(self, cls_or_instance, **kwargs):
        super(Array, self).__init__(**kwargs)
        self.container = _field_from_object(self, cls_or_instance)

    def bind(self, model):
        if isinstance(self.container, ModelBound):
            self.container = self.container.bind(model)
        return self

    def formatter(self, value):
        return [self.container.format(v) for v in value]

    def converter(self, value):
        return [self.container.convert(v) for v in value]


List = Array


class String(Raw):
    def formatter(self, value):
        return str(value)


class Boolean(Raw):
    def formatter(self, value):
        return bool(value)

    def converter(self, value):
        return bool(value)


class Integer(Raw):
    def formatter(self, value):
        return int(value)

    def converter(self, value):
        return int(value)


class Number(Raw):
    def formatter(self, value):
        return float(value)


class Date(Raw):
    """
    A field for EJSON-style dates in the format:

    ::

        {"$date": MILLISECONDS_SINCE_EPOCH}

    Converts to :class:`datetime.date` with UTC timezone.

    """

    def formatter(self, value):
        return {"$date": int(calendar.timegm(value.timetuple()) * 1000)}

    def converter(self, value):
        return datetime.fromtimestamp(value["$date"] / 1000, timezone.utc).date()


class DateTime(Date):
    """
    A field for EJSON-style date-times in the format:

    ::

        {"$date": MILLISECONDS_SINCE_EPOCH}

    Converts to :class:`datetime.datetime` with UTC timezone.

    """

    def formatter(self, value):
        return {"$date": int(calendar.timegm(value.utctimetuple()) * 1000)}

    def converter(self, value):
        return datetime.fromtimestamp(value["$date"] / 1000, timezone.utc)


class DateString(Raw):
    """
    A field for ISO8601-formatted date strings.
    """

    def formatter(self, value):
        return value.strftime('%Y-%m-%d')

    def converter(self, value):
        return aniso8601.parse_date(value)


class DateTimeString(Raw):
    """
    A field for ISO8601-formatted date-time strings.
    """

    def formatter(self, value):
        return value.isoformat()

    def converter(self, value):
        return aniso8601.parse_datetime(value)


class Inline(Raw, ModelBound):
    """
    Converts an embedded JSON object into an instance of a :class:`Model` and formats it back using
    :meth:`Model.as_dict`.

    Model references can be one of the following:

    - :class:`Model` class
    - a string with a model name registered with the :class:`Api`
    - a string with a module name and class name of a model
    - ``"self"`` --- which resolves to the model this field is bound to

    :param model: a model reference
    """

    def __init__(self, model, **kwargs):
        self.target_reference = ModelReference(model)
        super(Inline, self).__init__(**kwargs)

    def rebind(self, model):
        if self.target_reference.value == 'self':
            return self.__class__(
                'self',
                default=self._default,
                io=self.io
            ).bind(model)
        else:
            return self

    @cached_property
    def target(self):
        return self.target_reference.resolve(self.model)

    def formatter(self, item):
        if isinstance(item, list):
            return [self.formatter(i) for i in item]
        if isinstance(item, dict):
            return item
        return item.as_dict()

    def converter(self, value):
        from .mapping import map_response
        return map_response(self.target, value)
