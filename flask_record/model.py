from copy import deepcopy
import logging

from .actions import InteractsWith, LoadsFrom
from .exceptions import ItemNotFound, ModelNotSaved, RequestError, ValidationError
from .fields import Raw
from .mapping import map_response
from .reference import ModelBound
from .relations import Relation, HasMany, BelongsTo
from .signals import before_create, after_create, before_update, after_update, before_delete, after_delete
from .transport import Endpoint, join_url
from .utils import AttributeDict
from .validators import ActionValidator

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = 'api'


class ModelMeta(type):

    def __new__(mcs, name, bases, members):
        class_ = super(ModelMeta, mcs).__new__(mcs, name, bases, members)
        class_.meta = meta = AttributeDict(getattr(class_, 'meta', {}) or {})
        class_.relations = relations = dict(getattr(class_, 'relations', None) or {})

        for base in bases:
            if hasattr(base, 'Meta'):
                meta.update((k, v) for k, v in base.Meta.__dict__.items() if not k.startswith('__'))

        if 'Meta' in members:
            changes = members['Meta'].__dict__
            for k, v in changes.items():
                if not k.startswith('__'):
                    meta[k] = v

            if not changes.get('name', None):
                meta['name'] = name.lower()
        else:
            meta['name'] = name.lower()

        fields = {}
        for base in bases:
            if hasattr(base, 'Schema'):
                fields.update(base.Schema.__dict__)

        if 'Schema' in members:
            fields.update(members['Schema'].__dict__)

        class_.fields = {k: f for k, f in fields.items() if isinstance(f, Raw)}

        for key, field in class_.fields.items():
            if isinstance(field, ModelBound):
                class_.fields[key] = field.bind(class_)

        for n, relation in list(relations.items()):
            if n not in members and relation.model is not class_:
                relations[n] = bound = relation.bind(class_)
                if bound is not relation:
                    setattr(class_, n, bound)

        for n, m in members.items():
            if isinstance(m, Relation):
                if m.attribute is None:
                    m.attribute = n
                relations[n] = m.bind(class_)

        return class_


class Model(object, metaclass=ModelMeta):
    """
    An active record for a remote JSON resource.

    Properties of an item are read and written as attributes. Assignments are recorded in an attribute bag, so that
    :meth:`save` can tell whether, and what, to send to the server. Relations are declared as class attributes using
    :class:`relations.HasMany` and :class:`relations.BelongsTo`.

    A model is configured using the `Meta` and `Schema` attributes; it must be registered with an :class:`Api` using
    :meth:`Api.add_model` before it can make requests.

    :class:`Meta` class attributes:

    =====================  ==============================  ==============================================================================
    Attribute name         Default                         Description
    =====================  ==============================  ==============================================================================
    name                   ---                             Name of the resource; defaults to the lower-case of the class name
    prefix                 ``None``                        First segment of the resource path; ``None`` uses ``Api.prefix``
    version                ``None``                        Optional version segment between prefix and name, e.g. ``'v1'``
    resource               ``None``                        Overrides the complete resource path, e.g. ``'foo/bar/baz'``
    id_attribute           ``'id'``                        The property holding the item id
    update_method          ``'PUT'``                       ``'PUT'`` sends all properties on update; ``'PATCH'`` only the changes
    required_fields        ``()``                          Properties that must be present and not ``None`` before an item is created
    read_only_fields       ``()``                          Properties that are never sent to the server. Useful for e.g. timestamps.
    action_validator       ``None``                        An :class:`ActionValidator` class or instance used by :meth:`interacts_with`
                                                           and :meth:`loads_from`
    =====================  ==============================  ==============================================================================

    Usage example:

    .. code-block:: python

        class User(Model):
            homes = HasMany('Home')

            class Meta:
                version = 'v1'

        class Home(Model):
            user = BelongsTo(User)

            class Meta:
                version = 'v1'

        api.add_model(User)
        api.add_model(Home)

        user = User.find(1)            # GET api/v1/user/1
        homes = user.homes.all()       # embedded data or GET api/v1/user/1/homes
        user.name = 'Jane'
        user.save()                    # PUT api/v1/user/1

    .. attribute:: api

        Back reference to the :class:`Api` this model is registered on.

    .. attribute:: meta

        A :class:`AttributeDict` of configuration attributes collected from the :class:`Meta` attributes of the base classes.

    .. attribute:: fields

        A dictionary of :class:`fields.Raw` collected from the :class:`Schema` attributes of the base classes.

    .. attribute:: relations

        A dictionary of relations declared on this model, keyed by attribute name.
    """
    api = None
    meta = None
    fields = None
    relations = None

    def __init__(self, **properties):
        object.__setattr__(self, '_properties', {})
        object.__setattr__(self, '_originals', {})
        object.__setattr__(self, '_relations', {})

        for key, field in self.fields.items():
            default = field.default
            if default is not None and key not in properties:
                self._properties[key] = default

        for key, value in properties.items():
            setattr(self, key, value)

    # resource location

    @classmethod
    def resource_path(cls):
        if cls.meta.resource:
            return cls.meta.resource

        prefix = cls.meta.prefix
        if prefix is None:
            prefix = cls.api.prefix if cls.api is not None else DEFAULT_PREFIX
        return join_url(prefix, cls.meta.version, cls.meta.name)

    @classmethod
    def _get_api(cls):
        if cls.api is None:
            raise RuntimeError('Model "{}" is not registered with an Api.'.format(cls.meta.name))
        return cls.api

    @classmethod
    def endpoint(cls):
        return Endpoint(cls._get_api(), cls.resource_path())

    # attribute bag

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._properties[name]
        except KeyError:
            raise AttributeError("'{}' object has no attribute '{}'".format(self.__class__.__name__, name))

    def __setattr__(self, name, value):
        if name.startswith('_') or isinstance(getattr(type(self), name, None), property):
            object.__setattr__(self, name, value)
        else:
            self._properties[name] = value

    def __delattr__(self, name):
        if name.startswith('_'):
            object.__delattr__(self, name)
            return
        try:
            del self._properties[name]
        except KeyError:
            raise AttributeError(name)

    def __getitem__(self, key):
        return self._properties[key]

    def __setitem__(self, key, value):
        self._properties[key] = value

    def __contains__(self, key):
        return key in self._properties

    @property
    def id(self):
        return self._properties.get(self.meta.id_attribute)

    @id.setter
    def id(self, value):
        self._properties[self.meta.id_attribute] = value

    @property
    def is_new(self):
        return self.id is None

    @property
    def properties(self):
        return dict(self._properties)

    @property
    def originals(self):
        return deepcopy(self._originals)

    def _format(self, key, value):
        field = self.fields.get(key)
        if field is not None:
            return field.format(value)
        return value

    def _convert(self, key, value):
        field = self.fields.get(key)
        if field is not None:
            return field.convert(value)
        return value

    @property
    def changes(self):
        """
        Properties that differ from the state last received from the server.
        """
        changes = {}
        for key, value in self._properties.items():
            formatted = self._format(key, value)
            if key not in self._originals or self._originals[key] != formatted:
                changes[key] = value
        return changes

    @property
    def has_changed(self):
        return bool(self.changes)

    def as_dict(self):
        return {key: self._format(key, value) for key, value in self._properties.items()}

    def _payload(self, keys=None):
        payload = {}
        read_only = self.meta.read_only_fields or ()
        for key, value in self._properties.items():
            field = self.fields.get(key)
            if key in read_only or (field is not None and 'w' not in field.io):
                continue
            if keys is not None and key not in keys:
                continue
            payload[key] = self._format(key, value)
        return payload

    def _fill(self, data):
        if not isinstance(data, dict):
            return
        for key, value in data.items():
            self._originals[key] = deepcopy(value)
            self._properties[key] = self._convert(key, deepcopy(value))
        self._relations.clear()

    def reset(self):
        """
        Restore the properties last received from the server, discarding any changes.
        """
        self._properties.clear()
        for key, value in self._originals.items():
            self._properties[key] = self._convert(key, deepcopy(value))
        return self

    # persistence

    @classmethod
    def _stored_items(cls):
        api = cls._get_api()
        return api.storage.get(cls.meta.name)

    @classmethod
    def all(cls):
        """
        Fetch all items of the resource.

        :return: list of items
        """
        stored = cls._stored_items()
        if stored is not None:
            logger.debug('Loading all %s from storage', cls.meta.name)
            return map_response(cls, list(stored))
        return map_response(cls, cls.endpoint().all() or [])

    @classmethod
    def find(cls, id):
        """
        Find a specific item by its id.

        :raises ItemNotFound: if there is no such item
        """
        stored = cls._stored_items()
        if stored is not None:
            items = [item for item in stored if item.get(cls.meta.id_attribute) == id]
            if len(items) != 1:
                raise ItemNotFound(cls, id=id)
            logger.debug('Loading %s %r from storage', cls.meta.name, id)
            return map_response(cls, items[0])

        return map_response(cls, cls._fetch(id))

    @classmethod
    def _fetch(cls, id):
        try:
            return cls.endpoint().find(id)
        except RequestError as e:
            if e.status_code == 404:
                raise ItemNotFound(cls, id=id) from e
            raise

    def _validate_required(self):
        required = self.meta.required_fields or ()
        if required:
            errors = ActionValidator().validate(self._properties, {name: {"presence": True} for name in required})
            if errors:
                raise ValidationError(errors)

    def save(self):
        """
        Create or update the item. Unchanged items are not sent.

        Items without an id are created; otherwise they are updated using ``Meta.update_method``. When an update fails,
        the item is reset to the properties last received from the server.
        """
        if not self.has_changed:
            return self

        endpoint = self.endpoint()

        if self.id is None:
            self._validate_required()
            before_create.send(self.__class__, item=self)
            try:
                data = endpoint.create(self._payload())
            except RequestError:
                logger.error('Failed creating %r', self)
                raise
            self._saved(data)
            after_create.send(self.__class__, item=self)
            return self

        if self.meta.update_method.upper() == 'PATCH':
            payload = self._payload(keys=self.changes)
        else:
            payload = self._payload()

        before_update.send(self.__class__, item=self, changes=self.changes)
        try:
            data = endpoint.update(self.id, payload, method=self.meta.update_method)
        except RequestError:
            logger.warning('Failed updating %r, restoring original properties', self)
            self.reset()
            raise
        self._saved(data)
        after_update.send(self.__class__, item=self)
        return self

    def _saved(self, data):
        if isinstance(data, dict):
            self._fill(data)
        self._originals.clear()
        self._fill(self.as_dict())

    def refresh(self):
        """
        Read the item again from the server, discarding any changes.

        :raises ItemNotFound: if the item no longer exists
        """
        if self.id is None:
            raise ModelNotSaved(self, 'refresh')
        data = self._fetch(self.id)
        self._properties.clear()
        self._originals.clear()
        return map_response(self, data)

    def delete(self):
        if self.id is None:
            raise ModelNotSaved(self, 'delete')
        before_delete.send(self.__class__, item=self)
        self.endpoint().destroy(self.id)
        after_delete.send(self.__class__, item=self)

    # relations

    def has_many(self, target, resource=None, foreign_key=None):
        """
        Defines a one to many relationship from within a method.

        :param target: a model reference
        :param str resource: the sub-resource holding the related items
        :return: a :class:`relations.HasMany` bound to this item
        """
        relation = HasMany(target, resource=resource, foreign_key=foreign_key)
        return relation.bind(self.__class__).for_parent(self)

    def belongs_to(self, target, foreign_key=None):
        """
        Defines a many to one relationship from within a method.

        :param target: a model reference
        :return: a :class:`relations.BelongsTo` bound to this item
        """
        relation = BelongsTo(target, foreign_key=foreign_key)
        return relation.bind(self.__class__).for_parent(self)

    # actions

    def interacts_with(self, source, params=None):
        """
        Post ``params`` to an action of this item, e.g. ``api/v1/group/1/invite``.
        """
        return InteractsWith(self, source, params).perform()

    def loads_from(self, source, params=None):
        """
        Read from a sub-resource of this item, e.g. ``api/v1/group/1/metrics``, passing ``params`` as query string.
        """
        return LoadsFrom(self, source, params).perform()

    def __repr__(self):
        return '<{} {}={!r}>'.format(self.__class__.__name__, self.meta.id_attribute, self.id)

    class Meta:
        name = None
        prefix = None
        version = None
        resource = None
        id_attribute = 'id'
        update_method = 'PUT'
        required_fields = ()
        read_only_fields = ()
        action_validator = None
