import copy
import logging

from werkzeug.utils import cached_property

from .exceptions import ModelNotSaved
from .mapping import map_response
from .reference import ModelReference, ModelBound
from .signals import before_add_to_relation, after_add_to_relation
from .utils import attribute_to_route_uri

logger = logging.getLogger(__name__)


class Relation(ModelBound):
    """
    Base class for relations between models.

    Relations are declared as class attributes of a :class:`Model`. Accessed through an item, a relation returns a
    copy of itself bound to that item (its ``parent``); resolved relations are cached on the parent.

    Model references can be one of the following:

    - :class:`Model` class
    - a string with a model name or class name registered with the :class:`Api`
    - a string with a module name and class name of a model
    - ``"self"`` --- which resolves to the model this relation is declared on

    :param target: a model reference
    :param str attribute: key of the relation on the parent; defaults to the attribute name it is declared with
    """

    def __init__(self, target, attribute=None):
        self.target_reference = ModelReference(target)
        self.attribute = attribute
        self.parent = None

    def rebind(self, model):
        relation = copy.copy(self)
        relation.__dict__.pop('target', None)
        relation.model = None
        return relation.bind(model)

    @cached_property
    def target(self):
        return self.target_reference.resolve(self.model)

    @property
    def key(self):
        return self.attribute or self.target.meta.name

    def for_parent(self, parent):
        relation = copy.copy(self)
        relation.parent = parent
        return relation

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return self.for_parent(instance)

    def _require_parent(self):
        if self.parent is None:
            raise RuntimeError('{!r} is not bound to an item'.format(self))
        return self.parent

    @property
    def _cache(self):
        return self._require_parent()._relations

    def _embedded(self):
        return self._require_parent()._properties.get(self.key)

    @property
    def is_loaded(self):
        return self.key in self._cache

    def __repr__(self):
        return "<{} {!r} of {!r}>".format(self.__class__.__name__, self.target_reference.value, self.parent)


class HasMany(Relation):
    """
    A one to many relationship.

    Related items are read from the parent item when the server embedded them under :attr:`key`; otherwise they are
    fetched from the sub-resource of the parent item, e.g. ``api/v1/user/1/homes``.

    :param target: a model reference
    :param str resource: URI of the sub-resource, also the key of embedded items; defaults to the attribute name with
        ``'_'`` replaced by ``'-'``
    :param str foreign_key: property on related items referring to the parent, default: ``'{parent name}_id'``
    """

    def __init__(self, target, resource=None, foreign_key=None, attribute=None):
        super(HasMany, self).__init__(target, attribute=attribute)
        self.resource = resource
        self._foreign_key = foreign_key

    @property
    def key(self):
        return self.resource or self.attribute or self.target.meta.name

    @property
    def uri(self):
        return self.resource or attribute_to_route_uri(self.key)

    @property
    def foreign_key(self):
        return self._foreign_key or '{}_id'.format(self.model.meta.name)

    def _map(self, items):
        from .model import Model
        target = self.target
        return [item if isinstance(item, Model) else map_response(target, item) for item in items]

    def all(self, refresh=False):
        """
        :param bool refresh: when ``True``, always fetch the items from the server
        :return: list of related items
        """
        parent = self._require_parent()
        cache = parent._relations

        if not refresh:
            if self.key in cache:
                return list(cache[self.key])

            embedded = self._embedded()
            if isinstance(embedded, list):
                cache[self.key] = items = self._map(embedded)
                return list(items)

        if parent.id is None:
            raise ModelNotSaved(parent, 'load {}'.format(self.key))

        logger.debug('Fetching %s of %r', self.key, parent)
        data = parent.endpoint().relation(parent.id, self.uri)
        cache[self.key] = items = self._map(data or [])
        return list(items)

    def add(self, entity):
        """
        Relate an item to the parent by setting its foreign key, and save it.

        :return: the saved item
        """
        parent = self._require_parent()
        if parent.id is None:
            raise ModelNotSaved(parent, 'add to {}'.format(self.key))

        before_add_to_relation.send(parent.__class__, item=parent, attribute=self.key, child=entity)
        entity[self.foreign_key] = parent.id
        entity.save()

        if self.is_loaded or isinstance(self._embedded(), list):
            self.all()
            parent._relations[self.key].append(entity)

        after_add_to_relation.send(parent.__class__, item=parent, attribute=self.key, child=entity)
        return entity

    def create(self, **properties):
        return self.add(self.target(**properties))

    def __iter__(self):
        return iter(self.all())

    def __len__(self):
        return len(self.all())

    def __getitem__(self, index):
        return self.all()[index]


class BelongsTo(Relation):
    """
    A many to one relationship.

    The related item is read from the parent item when the server embedded it under :attr:`key`; otherwise it is
    found using the foreign key of the parent.

    :param target: a model reference
    :param str foreign_key: property of the parent referring to the related item, default: ``'{target name}_id'``
    """

    def __init__(self, target, foreign_key=None, attribute=None):
        super(BelongsTo, self).__init__(target, attribute=attribute)
        self._foreign_key = foreign_key

    @property
    def foreign_key(self):
        return self._foreign_key or '{}_id'.format(self.target.meta.name)

    def get(self, refresh=False):
        """
        :param bool refresh: when ``True``, always fetch the item from the server
        :return: the related item or ``None`` if the foreign key is not set
        """
        from .model import Model
        parent = self._require_parent()
        cache = parent._relations

        if not refresh:
            if self.key in cache:
                return cache[self.key]

            embedded = self._embedded()
            if isinstance(embedded, Model):
                cache[self.key] = embedded
                return embedded
            if isinstance(embedded, dict):
                cache[self.key] = item = map_response(self.target, embedded)
                return item

        id = parent._properties.get(self.foreign_key)
        if id is None:
            return None

        logger.debug('Fetching %s of %r', self.key, parent)
        cache[self.key] = item = self.target.find(id)
        return item

    def associate(self, entity):
        """
        Set the foreign key of the parent to refer to ``entity``. The parent is not saved.

        :return: the parent item
        """
        parent = self._require_parent()
        parent[self.foreign_key] = entity.id
        parent._properties.pop(self.key, None)
        parent._relations[self.key] = entity
        return parent

    def dissociate(self):
        parent = self._require_parent()
        parent[self.foreign_key] = None
        parent._properties.pop(self.key, None)
        parent._relations.pop(self.key, None)
        return parent
