from importlib import import_module
import inspect


def _import_model(path):
    module_name, _, class_name = path.rpartition('.')
    if not module_name:
        return None
    return getattr(import_module(module_name), class_name)


class ModelReference(object):
    """
    A lazily resolved pointer to a :class:`Model`, used by relations and inline fields so that models can refer to
    each other before all of them are defined.

    :param value: a model class, ``'self'``, the name of a model registered with the :class:`Api` or a dotted
        import path such as ``'app.models.User'``
    """

    def __init__(self, value):
        self.value = value

    def resolve(self, binding=None):
        """
        :param binding: the model class owning the reference; supplies the :class:`Api` used for name lookups
        :raises RuntimeError: when no model matches
        """
        from .model import Model

        value = self.value
        if value == 'self':
            return binding
        if inspect.isclass(value) and issubclass(value, Model):
            return value

        api = getattr(binding, 'api', None)
        if api is not None:
            model = api.get_model(value)
            if model is not None:
                return model

        if isinstance(value, str):
            model = _import_model(value)
            if model is not None:
                return model

        if api is None:
            raise RuntimeError('Cannot resolve model {!r} without an Api; register {} first.'.format(
                value, getattr(binding, '__name__', 'the owning model')))
        raise RuntimeError('No model {!r} is registered with {!r}.'.format(value, api))

    def __repr__(self):
        return '<ModelReference {!r}>'.format(self.value)


class ModelBound(object):
    """
    Mixin for objects attached to a model class. An object is bound once; binding it to a second model (e.g. a
    subclass inheriting a relation) goes through :meth:`rebind`, which returns a separate copy.
    """
    model = None

    def bind(self, model):
        if self.model is None:
            self.model = model
            return self
        if self.model is model:
            return self
        return self.rebind(model)

    def rebind(self, model):
        raise NotImplementedError('{!r} belongs to {} and cannot be bound to {}'.format(
            self, self.model.__name__, model.__name__))
