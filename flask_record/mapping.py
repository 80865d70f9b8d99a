import inspect


def map_response(target, data):
    """
    Map decoded JSON onto models.

    A list maps to a list of new instances of the target model; an object maps to a single instance, which is
    filled in place when ``target`` is a model instance.

    :param target: a :class:`Model` class or instance
    :param data: decoded JSON, a list of objects or an object
    """
    if isinstance(data, list):
        model = target if inspect.isclass(target) else type(target)
        return [_map_to_model(model, item) for item in data]
    return _map_to_model(target, data)


def _map_to_model(target, data):
    model = target() if inspect.isclass(target) else target
    model._fill(data)
    return model
