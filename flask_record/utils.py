def attribute_to_route_uri(s):
    return s.replace('_', '-')


def route_uri_to_attribute(s):
    return s.replace('-', '_')


class AttributeDict(dict):
    __getattr__ = dict.__getitem__
    __setattr__ = dict.__setitem__
