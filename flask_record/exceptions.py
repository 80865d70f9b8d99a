from werkzeug.http import HTTP_STATUS_CODES


class RecordException(Exception):
    status_code = None

    def as_dict(self):
        return {
            'status': self.status_code,
            'message': HTTP_STATUS_CODES.get(self.status_code, '')
        }


class RequestError(RecordException):
    """
    Raised when the remote API cannot be reached or answers with a non-2xx status.

    :param str method: HTTP method of the failed request
    :param str url: URL of the failed request
    :param response: the :class:`requests.Response`, if one was received
    :param data: the decoded JSON body of the response, if any
    """

    def __init__(self, method, url, response=None, data=None, reason=None):
        self.method = method
        self.url = url
        self.response = response
        self.data = data
        self.reason = reason

        if response is not None:
            self.status_code = response.status_code

        super(RequestError, self).__init__('{} {} failed: {}'.format(method, url, self.message))

    @property
    def message(self):
        if self.reason is not None:
            return str(self.reason)
        return HTTP_STATUS_CODES.get(self.status_code, 'Unknown Error')

    def as_dict(self):
        dct = super(RequestError, self).as_dict()
        if self.data is not None:
            dct['data'] = self.data
        return dct


class ItemNotFound(RecordException):
    status_code = 404

    def __init__(self, model, id=None):
        super(ItemNotFound, self).__init__('{} with id {!r} not found'.format(model.meta.name, id))
        self.model = model
        self.id = id

    def as_dict(self):
        dct = super(ItemNotFound, self).as_dict()
        dct['item'] = {
            "$type": self.model.meta.name,
            "$id": self.id
        }
        return dct


class InvalidResponse(RecordException):

    def __init__(self, url, content):
        super(InvalidResponse, self).__init__('Response from {} is not valid JSON'.format(url))
        self.url = url
        self.content = content


class ModelNotSaved(RecordException):

    def __init__(self, model, action):
        super(ModelNotSaved, self).__init__('Unable to {}, {!r} is not yet saved.'.format(action, model))
        self.model = model
        self.action = action


class ValidationError(RecordException):
    status_code = 400

    def __init__(self, errors):
        super(ValidationError, self).__init__('Validation failed for {}'.format(', '.join(sorted(errors))))
        self.errors = errors

    def as_dict(self):
        dct = super(ValidationError, self).as_dict()
        dct['errors'] = self.errors
        return dct
