from collections import OrderedDict

from jsonschema import Draft4Validator

NUMERIC_STRING_PATTERN = r'^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$'


def _humanize(attribute):
    return attribute.replace('_', ' ').capitalize()


def constraints_schema(constraints):
    """
    Compile simple presence and numericality rules into a JSON-schema.

    :param dict constraints: ``{attribute: {"presence": True, "numericality": True}}``
    """
    properties = OrderedDict()
    required = []

    for attribute, rules in constraints.items():
        schema = {}
        if rules.get('presence'):
            required.append(attribute)
            schema['not'] = {"type": "null"}
        if rules.get('numericality'):
            schema['anyOf'] = [
                {"type": "number"},
                {"type": "string", "pattern": NUMERIC_STRING_PATTERN},
                {"type": "null"}
            ]
        properties[attribute] = schema

    schema = {
        "type": "object",
        "properties": properties
    }
    if required:
        schema['required'] = required
    return schema


class ActionValidator(object):
    """
    Validates parameters of model actions before they are sent.

    A validator method is named after the action it validates, with dashes replaced by underscores. It receives the
    action parameters and returns ``None`` when they are valid or a dictionary of errors.

    Usage example:

    .. code-block:: python

        class HomeValidator(ActionValidator):
            def rent_to(self, attributes):
                return self.validate(attributes, {
                    "user": {"presence": True, "numericality": True},
                    "amount": {"presence": True, "numericality": True}
                })

        class Home(Model):
            class Meta:
                action_validator = HomeValidator

            def rent_to(self, user, amount):
                return self.interacts_with('rent-to', {"user": user, "amount": amount})

    """

    messages = {
        'presence': "{} can't be blank",
        'numericality': "{} is not a number"
    }

    def validate(self, attributes, constraints):
        """
        :param dict attributes: the values to validate
        :param dict constraints: rules per attribute
        :return: ``None`` or ``{attribute: [message, ...]}``
        """
        validator = Draft4Validator(constraints_schema(constraints))
        errors = OrderedDict()

        def add(attribute, kind):
            messages = errors.setdefault(attribute, [])
            message = self.messages[kind].format(_humanize(attribute))
            if message not in messages:
                messages.append(message)

        for error in validator.iter_errors(attributes):
            if error.validator == 'required':
                for attribute in error.validator_value:
                    if attribute not in error.instance:
                        add(attribute, 'presence')
            elif error.validator == 'not':
                add(error.path[0], 'presence')
            elif error.validator == 'anyOf':
                add(error.path[0], 'numericality')
            elif error.validator == 'type':
                raise TypeError('Attributes must be a dictionary, got {!r}'.format(attributes))

        return dict(errors) or None
