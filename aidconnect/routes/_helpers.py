"""Request parsing shared by the blueprints."""
from flask import request

from aidconnect.errors import ValidationFailure


def form_data():
    """Form fields, or the JSON body when the client posted JSON.

    JSON bodies must be an object of string (or null) values.
    """
    if request.form:
        return request.form
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationFailure('Request body must be a JSON object')
    for name, value in data.items():
        if value is not None and not isinstance(value, str):
            raise ValidationFailure(f'Field {name!r} must be a string')
    return data
