"""Small helpers shared by the JSON blueprints."""

from flask import request

from adventure_diary.errors import APIError


def json_body():
    """The request body as a dict, or a 400 if it isn't a JSON object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise APIError('Request body must be a JSON object')
    return data


def parse_new(schema_cls):
    """Validate a create/PUT body: required fields must be present."""
    return schema_cls.model_validate(json_body(), context={'create': True})


def parse_patch(schema_cls):
    return schema_cls.model_validate(json_body())


def adventure_arg():
    """?adventure=<id> filter shared by the list endpoints (None if absent)."""
    return request.args.get('adventure', type=int)


def apply_changes(obj, schema):
    """PATCH: copy only the fields the client sent onto obj."""
    for name, value in schema.changes().items():
        setattr(obj, name, value)
    return obj


def column_default(model_cls, name):
    column = getattr(model_cls, name).property.columns[0]
    if column.default is not None and column.default.is_scalar:
        return column.default.arg
    return None


def replace_fields(obj, schema):
    """PUT: every field the schema knows about is rewritten. Fields the
    client left out go back to the column default (or NULL)."""
    supplied = schema.changes()
    for name in type(schema).model_fields:
        if name in supplied:
            setattr(obj, name, supplied[name])
        else:
            setattr(obj, name, column_default(type(obj), name))
    return obj
