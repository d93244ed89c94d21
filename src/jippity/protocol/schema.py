"""Validation of action parameter schemas."""

from __future__ import annotations

from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from jippity.errors import InvalidActionSchema
from jippity.protocol.messages import Action


def validate_action_schema(action: Action) -> None:
    """Check that an action's parameter schema is a well-formed JSON schema.

    An absent or empty schema means the action takes no parameters and is valid.

    Raises:
        InvalidActionSchema: the schema does not conform to its meta-schema.
    """
    schema = action.schema_
    if not schema:
        return
    try:
        validator_for(schema).check_schema(schema)
    except SchemaError as exc:
        raise InvalidActionSchema(action.name, exc.message) from exc
