from typing import Dict

from eth_utils import is_hex
from marshmallow import EXCLUDE, Schema, ValidationError, fields

from timelock.crypto.codec import normalize_hex


class InvalidRegistryResponse(ValueError):
    """A key-release network response did not have the expected shape."""


class HexString(fields.String):
    """A non-empty hex string, normalized to carry the 0x prefix."""

    def _deserialize(self, value, attr, data, **kwargs):
        value = super()._deserialize(value, attr, data, **kwargs)
        value = value.strip()
        if not value or not is_hex(value):
            raise ValidationError(f"{attr} is not a hex string.")
        value = normalize_hex(value)
        if value.lower() == "0x":
            raise ValidationError(f"{attr} is empty.")
        return value


class BaseSchema(Schema):

    class Meta:

        unknown = EXCLUDE   # the network adds fields over time; ignore what we don't use

    def handle_error(self, error, data, many, **kwargs):
        raise InvalidRegistryResponse(error)


class RegistrationSchema(BaseSchema):
    eon_key = HexString(required=True)
    identity = HexString(required=True)
    identity_prefix = HexString(required=False, allow_none=True)
    eon = fields.Integer(required=False, allow_none=True)


class DecryptionKeySchema(BaseSchema):
    decryption_key = HexString(required=True)
    identity = HexString(required=False, allow_none=True)
    decryption_timestamp = fields.Integer(required=False, allow_none=True)


def unwrap_message(body) -> Dict:
    """Responses nest their payload under "message"; tolerate bare payloads too."""
    if not isinstance(body, dict):
        raise InvalidRegistryResponse(f"Expected a JSON object, got {type(body).__name__}")
    message = body.get("message", body)
    if not isinstance(message, dict):
        raise InvalidRegistryResponse(f"Expected a JSON object message, got {type(message).__name__}")
    return message
