# contactbook/utils/form_fields.py

import json
import math
from typing import Any, Dict, List, Type

from pydantic import BaseModel, TypeAdapter, ValidationError

from contactbook.models.contact import AddressEntry, EmailEntry, PhoneEntry

# BSON stores integers as signed 64-bit
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Form fields holding a JSON-encoded list, and the shape of each entry
LIST_FIELDS: Dict[str, Type[BaseModel]] = {
    "email": EmailEntry,
    "phone": PhoneEntry,
    "address": AddressEntry,
}


class FieldDecodeError(ValueError):
    """A form field was missing or did not hold the JSON value it should."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


def decode_json_field(form, name: str) -> Any:
    raw = form.get(name)
    if raw is None:
        raise FieldDecodeError(name, "field is required")
    if not isinstance(raw, str):
        raise FieldDecodeError(name, "expected JSON text, got a file")

    def reject_constant(constant):
        raise FieldDecodeError(name, f"invalid JSON ({constant} is not allowed)")

    try:
        value = json.loads(raw, parse_constant=reject_constant)
    except json.JSONDecodeError as e:
        raise FieldDecodeError(name, f"invalid JSON ({e.msg})")
    _check_storable(name, value)
    return value


def _check_storable(name: str, value: Any) -> None:
    """Reject decoded values MongoDB cannot store."""
    if isinstance(value, bool):
        return
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise FieldDecodeError(name, "integer out of range")
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise FieldDecodeError(name, "number out of range")
    elif isinstance(value, dict):
        for key, item in value.items():
            if "\x00" in key:
                raise FieldDecodeError(name, "object keys may not contain NUL")
            _check_storable(name, item)
    elif isinstance(value, list):
        for item in value:
            _check_storable(name, item)


def decode_entries(form, name: str) -> List[dict]:
    value = decode_json_field(form, name)
    adapter = TypeAdapter(List[LIST_FIELDS[name]])
    try:
        entries = adapter.validate_python(value)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise FieldDecodeError(name, f"{first['msg']} at {location or 'root'}")
    return [entry.model_dump() for entry in entries]


def decode_bool_field(form, name: str) -> bool:
    value = decode_json_field(form, name)
    if not isinstance(value, bool):
        raise FieldDecodeError(name, "expected true or false")
    return value


def parse_contact_form(form) -> Dict[str, Any]:
    """Decode the writable contact fields out of a submitted form.

    `name` and the three lists are required. `title` and `company` are set
    together when either one is sent (the missing one becomes None), and
    `favorite` only when it is sent. The avatar file is not handled here.
    """
    fields: Dict[str, Any] = {"name": decode_json_field(form, "name")}
    for name in LIST_FIELDS:
        fields[name] = decode_entries(form, name)

    if "title" in form or "company" in form:
        fields["title"] = decode_json_field(form, "title") if "title" in form else None
        fields["company"] = decode_json_field(form, "company") if "company" in form else None

    if "favorite" in form:
        fields["favorite"] = decode_bool_field(form, "favorite")

    return fields
