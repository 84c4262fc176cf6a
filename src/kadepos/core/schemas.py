"""Record schemas for persisted queue entries.

Constants:
    ORDER_LINE_SCHEMA: Field types of one order line
    QUEUED_ORDER_SCHEMA: Field types of one queued order

Functions:
    validate_record: Validate a persisted record against a schema
"""
from .errors import InvalidOrder

NUMBER = (int, float)

ORDER_LINE_SCHEMA = {
    "product_id": (int, str),
    "name": str,
    "unit_price": NUMBER,
    "quantity": int,
}

QUEUED_ORDER_SCHEMA = {
    "items": list,
    "total_amount": NUMBER,
    "created_at": str,
    "queued_at": str,
}


def validate_record(record: dict, schema: dict, kind: str = "record") -> bool:
    """Validate record has every schema field with the right type.

    Args:
        record: Decoded JSON object
        schema: Mapping of field name to accepted type(s)
        kind: Name used in error messages

    Returns:
        True if valid

    Raises:
        InvalidOrder: If a field is missing or has the wrong type
    """
    if not isinstance(record, dict):
        raise InvalidOrder(f"{kind} must be an object")

    for field, expected in schema.items():
        if field not in record:
            raise InvalidOrder(f"{kind} missing required field: {field}")
        value = record[field]
        # bool is an int subclass; never a valid number here
        if isinstance(value, bool) or not isinstance(value, expected):
            raise InvalidOrder(f"{kind} field {field} has invalid type {type(value).__name__}")

    return True
