from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from finance4all.errors import InputValidationError, format_field_errors


ModelT = TypeVar("ModelT", bound=BaseModel)

CENTS = Decimal("0.01")
# Money columns are DECIMAL(15, 2)
MAX_MONEY = Decimal("10000000000000")


def round_money(v: Decimal) -> Decimal:
    """Round to cents, rejecting values the money columns cannot hold"""
    if abs(v) >= MAX_MONEY:
        raise ValueError('Amount is out of range')
    try:
        return v.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError('Amount is out of range')


def round_positive_money(v: Decimal, message: str = 'Amount must be positive') -> Decimal:
    """Round to cents first so sub-cent amounts cannot slip through as zero"""
    v = round_money(v)
    if v <= 0:
        raise ValueError(message)
    return v


def validate_input(model: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate a raw payload against one of the request models.

    The whole payload is accepted or rejected; on failure every field
    error is reported at once.

    Raises:
        InputValidationError: with one ``{"field", "message"}`` entry per problem
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InputValidationError(format_field_errors(e.errors())) from e
