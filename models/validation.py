"""
Pydantic models for input validation

Every registry entry point validates its arguments through one of these models
before touching any state, so a rejected call has no partial effects.
"""

import re
from typing import List, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from config.config import ADDRESS_HEX_LENGTH, ZERO_ADDRESS
from errors.exceptions import InvalidArgumentError

ADDRESS_RE = re.compile(r'0x[0-9a-fA-F]{%d}' % ADDRESS_HEX_LENGTH)

ModelT = TypeVar("ModelT", bound=BaseModel)


def normalize_address(v: str) -> str:
    """Check the fixed-width hex form, lowercase it, and reject the zero address."""
    if not ADDRESS_RE.fullmatch(v):
        raise ValueError(f'Address must be 0x followed by {ADDRESS_HEX_LENGTH} hex digits')
    v = v.lower()
    if v == ZERO_ADDRESS:
        raise ValueError('Address must not be the zero address')
    return v


def _normalize_addresses(values: List[str]) -> List[str]:
    return [normalize_address(v) for v in values]


class UserRequest(BaseModel):
    user: str

    @field_validator('user')
    @classmethod
    def validate_user(cls, v):
        return normalize_address(v)


class BalanceQuery(UserRequest):
    token: str

    @field_validator('token')
    @classmethod
    def validate_token(cls, v):
        return normalize_address(v)


class InitializeBalancesRequest(BaseModel):
    token: str
    users: List[str] = Field(..., min_length=1)

    @field_validator('token')
    @classmethod
    def validate_token(cls, v):
        return normalize_address(v)

    @field_validator('users')
    @classmethod
    def validate_users(cls, v):
        return _normalize_addresses(v)


class InitializeTokensRequest(UserRequest):
    tokens: List[str] = Field(..., min_length=1)

    @field_validator('tokens')
    @classmethod
    def validate_tokens(cls, v):
        return _normalize_addresses(v)


class BoundedQuery(BaseModel):
    max_iterations: int = Field(..., ge=0, strict=True, description="Registered users to scan")


class TokenSummaryQuery(BoundedQuery):
    token: str

    @field_validator('token')
    @classmethod
    def validate_token(cls, v):
        return normalize_address(v)


class TopHoldersQuery(TokenSummaryQuery):
    n: int = Field(..., gt=0, strict=True, description="Maximum number of holders to return")


class TransferRequest(BaseModel):
    token: str
    sender: str
    recipient: str
    amount: int = Field(..., gt=0, strict=True)

    @field_validator('token', 'sender', 'recipient')
    @classmethod
    def validate_address_fields(cls, v):
        return normalize_address(v)


def validate_request(model: Type[ModelT], **values) -> ModelT:
    """Build `model` from keyword values, turning pydantic errors into InvalidArgumentError."""
    try:
        return model(**values)
    except ValidationError as e:
        details = {
            ".".join(str(part) for part in err["loc"]) or "request": err["msg"]
            for err in e.errors()
        }
        summary = "; ".join(f"{field}: {msg}" for field, msg in details.items())
        raise InvalidArgumentError(f"Invalid arguments: {summary}", details=details) from e
