import re
from enum import IntEnum

from pydantic import BaseModel, Field, field_validator

_DECIMAL = re.compile(r"^\s*\+?[0-9]+\s*$")


class DiscountCodeResult(IntEnum):
    SUCCESS = 0
    ALREADY_USED = 1
    NOT_FOUND = 2
    INVALID_REQUEST = 3


class GenerateRequest(BaseModel):
    count: int = Field(ge=0, le=0xFFFF)   # unsigned 16-bit
    length: int = Field(ge=0, le=0xFF)    # unsigned 8-bit

    @field_validator("count", "length", mode="before")
    @classmethod
    def _decimal_only(cls, v):
        # wire tokens are plain decimals; "5.0", "1e3" and "-1" are rejected
        if isinstance(v, str):
            if not _DECIMAL.match(v):
                raise ValueError("expected an unsigned decimal integer")
            return int(v)
        return v


class UseCodeRequest(BaseModel):
    code: str


class GenerateResponse(BaseModel):
    Result: bool


class UseCodeResponse(BaseModel):
    Result: int
