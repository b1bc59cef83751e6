#!/usr/bin/env python3
"""
Base Pydantic schemas for common validation patterns
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire, which is what
    existing callers of the relay send and expect.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True
    )


class ErrorResponse(BaseSchema):
    """Error body returned by every JSON endpoint"""
    error: str
