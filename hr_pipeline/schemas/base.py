"""
Base Pydantic schemas shared by backend payloads.

The remote backend speaks camelCase; these templates let the rest of the
code use snake_case attribute names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BackendModel(BaseModel):
    """
    Base schema for data exchanged with the remote backend.
    
    Accepts either the camelCase alias or the Python field name.
    """
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PassthroughModel(BackendModel):
    """Backend schema that keeps fields it does not declare."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )
