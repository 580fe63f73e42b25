from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, as the web client speaks them."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
