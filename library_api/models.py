from datetime import date

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Book(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    isbn: str = ""
    title: str = ""
    author: str = ""
    short_description: str = ""
    page_count: int = 0
    release_date: date | None = None


class ValidationFailure(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    property_name: str
    error_message: str
