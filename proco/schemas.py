"""
Pydantic request bodies for the Proco API.

Fields are optional at the schema level; handlers check presence themselves
so a missing field produces the API's own 400 message. Numbers sent for text
fields are stored as their string form rather than rejected.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ProjectCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: Optional[str] = None
    description: Optional[str] = None
    details: Optional[str] = None
    image: Optional[str] = None
    technologies: Optional[list[str]] = None
    published: Optional[bool] = None

    @field_validator("technologies", mode="before")
    @classmethod
    def _wrap_single_technology(cls, value: Any) -> Any:
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return [value]
        return value

    def is_complete(self) -> bool:
        return all(
            (self.title, self.description, self.details, self.image, self.technologies)
        )


class ProjectPublishUpdate(BaseModel):
    published: Optional[bool] = None


class InquiryCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    course: Optional[str] = None
    message: Optional[str] = None

    def is_complete(self) -> bool:
        return all((self.name, self.email, self.phone, self.course))


class InquiryStatusUpdate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    status: Optional[str] = None
