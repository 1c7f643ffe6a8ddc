"""Tag: topic label; `questions` counts the questions carrying it."""

from pydantic import Field

from devflow.models.document import DocumentSchema
from devflow.models.registry import models


class TagSchema(DocumentSchema):
    name: str = Field(json_schema_extra={"unique": True})
    questions: int = Field(default=0, ge=0)


Tag = models.get_or_compile("Tag", TagSchema)
