"""Question: the root document of a thread."""

from typing import List

from pydantic import Field

from devflow.models.document import DocumentSchema, Ref
from devflow.models.registry import models


class QuestionSchema(DocumentSchema):
    title: str
    content: str
    author: Ref("User")
    answers: int = Field(default=0, ge=0, description="Number of answers posted")
    tags: List[Ref("Tag")] = Field(default_factory=list)
    views: int = Field(default=0, ge=0)
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)


Question = models.get_or_compile("Question", QuestionSchema)
