"""Answer: a reply posted by a user to a question."""

from pydantic import Field

from devflow.models.document import DocumentSchema, Ref
from devflow.models.registry import models


class AnswerSchema(DocumentSchema):
    author: Ref("User")
    question: Ref("Question")
    answer: str
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)


Answer = models.get_or_compile("Answer", AnswerSchema)
