"""
Collection: a user's bookmark of a question.

One document per (author, question) pair. `questions` holds a single
question id; the plural name is kept for compatibility with stored data.
"""

from devflow.models.document import DocumentSchema, Ref
from devflow.models.registry import models


class CollectionSchema(DocumentSchema):
    author: Ref("User")
    questions: Ref("Question")


Collection = models.get_or_compile("Collection", CollectionSchema)
