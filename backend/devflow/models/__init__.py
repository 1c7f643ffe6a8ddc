"""
DevFlow Backend: Document Models
=================================

Importing this package registers every model with the shared registry, which
is what Alembic and `init_models()` rely on to see all tables.
"""

from devflow.models.account import Account, AccountSchema
from devflow.models.answer import Answer, AnswerSchema
from devflow.models.collection import Collection, CollectionSchema
from devflow.models.question import Question, QuestionSchema
from devflow.models.registry import Model, ModelRegistry, models
from devflow.models.tag import Tag, TagSchema

__all__ = [
    "Account",
    "AccountSchema",
    "Answer",
    "AnswerSchema",
    "Collection",
    "CollectionSchema",
    "Model",
    "ModelRegistry",
    "Question",
    "QuestionSchema",
    "Tag",
    "TagSchema",
    "models",
]
