"""
DevFlow Backend: Document Schema Primitives
============================================

What:  Base class for document schemas and the typed reference field.
Why:   Schemas are declared once as pydantic models; the model registry reads
       their fields (types, defaults, required-ness, uniqueness, references)
       to compile a storage table and to validate every write.
How:   `Ref("User")` is an `Annotated[UUID, Reference("User")]`. The reference
       target is recorded for documentation and column comments only: no
       foreign key is emitted and nothing checks that the target exists.

Example:
    class AnswerSchema(DocumentSchema):
        author: Ref("User")
        answer: str
        upvotes: int = Field(default=0, ge=0)
"""

import uuid
from typing import Annotated, Any, ClassVar, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Reference:
    """Marks a UUID field as pointing at another entity's `id`."""

    __slots__ = ("target",)

    def __init__(self, target: str):
        self.target = target

    def __repr__(self) -> str:
        return f"Reference({self.target!r})"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Reference) and other.target == self.target

    def __hash__(self) -> int:
        return hash(("Reference", self.target))


def Ref(target: str) -> Any:
    """Identifier type tagged with the name of the entity it refers to."""
    return Annotated[uuid.UUID, Reference(target)]


def reference_target(metadata: Any) -> Optional[str]:
    """Returns the target name if `metadata` carries a Reference marker."""
    for item in metadata or ():
        if isinstance(item, Reference):
            return item.target
    return None


class DocumentSchema(BaseModel):
    """
    Base class for every document schema.

    Class options:
        __timestamps__: add `created_at` / `updated_at` maintained by storage
        __collection__: table name override (default: lowercased name + "s")
        __unique_together__: field-name tuples that must be unique together

    Unknown keys are ignored on validation, matching a strict-schema document
    mapper that drops fields it does not declare.
    """

    __timestamps__: ClassVar[bool] = True
    __collection__: ClassVar[Optional[str]] = None
    __unique_together__: ClassVar[Tuple[Tuple[str, ...], ...]] = ()

    model_config = ConfigDict(extra="ignore")
