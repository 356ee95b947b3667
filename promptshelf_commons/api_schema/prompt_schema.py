from typing import Optional
from pydantic import BaseModel, Field


# ===============================
# Data Models
# ===============================


class PromptMetadata(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None  # ie react, typescript, etc.
    tags: Optional[list[str]] = None


# prompt record owned by the hosted prompt storage service
class Prompt(BaseModel):
    id: str
    content: str
    version: int
    # equals id when the prompt has no lineage
    parent: str = ""
    branched: Optional[bool] = None
    archived: Optional[bool] = None
    created_at: int  # unix seconds
    metadata: Optional[PromptMetadata] = None

    @property
    def has_parent(self) -> bool:
        """Whether the prompt was branched or updated from another prompt.

        A self-referential parent marks a root prompt and is never followed.
        """
        return bool(self.parent) and self.parent != self.id

    @property
    def display_name(self) -> str:
        if self.metadata and self.metadata.name:
            return self.metadata.name
        return "Prompt missing name"

    @property
    def category(self) -> Optional[str]:
        return self.metadata.category if self.metadata else None

    @property
    def tags(self) -> list[str]:
        if self.metadata and self.metadata.tags:
            return self.metadata.tags
        return []


# ===============================
# Request Models
# ===============================


class PromptListParams(BaseModel):
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=20, ge=0)
    category: Optional[str] = None


class PromptRetrieveParams(BaseModel):
    metadata: bool = True


class PromptContentParams(BaseModel):
    latest: bool = False


class PromptCreateParams(BaseModel):
    content: str
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    # None for a new prompt with no lineage
    parent: Optional[str] = None
    branched: Optional[bool] = None


class PromptUpdateParams(BaseModel):
    id: str
    content: str


class PromptUpdateMetadataParams(BaseModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None

    @classmethod
    def from_prompt(cls, prompt: Prompt) -> "PromptUpdateMetadataParams":
        metadata = prompt.metadata or PromptMetadata()
        return cls(
            id=prompt.id,
            name=metadata.name,
            description=metadata.description,
            category=metadata.category,
            tags=metadata.tags,
        )
