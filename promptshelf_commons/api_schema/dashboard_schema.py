from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Categories offered by the create prompt form
PROMPT_CATEGORIES = (
    "typescript",
    "next.js",
    "python",
    "sql",
    "go",
    "ai",
    "rust",
    "java",
    "kotlin",
    "c#",
    "c++",
    "c",
    "php",
    "other",
)

MAX_PROMPT_TAGS = 3


# ===============================
# Data Models
# ===============================


# placeholder api key kept in the browser profile, not a real credential
class ApiKey(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    key: str
    created_at: str = Field(
        alias="createdAt",
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )


# ===============================
# Form Models
# ===============================


class CreatePromptForm(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    content: str = ""
    tags: list[str] = []


class EditPromptForm(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = []


class GenerateApiKeyForm(BaseModel):
    name: str = ""


# ===============================
# Response Models
# ===============================


class ErrorResponse(BaseModel):
    error: str


class CreatePromptResponse(BaseModel):
    success: bool
    prompt_id: Optional[str] = None
    errors: dict[str, list[str]] = {}


class GenerateApiKeyResponse(BaseModel):
    success: bool
    api_key: Optional[ApiKey] = None
    msg: Optional[str] = None
