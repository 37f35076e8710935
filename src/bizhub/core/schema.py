"""
Schema definitions for assistant <-> completion service <-> tool messages.

These data models serve as the contract between the completion service, the orchestration loop,
the moderation gate and individual tools.  We keep them separate from runtime logic so they can be
imported anywhere without side-effects.
"""

from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Union,
)

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
)


class Speaker(str, Enum):
    """Who produced a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """A single role-tagged piece of text replayed to the completion service."""

    role: Speaker
    text: str


Conversation = List[ConversationTurn]
"""Ordered turns; order is replayed verbatim, turns are only ever appended."""


def _as_param_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ToolInvocation(BaseModel):
    """A tool call the model asked for, parsed from its JSON output."""

    tool: str = Field(..., min_length=1, description="Registered tool name")
    params: Dict[str, str] = Field(default_factory=dict, description="Tool parameters")
    user_message: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("response", "userMessage", "user_message"),
        description="Message to show the user once an action tool has run",
    )

    @field_validator("tool", mode="before")
    @classmethod
    def _stringify_tool(cls, value: Any) -> Any:
        # A non-string name still dispatches; the executor reports it as unknown.
        return value if value is None else _as_param_text(value)

    @field_validator("params", mode="before")
    @classmethod
    def _stringify_params(cls, value: Any) -> Any:
        # Models occasionally emit numbers or booleans; the tools only deal in strings.
        if isinstance(value, dict):
            return {str(k): _as_param_text(v) for k, v in value.items() if v is not None}
        return {}

    @field_validator("user_message", mode="before")
    @classmethod
    def _drop_non_text_message(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


class ActionResult(BaseModel):
    """The tool changed the page; the loop stops here."""

    kind: Literal["action"] = "action"


class DataResult(BaseModel):
    """The tool produced information the model needs to keep reasoning."""

    kind: Literal["data"] = "data"
    payload: str


ToolResult = Union[ActionResult, DataResult]


class ModerationVerdict(BaseModel):
    """Outcome of screening one business listing."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    approved: StrictBool
    reason: str


class BusinessListingDraft(BaseModel):
    """
    A listing as submitted by the business form.

    Only ``name``, ``description`` and ``category`` feed the moderation gate; everything else is
    carried through untouched to the content store.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    description: str
    category: str
