"""
Knowledge-base search tool.

Declares the single tool offered to the chat model, accumulates the tool
call fragments a stream delivers, and parses and serializes the call's
arguments and results.

Dependencies: pydantic, langchain_core
System role: Tool-call plumbing for the conversation orchestrator
"""

import json
from dataclasses import dataclass, field

import pydantic
from langchain_core.messages import AIMessageChunk

from kbcopilot.boundary.vdb.vector_schemas import VectorSearchResult
from kbcopilot.core.exceptions import ValidationError

SEARCH_TOOL_NAME = "search_knowledge_base"
DEFAULT_SEARCH_LIMIT = 5

SEARCH_KNOWLEDGE_BASE_TOOL = {
    "type": "function",
    "function": {
        "name": SEARCH_TOOL_NAME,
        "description": "Search the article knowledge base for relevant documents",
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string"},
                "limit": {"type": "integer", "default": DEFAULT_SEARCH_LIMIT},
            },
            "required": ["query"],
        },
    },
}


class SearchKnowledgeBaseArgs(pydantic.BaseModel):
    """Arguments of a search_knowledge_base call."""

    query: str = pydantic.Field(min_length=1)
    limit: int = pydantic.Field(default=DEFAULT_SEARCH_LIMIT, ge=1)

    @pydantic.field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


@dataclass
class PendingToolCall:
    """Tool call assembled from stream fragments."""

    name: str = ""
    arguments: str = ""
    id: str | None = None


@dataclass
class ToolCallAccumulator:
    """
    Collect tool-call fragments across an entire stream.

    Fragments are grouped by their tool-call index; a name fragment sets the
    name, argument fragments are concatenated in arrival order.
    """

    calls: dict[int, PendingToolCall] = field(default_factory=dict)

    def add(self, chunk: AIMessageChunk) -> None:
        for fragment in chunk.tool_call_chunks or []:
            index = fragment.get("index")
            call = self.calls.setdefault(index if index is not None else 0, PendingToolCall())
            if fragment.get("name"):
                call.name = fragment["name"]
            if fragment.get("args"):
                call.arguments += fragment["args"]
            if fragment.get("id"):
                call.id = fragment["id"]

    def find(self, name: str) -> PendingToolCall | None:
        """Return the first accumulated call with the given name."""
        for index in sorted(self.calls):
            if self.calls[index].name == name:
                return self.calls[index]
        return None


def parse_search_arguments(
    raw_arguments: str,
    default_limit: int = DEFAULT_SEARCH_LIMIT,
) -> SearchKnowledgeBaseArgs:
    """
    Parse a search_knowledge_base argument payload.

    Args:
        raw_arguments: Concatenated JSON argument string from the stream
        default_limit: Limit used when the payload omits one

    Returns:
        SearchKnowledgeBaseArgs: Validated arguments

    Raises:
        ValidationError: When the payload is not a JSON object with a non-empty query
    """
    try:
        payload = json.loads(raw_arguments or "{}")
    except json.JSONDecodeError as e:
        raise ValidationError(
            "Tool arguments are not valid JSON",
            field="arguments",
            details={"raw_arguments": raw_arguments[:200]},
        ) from e

    if not isinstance(payload, dict):
        raise ValidationError("Tool arguments must be a JSON object", field="arguments")

    if payload.get("limit") is None:
        payload["limit"] = default_limit

    try:
        return SearchKnowledgeBaseArgs.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Tool arguments failed validation",
            field="arguments",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def serialize_results(results: list[VectorSearchResult]) -> str:
    """Serialize retrieval results as the tool-result turn content."""
    return json.dumps([result.to_tool_payload() for result in results], ensure_ascii=False)
