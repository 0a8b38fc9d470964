"""Tests for knowledge-base search tool plumbing.

Dependencies: pytest, langchain_core
System role: Tool schema, fragment accumulation and argument parsing verification
"""

import json

import pytest
from langchain_core.messages import AIMessageChunk
from langchain_core.messages.tool import tool_call_chunk

from kbcopilot.boundary.vdb.vector_schemas import VectorSearchResult
from kbcopilot.core.conversation.tool import (
    SEARCH_KNOWLEDGE_BASE_TOOL,
    ToolCallAccumulator,
    parse_search_arguments,
    serialize_results,
)
from kbcopilot.core.exceptions import ValidationError


def _fragment(index: int, name: str | None = None, args: str | None = None, id: str | None = None):
    return AIMessageChunk(content="", tool_call_chunks=[tool_call_chunk(name=name, args=args, id=id, index=index)])


class TestToolSchema:
    def test_schema_declares_query_required_and_limit_default(self) -> None:
        function = SEARCH_KNOWLEDGE_BASE_TOOL["function"]
        assert function["name"] == "search_knowledge_base"
        assert function["parameters"]["required"] == ["query"]
        assert function["parameters"]["properties"]["limit"]["default"] == 5


class TestToolCallAccumulator:
    """Test fragment accumulation across a stream."""

    def test_arguments_concatenated_in_arrival_order(self) -> None:
        accumulator = ToolCallAccumulator()
        accumulator.add(_fragment(0, name="search_knowledge_base", id="call_9"))
        accumulator.add(_fragment(0, args='{"query": "res'))
        accumulator.add(_fragment(0, args='et password", "limit": 3}'))

        call = accumulator.find("search_knowledge_base")
        assert call is not None
        assert call.id == "call_9"
        assert json.loads(call.arguments) == {"query": "reset password", "limit": 3}

    def test_fragments_grouped_by_index(self) -> None:
        accumulator = ToolCallAccumulator()
        accumulator.add(_fragment(0, name="other_tool", args="{}"))
        accumulator.add(_fragment(1, name="search_knowledge_base", args='{"query": "x"}'))

        assert accumulator.find("search_knowledge_base").arguments == '{"query": "x"}'
        assert len(accumulator.calls) == 2

    def test_content_only_chunks_ignored(self) -> None:
        accumulator = ToolCallAccumulator()
        accumulator.add(AIMessageChunk(content="hello"))

        assert accumulator.calls == {}
        assert accumulator.find("search_knowledge_base") is None


class TestParseSearchArguments:
    """Test parse_search_arguments()."""

    def test_valid_arguments(self) -> None:
        args = parse_search_arguments('{"query": "reset password", "limit": 3}')
        assert args.query == "reset password"
        assert args.limit == 3

    def test_missing_limit_uses_default(self) -> None:
        assert parse_search_arguments('{"query": "billing"}', default_limit=7).limit == 7

    @pytest.mark.parametrize(
        "raw",
        [
            '{"query": "unterminated',
            "[1, 2]",
            '{"limit": 3}',
            '{"query": "   "}',
            '{"query": "x", "limit": 0}',
            "",
        ],
    )
    def test_malformed_arguments_rejected(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            parse_search_arguments(raw)


def test_serialize_results_omits_embeddings() -> None:
    result = VectorSearchResult(
        id=4, document_id="doc", chunk_index=2, text="chunk", embedding=[0.1, 0.2], distance=0.25
    )

    payload = json.loads(serialize_results([result]))

    assert payload == [{"id": 4, "document_id": "doc", "chunk_index": 2, "text": "chunk", "distance": 0.25}]
