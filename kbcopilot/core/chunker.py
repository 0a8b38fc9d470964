"""
Token-bounded text chunking.

Splits long text into overlapping spans. RecursiveCharacterTextSplitter
with a token length function cuts the text into contiguous bodies; break
points are tried in order: paragraph, line, sentence, word, then a hard
character cut. Each body after the first is then prefixed with the
trailing ``overlap_tokens`` of the previous body, taken verbatim from the
source text and starting on a word boundary where one exists.

Dependencies: langchain_text_splitters, kbcopilot.core.tokenizer
System role: Chunking stage of document ingestion
"""

import logging
import re

from langchain_text_splitters import RecursiveCharacterTextSplitter, TokenTextSplitter

from kbcopilot.core.exceptions import ValidationError
from kbcopilot.core.tokenizer import TokenCounter

logger = logging.getLogger(__name__)

SEPARATORS = ["\n\n", "\n", ". ", "? ", "! ", " ", ""]

_WORD_START = re.compile(r"(?<=\s)\S")


class TextChunker:
    """Split text into spans of at most ``max_tokens`` tokens."""

    def __init__(self, token_counter: TokenCounter) -> None:
        """
        Initialize chunker.

        Args:
            token_counter: Counter sharing the embedding model's tokenizer
        """
        self._counter = token_counter

    def split(self, text: str, max_tokens: int, overlap_tokens: int) -> list[str]:
        """
        Split text into ordered, overlapping spans.

        Text already within budget is returned whole and unmodified. When
        more than one span is produced, each adjacent pair shares at least
        ``overlap_tokens`` tokens of content (or the whole earlier body when
        it is shorter than that).

        Args:
            text: Text to split
            max_tokens: Token budget per span
            overlap_tokens: Tokens of context carried between adjacent spans

        Returns:
            list[str]: Ordered non-empty spans (at least one for non-empty input)

        Raises:
            ValidationError: When the budget or overlap is out of range
        """
        self._validate(max_tokens, overlap_tokens)

        if self._counter.count(text) <= max_tokens:
            return [text]

        body_budget = max_tokens - overlap_tokens
        splitter = RecursiveCharacterTextSplitter(
            chunk_size=body_budget,
            chunk_overlap=0,
            length_function=self._counter.count,
            separators=SEPARATORS,
            keep_separator="end",
            strip_whitespace=True,
        )
        bodies = [body for body in splitter.split_text(text) if body.strip()]
        bodies = self._enforce_budget(bodies, body_budget)
        if not bodies:
            # Whitespace-only input
            return [text]

        spans = self._add_overlap(text, bodies, max_tokens, overlap_tokens)
        logger.debug(
            "Split text into spans",
            extra={"span_count": len(spans), "max_tokens": max_tokens, "overlap_tokens": overlap_tokens},
        )
        return spans

    def _enforce_budget(self, bodies: list[str], budget: int) -> list[str]:
        """Re-split any body whose joined pieces tokenized over budget."""
        result: list[str] = []
        hard_splitter: TokenTextSplitter | None = None
        for body in bodies:
            if self._counter.count(body) <= budget:
                result.append(body)
                continue
            if hard_splitter is None:
                hard_splitter = TokenTextSplitter(
                    model_name=self._counter.model_name,
                    chunk_size=budget,
                    chunk_overlap=0,
                    disallowed_special=(),
                )
            result.extend(piece for piece in hard_splitter.split_text(body) if piece.strip())
        return result

    def _add_overlap(
        self,
        text: str,
        bodies: list[str],
        max_tokens: int,
        overlap_tokens: int,
    ) -> list[str]:
        """Prefix every body after the first with the tail of the one before it."""
        spans: list[str] = []
        cursor = 0
        previous: tuple[int, str] | None = None
        for body in bodies:
            start = text.find(body, cursor)
            if start < 0:
                # Not a verbatim substring; keep it without context
                spans.append(body)
                previous = None
                continue
            end = start + len(body)
            cursor = end

            span = body
            if previous is not None and overlap_tokens > 0:
                previous_start, previous_body = previous
                limit = max_tokens - self._counter.count(body)
                while limit > 0:
                    tail_start = self._tail_start(previous_body, overlap_tokens, limit)
                    if tail_start is None:
                        break
                    candidate = text[previous_start + tail_start:end]
                    excess = self._counter.count(candidate) - max_tokens
                    if excess <= 0:
                        span = candidate
                        break
                    # Tokens merged differently across the join
                    limit -= excess
            spans.append(span)
            previous = (start, body)
        return spans

    def _tail_start(self, body: str, overlap_tokens: int, limit: int) -> int | None:
        """
        Find where the overlap tail of ``body`` starts.

        Returns the latest offset whose suffix holds at least
        ``overlap_tokens`` tokens and at most ``limit``, preferring word
        starts; None when no such offset exists.
        """
        if self._counter.count(body) <= overlap_tokens:
            return 0 if self._counter.count(body) <= limit else None

        for match in reversed(list(_WORD_START.finditer(body))):
            tokens = self._counter.count(body[match.start():])
            if tokens >= overlap_tokens:
                if tokens <= limit:
                    return match.start()
                break

        # No usable word start: cut between characters
        low, high = 0, len(body) - 1
        best = None
        while low <= high:
            middle = (low + high) // 2
            if self._counter.count(body[middle:]) >= overlap_tokens:
                best = middle
                low = middle + 1
            else:
                high = middle - 1
        if best is not None and self._counter.count(body[best:]) <= limit:
            return best
        return None

    @staticmethod
    def _validate(max_tokens: int, overlap_tokens: int) -> None:
        if max_tokens < 1:
            raise ValidationError("max_tokens must be at least 1", field="max_tokens")
        if overlap_tokens < 0:
            raise ValidationError("overlap_tokens cannot be negative", field="overlap_tokens")
        if overlap_tokens >= max_tokens:
            raise ValidationError(
                "overlap_tokens must be smaller than max_tokens",
                field="overlap_tokens",
                details={"max_tokens": max_tokens, "overlap_tokens": overlap_tokens},
            )
