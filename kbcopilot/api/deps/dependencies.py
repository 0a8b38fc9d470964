"""
Dependency injection container.

Lazily built singletons shared across requests, plus the factory
functions FastAPI routes depend on. Tests override the factories through
app.dependency_overrides.

Dependencies: kbcopilot.configs, kbcopilot.core, kbcopilot.boundary, kbcopilot.application
System role: DI container for service injection
"""

from kbcopilot.application.services import DocumentService
from kbcopilot.configs import Settings, get_settings
from kbcopilot.core.conversation import ConversationOrchestrator


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._token_counter = None
        self._chunker = None
        self._embedder = None
        self._vector_store = None
        self._pipeline = None
        self._chat_model = None
        self._session_store = None
        self._orchestrator = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def token_counter(self):
        """Get cached token counter for the embedding model."""
        if self._token_counter is None:
            from kbcopilot.core.tokenizer import get_token_counter

            self._token_counter = get_token_counter(self.settings.vector_store.embedding_model)
        return self._token_counter

    @property
    def chunker(self):
        """Get cached text chunker."""
        if self._chunker is None:
            from kbcopilot.core.chunker import TextChunker

            self._chunker = TextChunker(self.token_counter)
        return self._chunker

    @property
    def embedder(self):
        """Get cached embedder."""
        if self._embedder is None:
            from kbcopilot.core.embedder import OpenAIEmbedder

            vector_settings = self.settings.vector_store
            self._embedder = OpenAIEmbedder(
                model=vector_settings.embedding_model,
                dimension=vector_settings.embedding_dimension,
                timeout=vector_settings.embed_timeout,
                api_key=self.settings.llm.api_key,
            )
        return self._embedder

    @property
    def vector_store(self):
        """Get cached vector store."""
        if self._vector_store is None:
            from kbcopilot.boundary.vdb.vector_store_factory import get_vector_store

            self._vector_store = get_vector_store(self.settings)
        return self._vector_store

    @property
    def pipeline(self):
        """Get cached ingestion pipeline."""
        if self._pipeline is None:
            from kbcopilot.core.ingestion_pipeline import IngestionPipeline

            self._pipeline = IngestionPipeline(
                token_counter=self.token_counter,
                chunker=self.chunker,
                embedder=self.embedder,
                vector_store=self.vector_store,
                max_tokens=self.settings.ingestion.max_tokens,
                overlap_tokens=self.settings.ingestion.overlap_tokens,
            )
        return self._pipeline

    @property
    def chat_model(self):
        """Get cached streaming chat model."""
        if self._chat_model is None:
            from langchain_openai import ChatOpenAI

            llm_settings = self.settings.llm
            self._chat_model = ChatOpenAI(
                model=llm_settings.chat_model,
                temperature=llm_settings.temperature,
                api_key=llm_settings.api_key,
                timeout=llm_settings.request_timeout,
                max_retries=0,
                streaming=True,
            )
        return self._chat_model

    @property
    def session_store(self):
        """Get cached session store."""
        if self._session_store is None:
            from kbcopilot.core.conversation import SYSTEM_PROMPT, InMemorySessionStore, TtlLruEvictionPolicy

            session_settings = self.settings.sessions
            self._session_store = InMemorySessionStore(
                system_prompt=SYSTEM_PROMPT,
                eviction_policy=TtlLruEvictionPolicy(
                    ttl_seconds=session_settings.ttl_seconds,
                    max_sessions=session_settings.max_sessions,
                ),
            )
        return self._session_store

    @property
    def orchestrator(self) -> ConversationOrchestrator:
        """Get cached conversation orchestrator."""
        if self._orchestrator is None:
            self._orchestrator = ConversationOrchestrator(
                chat_model=self.chat_model,
                embedder=self.embedder,
                vector_store=self.vector_store,
                session_store=self.session_store,
                default_limit=self.settings.vector_store.default_limit,
                max_limit=self.settings.vector_store.max_limit,
                stream_idle_timeout=self.settings.llm.stream_idle_timeout,
            )
        return self._orchestrator

    async def close(self) -> None:
        """Release the vector store and clear all cached instances."""
        if self._vector_store is not None:
            await self._vector_store.close()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._token_counter = None
        self._chunker = None
        self._embedder = None
        self._vector_store = None
        self._pipeline = None
        self._chat_model = None
        self._session_store = None
        self._orchestrator = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_vector_store():
    """
    Get the shared vector store.

    Returns:
        VectorStore: Store selected by VECTOR_STORE_STORE_TYPE
    """
    return get_service_cache().vector_store


def get_document_service() -> DocumentService:
    """
    Get document service instance.

    Returns:
        DocumentService: Document service bound to the shared pipeline and store
    """
    cache = get_service_cache()
    return DocumentService(pipeline=cache.pipeline, vector_store=cache.vector_store)


def get_orchestrator() -> ConversationOrchestrator:
    """
    Get the shared conversation orchestrator.

    Returns:
        ConversationOrchestrator: Orchestrator owning the process-wide session store
    """
    return get_service_cache().orchestrator
