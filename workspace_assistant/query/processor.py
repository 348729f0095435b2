"""Query processing pipeline for workspace chat questions."""

import asyncio
import logging
import time

from workspace_assistant.llm.base import LLMProvider
from workspace_assistant.store.metadata import MetadataStore
from workspace_assistant.store.search import MessageSearch
from .aggregator import aggregate
from .classifier import QueryClassifier
from .enricher import MetadataEnricher, deduplicate
from .filters import FilterBuilder, result_cap
from .formatter import ContextFormatter
from .instructions import compose_instructions, requirement_lines
from .models import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    MessageContext,
    QueryAnalysis,
    RetrievalFilter,
)
from .retriever import Retriever

logger = logging.getLogger(__name__)

PROCESSING_ERROR = "Failed to process message"


class QueryProcessor:
    """Answers questions about a workspace from its indexed messages.

    Count and statistics questions are answered from retrieved messages
    directly and never reach the generation provider. Every other question
    is answered by the generation provider with the retrieved messages in
    its system prompt.
    """

    def __init__(
        self,
        embedding_provider: LLMProvider,
        llm_provider: LLMProvider,
        search: MessageSearch,
        metadata_store: MetadataStore,
        classifier: QueryClassifier | None = None,
        filter_builder: FilterBuilder | None = None,
        formatter: ContextFormatter | None = None,
        generation_timeout: float = 60.0,
    ):
        """Initialize query processor.

        Args:
            embedding_provider: Provider used to embed queries
            llm_provider: Provider used to generate narrative answers
            search: Similarity-search provider over indexed messages
            metadata_store: Channel and user metadata lookups
            classifier: Query classifier
            filter_builder: Builds retrieval filters from analyses
            formatter: Renders messages and aggregate results
            generation_timeout: Seconds to wait for the generation provider
        """
        self.llm_provider = llm_provider
        self.search = search
        self.metadata_store = metadata_store
        self.classifier = classifier or QueryClassifier()
        self.filter_builder = filter_builder or FilterBuilder()
        self.formatter = formatter or ContextFormatter()
        self.retriever = Retriever(embedding_provider, search)
        self.enricher = MetadataEnricher(metadata_store)
        self.generation_timeout = generation_timeout

    async def process_message(self, request: ChatRequest) -> ChatResponse | ErrorResponse:
        """Run one question through the pipeline.

        Args:
            request: Incoming chat request

        Returns:
            ChatResponse on success, ErrorResponse if generation failed
        """
        start_time = time.time()
        current_username = request.user.username if request.user else None

        analysis = self.classifier.analyze(request.message, current_username)
        logger.info(f"Classified query as {analysis.type.value}: {analysis.entities.to_dict()}")

        search_filter = self.filter_builder.build(
            analysis, request.workspace_id, request.channel_name
        )
        cap = result_cap(analysis.type)

        hits = await self.retriever.retrieve(request.message, analysis, search_filter, cap)
        contexts = await self.enricher.enrich(hits, request.workspace_id)
        logger.info(f"{len(contexts)} of {len(hits)} hits survived enrichment")

        if analysis.is_aggregate:
            response = self._answer_aggregate(contexts, analysis, search_filter, cap)
        else:
            response = await self._answer_narrative(request, contexts, analysis, search_filter)

        logger.info(f"Processed {analysis.type.value} query in {time.time() - start_time:.2f}s")
        return response

    def _answer_aggregate(
        self,
        contexts: list[MessageContext],
        analysis: QueryAnalysis,
        search_filter: RetrievalFilter,
        cap: int,
    ) -> ChatResponse:
        result = aggregate(contexts, analysis)
        message = self.formatter.format_aggregate(result, analysis, search_filter, cap)
        logger.info(f"Answered aggregate query directly: {result.to_dict()}")
        return ChatResponse(
            message=message,
            metadata={
                "queryType": analysis.type.value,
                "aggregatedResult": result.to_dict(),
                "analysis": analysis.to_dict(),
            },
        )

    def build_system_prompt(
        self,
        analysis: QueryAnalysis,
        search_filter: RetrievalFilter,
        message_block: str,
    ) -> str:
        """Compose the generation system prompt.

        Args:
            analysis: Classified query
            search_filter: Filter the messages were retrieved with
            message_block: Formatted messages

        Returns:
            System prompt text
        """
        parts = [compose_instructions(analysis.type)]
        parts.extend(requirement_lines(analysis.context_requirements))

        if search_filter.channel_name:
            parts.append(
                f"You are currently focusing on messages from the #{search_filter.channel_name} channel."
            )
        if search_filter.username:
            parts.append(f"You are currently focusing on messages from user @{search_filter.username}.")

        parts.append(f"Workspace ID: {search_filter.workspace_id}")
        parts.append(f"RELEVANT MESSAGES:\n{message_block}")
        return "\n\n".join(parts)

    async def _answer_narrative(
        self,
        request: ChatRequest,
        contexts: list[MessageContext],
        analysis: QueryAnalysis,
        search_filter: RetrievalFilter,
    ) -> ChatResponse | ErrorResponse:
        unique = deduplicate(contexts)
        if len(unique) < len(contexts):
            logger.debug(f"Collapsed {len(contexts) - len(unique)} duplicate messages")
        message_block = self.formatter.format_messages(unique)
        system_prompt = self.build_system_prompt(analysis, search_filter, message_block)

        try:
            result = await asyncio.wait_for(
                self.llm_provider.generate_response(
                    prompt=request.message, system_prompt=system_prompt
                ),
                timeout=self.generation_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Response generation timed out after {self.generation_timeout}s")
            return ErrorResponse(
                error=PROCESSING_ERROR,
                details=f"Response generation timed out after {self.generation_timeout} seconds",
            )
        except Exception as e:
            logger.error(f"Response generation failed: {e}", exc_info=True)
            return ErrorResponse(error=PROCESSING_ERROR, details=str(e))

        if not result.success:
            logger.error(f"Failed to generate response: {result.error}")
            return ErrorResponse(error=PROCESSING_ERROR, details=result.error)

        return ChatResponse(
            message=result.content,
            metadata={
                "queryType": analysis.type.value,
                "messageCount": len(unique),
                "analysis": analysis.to_dict(),
            },
        )

    async def health_check(self) -> dict[str, bool]:
        """Check health of the providers the pipeline depends on.

        Returns:
            Health status dictionary
        """
        health = {
            "llm_provider": await self.llm_provider.health_check(),
            "embedding_provider": await self.retriever.embedding_provider.health_check(),
            "message_search": await self.search.health_check(),
            "metadata_store": await self.metadata_store.health_check(),
        }
        health["overall"] = all(health.values())
        return health
