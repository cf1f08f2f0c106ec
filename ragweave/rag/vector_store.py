"""Chroma HTTP vector store client."""

from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote
from uuid import uuid4

import aiohttp

from ..config.settings import Settings
from ..core.exceptions import UpstreamQueryError, ValidationError, VectorStoreError
from ..core.http import HttpBackend
from ..models.rag import Chunk, CollectionRecord, RetrievedMatch
from ..utils.text_utils import flatten_metadata, slugify


class ChromaVectorStore(HttpBackend):
    """Stores and queries chunks through the Chroma v2 REST API.

    Every path is scoped under the configured tenant/database pair.
    Collections are addressed by name for upsert/query and by id for delete.
    """

    error_class = VectorStoreError

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(settings, session)
        self.base_url = settings.chroma_database_url

    def _collection_url(self, collection: str, action: Optional[str] = None) -> str:
        url = f"{self.base_url}/collections/{quote(collection, safe='')}"
        return f"{url}/{action}" if action else url

    async def list_collections(self) -> List[CollectionRecord]:
        """List all collections of the tenant/database."""
        data = await self._request_json("GET", f"{self.base_url}/collections")

        if not isinstance(data, list):
            raise VectorStoreError("Collection listing is not a list")

        return [CollectionRecord(id=str(item["id"]), name=str(item["name"])) for item in data]

    async def create_collection(self, name: str) -> CollectionRecord:
        """Create a collection; the name is slugified first."""
        collection_name = slugify(name)

        data = await self._request_json(
            "POST", f"{self.base_url}/collections", payload={"name": collection_name}
        )

        self.logger.info("Collection created", collection=collection_name)
        return CollectionRecord(id=str(data["id"]), name=str(data["name"]))

    async def delete_collection(self, collection_id: str) -> None:
        """Delete a collection by id."""
        await self._request_json(
            "DELETE", self._collection_url(collection_id), expect_body=False
        )
        self.logger.info("Collection deleted", collection_id=collection_id)

    async def upsert(
        self,
        collection: str,
        chunks: Sequence[Chunk],
        embeddings: Sequence[List[float]],
    ) -> List[str]:
        """Upsert chunks paired 1:1 with their embeddings; returns the new ids."""
        if len(chunks) != len(embeddings):
            raise ValidationError(
                f"Got {len(chunks)} chunks but {len(embeddings)} embeddings", "embeddings"
            )
        if not chunks:
            return []

        ids = [str(uuid4()) for _ in chunks]
        payload = {
            "ids": ids,
            "documents": [chunk.page_content for chunk in chunks],
            "embeddings": [list(vector) for vector in embeddings],
            "metadatas": [flatten_metadata(chunk.metadata) or None for chunk in chunks],
        }

        await self._request_json(
            "POST", self._collection_url(collection, "upsert"), payload=payload, expect_body=False
        )

        self.logger.info("Chunks upserted", collection=collection, count=len(ids))
        return ids

    async def query(self, collection: str, vector: List[float], k: int) -> List[RetrievedMatch]:
        """Return up to ``k`` nearest matches in the store's ranking order."""
        if k < 1:
            raise ValidationError("k must be at least 1", "k")

        def make_error(message: str, status: Optional[int] = None, body: Optional[str] = None):
            return UpstreamQueryError(collection, message, status=status, body=body)

        data = await self._request_json(
            "POST",
            self._collection_url(collection, "query"),
            payload={"query_embeddings": [list(vector)], "n_results": k},
            error_factory=make_error,
        )

        try:
            matches = self._parse_query_result(data, collection)
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamQueryError(collection, f"Malformed query result: {e}")

        self.logger.debug(
            "Collection queried",
            collection=collection,
            requested=k,
            found=len(matches),
            ids=[match.id for match in matches],
        )
        return matches

    @staticmethod
    def _parse_query_result(data: Dict[str, Any], collection: str) -> List[RetrievedMatch]:
        # Results are per query embedding; a single embedding was sent
        ids = data["ids"][0] if data.get("ids") else []
        documents = (data.get("documents") or [[]])[0] or []
        metadatas = (data.get("metadatas") or [[]])[0] or []
        distances = (data.get("distances") or [[]])[0] or []

        matches = []
        for index, match_id in enumerate(ids):
            matches.append(
                RetrievedMatch(
                    id=str(match_id),
                    page_content=documents[index] if index < len(documents) and documents[index] else "",
                    metadata=(metadatas[index] if index < len(metadatas) else None) or {},
                    score=distances[index] if index < len(distances) else None,
                    collection=collection,
                )
            )
        return matches
