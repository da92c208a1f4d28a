# Agent Directory - Chroma client wrapper
# The vector store is used as a key-value directory (agent_directory) and an
# append-only message log (agent_message_log). Nothing here is semantic search.

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union
from urllib.parse import urlparse

import chromadb
import httpx

logger = logging.getLogger(__name__)

DIRECTORY_COLLECTION = "agent_directory"
MESSAGE_LOG_COLLECTION = "agent_message_log"


@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class Unavailable:
    reason: str = "Agent directory not available"


@dataclass(frozen=True)
class Error:
    message: str


DirectoryResult = Union[Ok, Unavailable, Error]


class AgentDirectory:
    """
    Thin async wrapper around a Chroma server.

    Every public call returns a DirectoryResult instead of raising:
    - Ok: the call went through
    - Unavailable: not connected (and a fresh connect failed), or the
      server could not be reached
    - Error: the server answered with a failure
    """

    def __init__(self, url: str, client: Optional[Any] = None):
        self.url = url
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None

    async def connect(self) -> bool:
        """Create the client once. Failure leaves the directory unavailable."""
        parsed = urlparse(self.url)
        ssl = parsed.scheme == "https"
        try:
            self._client = await chromadb.AsyncHttpClient(
                host=parsed.hostname or "localhost",
                port=parsed.port or (443 if ssl else 8000),
                ssl=ssl,
            )
            logger.info(f"Connected to agent directory at {self.url}")
        except Exception as e:
            self._client = None
            logger.error(f"Agent directory connection error ({self.url}): {e}")
        return self.available

    async def _call(self, operation: str, fn: Callable[[Any], Awaitable[Any]]) -> DirectoryResult:
        # Chroma may come up after the backend: one connect attempt per call
        if self._client is None and not await self.connect():
            return Unavailable()
        try:
            return Ok(await fn(self._client))
        except httpx.TransportError as e:
            logger.warning(f"Agent directory unreachable during {operation}: {e}")
            return Unavailable(f"Agent directory unreachable: {e}")
        except Exception as e:
            logger.error(f"Agent directory {operation} failed: {e}")
            return Error(str(e))

    # ========================= SERVICE =========================

    async def heartbeat(self) -> DirectoryResult:
        return await self._call("heartbeat", lambda client: client.heartbeat())

    async def count_collections(self) -> DirectoryResult:
        async def count(client):
            return len(await client.list_collections())
        return await self._call("list_collections", count)

    # ========================= DIRECTORY =========================

    async def registered_agent_ids(self) -> DirectoryResult:
        """Ok(set of agentIds) present in the directory collection."""
        async def fetch(client) -> Set[str]:
            collection = await client.get_or_create_collection(name=DIRECTORY_COLLECTION)
            results = await collection.get()
            return set(results.get("ids") or [])
        return await self._call("agent lookup", fetch)

    async def register_agent(self, agent_id: str, document: str, metadata: Dict[str, Any]) -> DirectoryResult:
        async def add(client):
            collection = await client.get_or_create_collection(name=DIRECTORY_COLLECTION)
            await collection.add(
                ids=[agent_id],
                documents=[document],
                metadatas=[_clean_metadata(metadata)],
            )
            return agent_id
        return await self._call("agent registration", add)

    # ========================= MESSAGE LOG =========================

    async def append_message(self, message_id: str, text: str, metadata: Dict[str, Any]) -> DirectoryResult:
        async def add(client):
            collection = await client.get_or_create_collection(name=MESSAGE_LOG_COLLECTION)
            await collection.add(
                ids=[message_id],
                documents=[text],
                metadatas=[_clean_metadata(metadata)],
            )
            return message_id
        return await self._call("message append", add)

    async def query_messages(self, query_text: str, limit: int) -> DirectoryResult:
        """Ok(list of {id, message, metadata}) in the order Chroma returns them."""
        async def query(client) -> List[Dict[str, Any]]:
            collection = await client.get_or_create_collection(name=MESSAGE_LOG_COLLECTION)
            results = await collection.query(query_texts=[query_text], n_results=limit)
            ids = (results.get("ids") or [[]])[0]
            documents = (results.get("documents") or [[]])[0]
            metadatas = (results.get("metadatas") or [[]])[0]
            return [
                {
                    "id": message_id,
                    "message": documents[i] if i < len(documents) else None,
                    "metadata": metadatas[i] if i < len(metadatas) else None,
                }
                for i, message_id in enumerate(ids)
            ]
        return await self._call("message query", query)


def _clean_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    # Chroma rejects None metadata values
    return {k: v for k, v in metadata.items() if v is not None}
