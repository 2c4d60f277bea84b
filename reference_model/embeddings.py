"""
Optional embedding vectors for artifact records.

Records are rendered to text, grouped into fixed-size batches and sent to an
OpenAI-compatible /embeddings endpoint, one blocking request per batch. The
response order is not trusted: every vector is matched back to its input
through the 'index' field the service returns.
"""

from typing import Callable, Dict, Iterable, List, Optional

import requests

from .config import (
    DEFAULT_EMBEDDING_BASE_URL,
    DEFAULT_EMBEDDING_MODEL,
    EMBEDDING_BATCH_SIZE,
    EMBEDDING_TIMEOUT,
)
from .errors import ConfigurationError, EmbeddingError


class EmbeddingClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_EMBEDDING_BASE_URL,
        model: str = DEFAULT_EMBEDDING_MODEL,
        timeout: int = EMBEDDING_TIMEOUT,
    ) -> None:
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY must be set to generate embeddings")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "EmbeddingClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.embedding_base_url,
            model=settings.embedding_model,
            timeout=settings.embedding_timeout,
        )

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Return one vector per input text, in input order."""
        if not texts:
            return []
        url = f"{self.base_url}/embeddings"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {"model": self.model, "input": texts}
        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if not response.ok:
            raise EmbeddingError(f"Embedding request failed: {_remote_message(response)}")

        try:
            body = response.json()
        except ValueError as e:
            raise EmbeddingError(f"Embedding response was not JSON: {e}") from e
        data = body.get("data") if isinstance(body, dict) else None
        if data is None:
            raise EmbeddingError("No embeddings returned in response")

        by_index: Dict[int, List[float]] = {}
        for item in data:
            index = item.get("index")
            if index is None:
                raise EmbeddingError("Embedding result is missing its index")
            by_index[index] = item.get("embedding")

        missing = [i for i in range(len(texts)) if i not in by_index]
        if missing:
            raise EmbeddingError(f"No embedding returned for inputs {missing}")
        return [by_index[i] for i in range(len(texts))]


def _remote_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"{response.status_code} {response.reason}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str) and error:
        return error
    return f"{response.status_code} {response.reason}"


def batched(items: List, size: int = EMBEDDING_BATCH_SIZE) -> Iterable[List]:
    """
    Yield consecutive slices of at most `size` items.

    Examples:
        >>> [len(b) for b in batched(list(range(23)), 10)]
        [10, 10, 3]
    """
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _render_value(value) -> str:
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


def embedding_source(record: dict) -> str:
    """
    Render a record as the text that gets embedded.

    Examples:
        >>> embedding_source({'Artifact': 'Protocol', 'Device': {'Sponsor': 'X'}})
        'Artifact: Protocol\\nDevice / Sponsor: X'
    """
    lines = []
    for key, value in record.items():
        if isinstance(value, dict):
            for leaf, leaf_value in value.items():
                lines.append(f"{key} / {leaf}: {_render_value(leaf_value)}")
        else:
            lines.append(f"{key}: {_render_value(value)}")
    return "\n".join(lines)


def attach_embeddings(
    records: List[dict],
    client: EmbeddingClient,
    batch_size: int = EMBEDDING_BATCH_SIZE,
    source: Optional[Callable[[dict], str]] = None,
) -> List[dict]:
    """
    Return copies of the records with an 'embeddings' entry added to each.

    Any failed batch raises EmbeddingError and nothing is returned.
    """
    if source is None:
        source = embedding_source

    sources = [source(r) for r in records]
    vectors: Dict[int, List[float]] = {}
    offset = 0
    for batch_no, batch in enumerate(batched(sources, batch_size), 1):
        print(f"  Embedding batch {batch_no} ({len(batch)} records)")
        for position, vector in enumerate(client.embed(batch)):
            vectors[offset + position] = vector
        offset += len(batch)

    return [
        {**record, 'embeddings': {'source': sources[idx], 'vector': vectors[idx]}}
        for idx, record in enumerate(records)
    ]
