"""Tests for batching, request correlation and error reporting of embeddings."""

from unittest.mock import MagicMock, patch

import pytest

from reference_model.embeddings import (
    EmbeddingClient,
    attach_embeddings,
    batched,
    embedding_source,
)
from reference_model.errors import ConfigurationError, EmbeddingError


def make_response(status=200, body=None, reason="OK"):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.reason = reason
    response.json.return_value = body
    return response


def reversed_embeddings(url, json, headers, timeout):
    """Fake service: vector is [len(text)], returned in reverse order."""
    data = [
        {"object": "embedding", "index": i, "embedding": [float(len(text))]}
        for i, text in enumerate(json["input"])
    ]
    return make_response(body={"data": list(reversed(data))})


class TestBatched:
    def test_fixed_size_batches(self):
        assert [len(b) for b in batched(list(range(23)), 10)] == [10, 10, 3]

    def test_exact_multiple(self):
        assert [len(b) for b in batched(list(range(20)), 10)] == [10, 10]

    def test_empty(self):
        assert list(batched([], 10)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(batched([1], 0))


class TestEmbeddingSource:
    def test_renders_sections_and_lists(self):
        record = {
            "Artifact name": "Protocol",
            "TMF Artifacts": {"Sponsor Document": "X"},
            "Sub-artifacts": ["Plan", "Index"],
        }
        assert embedding_source(record) == (
            "Artifact name: Protocol\n"
            "TMF Artifacts / Sponsor Document: X\n"
            "Sub-artifacts: Plan; Index"
        )


class TestEmbeddingClient:
    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            EmbeddingClient(api_key=None)

    @patch("reference_model.embeddings.requests.post", side_effect=reversed_embeddings)
    def test_results_correlated_by_index(self, mock_post):
        client = EmbeddingClient(api_key="sk-test", base_url="http://embed.local/v1/")
        vectors = client.embed(["a", "bbb", "cc"])
        assert vectors == [[1.0], [3.0], [2.0]]

        args, kwargs = mock_post.call_args
        assert args[0] == "http://embed.local/v1/embeddings"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["json"]["input"] == ["a", "bbb", "cc"]

    @patch("reference_model.embeddings.requests.post")
    def test_remote_error_message(self, mock_post):
        mock_post.return_value = make_response(
            status=429,
            reason="Too Many Requests",
            body={"error": {"message": "Rate limit reached for requests"}},
        )
        client = EmbeddingClient(api_key="sk-test")
        with pytest.raises(EmbeddingError, match="Rate limit reached for requests"):
            client.embed(["text"])

    @patch("reference_model.embeddings.requests.post")
    def test_error_without_json_body(self, mock_post):
        response = make_response(status=502, reason="Bad Gateway")
        response.json.side_effect = ValueError("no json")
        mock_post.return_value = response
        client = EmbeddingClient(api_key="sk-test")
        with pytest.raises(EmbeddingError, match="502 Bad Gateway"):
            client.embed(["text"])

    @patch("reference_model.embeddings.requests.post")
    def test_missing_index_raises(self, mock_post):
        mock_post.return_value = make_response(body={"data": [{"embedding": [0.1]}]})
        client = EmbeddingClient(api_key="sk-test")
        with pytest.raises(EmbeddingError):
            client.embed(["text"])

    @patch("reference_model.embeddings.requests.post")
    def test_missing_result_raises(self, mock_post):
        mock_post.return_value = make_response(body={"data": [{"index": 0, "embedding": [0.1]}]})
        client = EmbeddingClient(api_key="sk-test")
        with pytest.raises(EmbeddingError):
            client.embed(["one", "two"])

    @patch("reference_model.embeddings.requests.post")
    def test_empty_input_skips_request(self, mock_post):
        assert EmbeddingClient(api_key="sk-test").embed([]) == []
        mock_post.assert_not_called()


class TestAttachEmbeddings:
    @patch("reference_model.embeddings.requests.post", side_effect=reversed_embeddings)
    def test_batches_and_positions(self, mock_post):
        records = [{"Artifact name": "x" * (i + 1)} for i in range(23)]
        client = EmbeddingClient(api_key="sk-test")

        result = attach_embeddings(records, client, batch_size=10)

        assert mock_post.call_count == 3
        sizes = [len(call.kwargs["json"]["input"]) for call in mock_post.call_args_list]
        assert sizes == [10, 10, 3]
        for i, record in enumerate(result):
            source = f"Artifact name: {'x' * (i + 1)}"
            assert record["embeddings"] == {"source": source, "vector": [float(len(source))]}
            assert record["Artifact name"] == records[i]["Artifact name"]

        # Input records are left untouched
        assert "embeddings" not in records[0]

    def test_failed_batch_aborts(self):
        client = MagicMock()
        client.embed.side_effect = [[[0.0]] * 10, EmbeddingError("boom")]
        records = [{"A": str(i)} for i in range(15)]
        with pytest.raises(EmbeddingError, match="boom"):
            attach_embeddings(records, client, batch_size=10)
