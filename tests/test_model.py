"""Tests for the Ollama model client."""

from unittest.mock import MagicMock, patch

import pytest

from repoprobe.model import DEFAULT_MODEL, ModelError, OllamaClient


def _tags(*names):
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"models": [{"name": n} for n in names]}
    return resp


class TestOllamaClient:

    def test_default_config(self):
        client = OllamaClient()
        assert client.model == DEFAULT_MODEL
        assert "11434" in client.base_url

    def test_base_url_trailing_slash(self):
        assert OllamaClient(base_url="http://gpu-box:11434/").base_url == "http://gpu-box:11434"

    @patch("httpx.Client.get")
    def test_installed_models(self, mock_get):
        mock_get.return_value = _tags("qwen2.5-coder:7b", "llama3:latest")
        assert OllamaClient().installed_models() == ["qwen2.5-coder:7b", "llama3:latest"]

    @patch("httpx.Client.get")
    def test_installed_models_unreachable(self, mock_get):
        from httpx import ConnectError

        mock_get.side_effect = ConnectError("connection refused")
        assert OllamaClient().installed_models() == []

    @patch("httpx.Client.get")
    def test_is_model_available_true(self, mock_get):
        mock_get.return_value = _tags("qwen2.5-coder:7b", "llama3:latest")
        assert OllamaClient(model="qwen2.5-coder:7b").is_model_available() is True

    @patch("httpx.Client.get")
    def test_is_model_available_untagged_name(self, mock_get):
        mock_get.return_value = _tags("llama3:latest")
        assert OllamaClient(model="llama3").is_model_available() is True

    @patch("httpx.Client.get")
    def test_is_model_available_false(self, mock_get):
        mock_get.return_value = _tags("llama3:latest")
        assert OllamaClient(model="qwen2.5-coder:7b").is_model_available() is False

    @patch("httpx.Client.get")
    def test_ensure_ready_raises(self, mock_get):
        mock_get.return_value = _tags()
        with pytest.raises(ModelError, match="ollama pull"):
            OllamaClient().ensure_ready()

    @patch("httpx.Client.post")
    def test_generate_success(self, mock_post):
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = {"response": "## Executive Summary\n\nA small CLI."}
        mock_post.return_value = mock_resp

        result = OllamaClient().generate("Analyze this repo", system="You are an analyst")
        assert "Executive Summary" in result
        payload = mock_post.call_args.kwargs["json"]
        assert payload["system"] == "You are an analyst"
        assert payload["stream"] is False

    @patch("httpx.Client.post")
    def test_generate_without_system(self, mock_post):
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = {"response": "ok"}
        mock_post.return_value = mock_resp

        OllamaClient().generate("prompt")
        assert "system" not in mock_post.call_args.kwargs["json"]

    @patch("httpx.Client.post")
    def test_generate_error(self, mock_post):
        mock_resp = MagicMock()
        mock_resp.status_code = 500
        mock_resp.text = "Internal server error"
        mock_post.return_value = mock_resp
        with pytest.raises(ModelError, match="500"):
            OllamaClient().generate("test prompt")

    @patch("httpx.Client.post")
    def test_generate_timeout(self, mock_post):
        from httpx import TimeoutException

        mock_post.side_effect = TimeoutException("timed out")
        with pytest.raises(ModelError, match="timed out"):
            OllamaClient().generate("test prompt")

    @patch("httpx.Client.post")
    def test_generate_connect_error(self, mock_post):
        from httpx import ConnectError

        mock_post.side_effect = ConnectError("refused")
        with pytest.raises(ModelError, match="Cannot connect"):
            OllamaClient().generate("test prompt")
