"""Ollama client used to write the optional narrative report."""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_MODEL = "qwen2.5-coder:7b"
OLLAMA_BASE_URL = "http://localhost:11434"
GENERATE_TIMEOUT = 600  # reports over a full analysis JSON are slow on CPU


class ModelError(Exception):
    """Error communicating with the model."""


class OllamaClient:
    """Minimal client for the Ollama REST API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = OLLAMA_BASE_URL,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=GENERATE_TIMEOUT)

    def installed_models(self) -> list[str]:
        """Names of locally pulled models; empty if Ollama is unreachable."""
        try:
            resp = self._client.get(f"{self.base_url}/api/tags", timeout=5)
        except (httpx.ConnectError, httpx.TimeoutException):
            return []
        if resp.status_code != 200:
            return []
        return [m.get("name", "") for m in resp.json().get("models", [])]

    def is_model_available(self) -> bool:
        return any(
            self.model == name
            or self.model == name.split(":")[0]
            or f"{self.model}:latest" == name
            for name in self.installed_models()
        )

    def ensure_ready(self) -> None:
        if not self.is_model_available():
            raise ModelError(
                f"Model {self.model} is not available at {self.base_url}. "
                f"Start Ollama and run: ollama pull {self.model}"
            )

    def generate(
        self,
        prompt: str,
        system: str = "",
        temperature: float = 0.0,
        max_tokens: int = 8192,
    ) -> str:
        """Generate text from prompt. Returns the raw response text."""
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }
        if system:
            payload["system"] = system

        try:
            resp = self._client.post(f"{self.base_url}/api/generate", json=payload)
        except httpx.TimeoutException:
            raise ModelError(f"Model generation timed out after {GENERATE_TIMEOUT}s")
        except httpx.ConnectError:
            raise ModelError("Cannot connect to Ollama. Is it running? Try: ollama serve")

        if resp.status_code != 200:
            raise ModelError(f"Ollama returned {resp.status_code}: {resp.text[:200]}")
        return resp.json().get("response", "")
