"""
Vertex AI REST client for LLM interactions.
"""
import json
import logging
from typing import Optional, Dict, Any, List

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS

logger = logging.getLogger("llm_client")


class VertexRestClient:
    """REST-based client for Vertex AI Gemini models."""

    def __init__(self,
                 project: str,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT):
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.base_url = f"https://{self.location}-aiplatform.googleapis.com/v1"
        self.model_resource = f"projects/{self.project}/locations/{self.location}/publishers/google/models/{self.model}"
        self._token = None
        self.timeout = timeout

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=["https://www.googleapis.com/auth/cloud-platform"],
            )
        else:
            creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _ensure_token(self):
        """Ensure we have a valid token, refreshing if needed."""
        if not self._token:
            self._refresh_token()

    def generate_chat(
        self,
        turns: List[Dict[str, str]],
        system_instruction: Optional[str] = None,
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
    ) -> str:
        """
        Generate the next model turn of a conversation.

        Args:
            turns: Ordered {"role": "user"|"model", "text": ...} entries
            system_instruction: Optional persona/instructions for the model
            temperature: Sampling temperature
            max_output_tokens: Response length cap

        Returns:
            Generated text

        Raises:
            RuntimeError: on an HTTP error from Vertex
            requests.RequestException: on network failure
        """
        self._ensure_token()
        url = f"{self.base_url}/{self.model_resource}:generateContent"

        body: Dict[str, Any] = {
            "contents": [
                {"role": turn["role"], "parts": [{"text": turn["text"]}]}
                for turn in turns
            ],
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        logger.debug(f"Sending {len(turns)} turns to {self.model}")
        resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        if resp.status_code >= 400:
            raise RuntimeError(f"Vertex REST error {resp.status_code}: {resp.text}")

        return self._parse_response_text(resp.json())

    def generate_content(self, prompt_text: str, temperature: float = 0.0,
                         max_output_tokens: int = MAX_OUTPUT_TOKENS,
                         system_instruction: Optional[str] = None) -> str:
        """Single-prompt convenience wrapper around generate_chat."""
        return self.generate_chat(
            [{"role": "user", "text": prompt_text}],
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

    def _parse_response_text(self, resp_json: Dict[str, Any]) -> str:
        """
        Parse response JSON to extract text content.
        Tries Vertex schema first, then falls back to alternatives.
        """
        # Vertex schema: candidates[0].content.parts[0].text
        cands = resp_json.get("candidates", [])
        if cands:
            content = cands[0].get("content", {})
            parts = content.get("parts", [])
            if parts and isinstance(parts, list):
                for p in parts:
                    if isinstance(p, dict) and isinstance(p.get("text"), str):
                        return p["text"]
            if isinstance(content, dict) and isinstance(content.get("text"), str):
                return content["text"]

        # Direct text fallback
        if isinstance(resp_json.get("text"), str):
            return resp_json["text"]

        # Blocked or empty responses carry no text at all
        raise ValueError(f"No text in Vertex response: {json.dumps(resp_json, separators=(',', ':'))}")
