"""
Hume AI batch REST client for emotion recognition.
"""
import base64
import time
import logging
from typing import Optional, Dict, Any, List

import requests

from ...config import HUME_BASE_URL, HUME_POLL_ATTEMPTS, HUME_POLL_INTERVAL, HUME_TIMEOUT
from ...coaching.models import EmotionSample, now_ms

logger = logging.getLogger("hume_client")


class HumeBatchClient:
    """Submits audio or image clips as batch jobs and polls for the predictions."""

    def __init__(self,
                 api_key: str,
                 base_url: str = HUME_BASE_URL,
                 poll_attempts: int = HUME_POLL_ATTEMPTS,
                 poll_interval: float = HUME_POLL_INTERVAL,
                 timeout: int = HUME_TIMEOUT,
                 http: Optional[requests.Session] = None,
                 sleep=time.sleep):
        if not api_key:
            raise ValueError("Hume API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_attempts = poll_attempts
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.http = http or requests.Session()
        self.sleep = sleep

    @property
    def _headers(self) -> Dict[str, str]:
        return {"X-Hume-Api-Key": self.api_key}

    def analyze_audio(self, wav_bytes: bytes) -> List[EmotionSample]:
        """Prosody emotions for a WAV clip."""
        encoded = base64.b64encode(wav_bytes).decode("ascii")
        job_id = self._submit({"prosody": {}}, f"data:audio/wav;base64,{encoded}")
        return self.parse_predictions(self._poll(job_id))

    def analyze_image(self, jpeg_bytes: bytes) -> List[EmotionSample]:
        """Facial expression emotions for a JPEG frame."""
        encoded = base64.b64encode(jpeg_bytes).decode("ascii")
        job_id = self._submit({"face": {}}, f"data:image/jpeg;base64,{encoded}")
        return self.parse_predictions(self._poll(job_id))

    def _submit(self, models: Dict[str, Any], data_url: str) -> str:
        resp = self.http.post(
            f"{self.base_url}/batch/jobs",
            headers={**self._headers, "Content-Type": "application/json"},
            json={"models": models, "urls": [data_url]},
            timeout=self.timeout,
        )
        if resp.status_code >= 400:
            raise RuntimeError(f"Hume API error {resp.status_code}: {resp.text}")
        job_id = resp.json().get("job_id")
        if not job_id:
            raise RuntimeError(f"Hume API returned no job id: {resp.text}")
        logger.debug(f"Submitted Hume job {job_id}")
        return job_id

    def _poll(self, job_id: str) -> Dict[str, Any]:
        """
        Wait for a job to finish.

        Raises:
            RuntimeError: if the job fails or does not finish in time
        """
        for attempt in range(self.poll_attempts):
            resp = self.http.get(
                f"{self.base_url}/batch/jobs/{job_id}",
                headers=self._headers,
                timeout=self.timeout,
            )
            if resp.status_code >= 400:
                raise RuntimeError(f"Failed to fetch Hume job {job_id}: {resp.status_code}")

            data = resp.json()
            state = data.get("state")
            # Newer responses nest the status: {"state": {"status": "COMPLETED"}}
            if isinstance(state, dict):
                state = state.get("status")

            if state == "COMPLETED":
                logger.debug(f"Hume job {job_id} completed after {attempt + 1} polls")
                return data
            if state == "FAILED":
                raise RuntimeError(f"Hume job {job_id} failed")

            self.sleep(self.poll_interval)

        raise RuntimeError(f"Hume job {job_id} did not finish after {self.poll_attempts} polls")

    @staticmethod
    def parse_predictions(payload: Dict[str, Any], timestamp: Optional[int] = None) -> List[EmotionSample]:
        """
        One sample per prediction: the top-scoring emotion.

        Emotion names are lower-cased so they line up with the scoring tables.
        """
        timestamp = now_ms() if timestamp is None else timestamp
        samples: List[EmotionSample] = []
        for result in payload.get("results", []) or []:
            for prediction in result.get("predictions", []) or []:
                emotions = prediction.get("emotions") or []
                if not emotions:
                    continue
                top = max(emotions, key=lambda e: e.get("score", 0.0))
                samples.append(EmotionSample(
                    emotion=str(top["name"]).lower(),
                    intensity=min(1.0, max(0.0, float(top.get("score", 0.0)))),
                    confidence=min(1.0, max(0.0, float(prediction.get("prob", 1.0)))),
                    timestamp=timestamp,
                ))
        return samples
