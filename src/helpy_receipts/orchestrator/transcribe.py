"""Transcribe receipt images with a Qwen-VL model on DashScope's OpenAI-compatible API."""

from __future__ import annotations

import base64
import mimetypes
import os
from typing import Any, Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from ..config import VisionConfig
from ..logging import get_logger

LOG = get_logger("orchestrator-transcribe")


DEFAULT_INSTRUCTION = (
    "Extract all text from this receipt image. Return only the raw text content "
    "exactly as it appears, preserving line breaks and formatting."
)


class TranscriptionError(Exception):
    """The OCR service could not produce text for the image."""


def _mime_for(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    if mime and mime.startswith("image/"):
        return mime
    return "image/jpeg"


def build_client(config: VisionConfig) -> OpenAI:
    if not config.api_key:
        raise TranscriptionError("Vision API key not configured (set ALIBABA_CLOUD_API_KEY)")
    http_client = httpx.Client(
        timeout=httpx.Timeout(connect=10.0, read=float(config.timeout_seconds), write=30.0, pool=10.0),
    )
    return OpenAI(
        api_key=config.api_key,
        base_url=config.base_url,
        http_client=http_client,
        max_retries=0,
    )


def _reply_text(resp: Any) -> str:
    choices = getattr(resp, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if isinstance(content, list):
        # Some models return content parts instead of a single string.
        parts = [p.get("text", "") if isinstance(p, dict) else str(p) for p in content]
        content = "".join(parts)
    return (content or "").strip()


def transcribe_image_b64(
    base64_image: str,
    *,
    config: VisionConfig,
    mime_type: str = "image/jpeg",
    instruction: str = DEFAULT_INSTRUCTION,
    client: Optional[Any] = None,
) -> str:
    """Return the raw receipt text for a base64-encoded image.

    Raises TranscriptionError when the service fails or returns no text.
    """
    if not base64_image:
        raise TranscriptionError("base64 image is required")
    client = client or build_client(config)
    data_url = f"data:{mime_type};base64,{base64_image}"
    LOG.info(f"Transcribing image via {config.model_name}")
    LOG.debug(f"Endpoint: {config.base_url}; payload ~{len(data_url) / (1024 * 1024):.2f} MiB")

    try:
        resp = client.chat.completions.create(
            model=config.model_name,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": data_url}},
                        {"type": "text", "text": instruction},
                    ],
                }
            ],
            temperature=config.temperature,
            timeout=float(config.timeout_seconds),
        )
    except (APIConnectionError, APITimeoutError) as exc:
        LOG.error(f"Vision API unreachable: {exc}")
        raise TranscriptionError(f"OCR service unreachable: {exc}") from exc
    except APIStatusError as exc:
        LOG.error(f"Vision API HTTP {exc.status_code}: {exc.message}")
        raise TranscriptionError(f"OCR API error: {exc.status_code} - {exc.message}") from exc

    text = _reply_text(resp)
    if not text:
        raise TranscriptionError(
            "No text detected in image. The OCR service did not return any text content."
        )
    LOG.info(f"Received transcript with {len(text)} characters")
    return text


def transcribe_image(
    image_path: str,
    *,
    config: VisionConfig,
    instruction: str = DEFAULT_INSTRUCTION,
    client: Optional[Any] = None,
) -> str:
    """Read an image file and return its transcript (see transcribe_image_b64)."""
    path = os.path.abspath(os.path.expanduser(image_path))
    LOG.debug(f"Image path: {path}")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise TranscriptionError(f"Unable to read image: {path} ({exc})") from exc
    b64 = base64.b64encode(data).decode("ascii")
    return transcribe_image_b64(
        b64,
        config=config,
        mime_type=_mime_for(path),
        instruction=instruction,
        client=client,
    )
