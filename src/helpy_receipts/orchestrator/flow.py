"""End-to-end receipt flow: image -> OCR text -> ParsedReceipt."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..config import VisionConfig
from ..domain.models import ParsedReceipt
from ..logging import get_logger
from ..parser import parse_receipt_text
from .transcribe import transcribe_image

LOG = get_logger("orchestrator-flow")


def process_receipt(
    image_path: str,
    *,
    config: VisionConfig,
    known_merchants: Optional[Sequence[str]] = None,
    client: Optional[Any] = None,
) -> ParsedReceipt:
    """Transcribe a receipt image and parse the text.

    OCR failures propagate as TranscriptionError; parsing itself never fails.
    """
    LOG.info(f"Processing receipt image: {image_path}")
    text = transcribe_image(image_path, config=config, client=client)
    return parse_receipt_text(text, known_merchants=known_merchants)
