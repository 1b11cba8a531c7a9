"""High-level helpers that connect the OCR service to the receipt parser."""

from .transcribe import TranscriptionError, transcribe_image, transcribe_image_b64
from .flow import process_receipt

__all__ = [
    "TranscriptionError",
    "transcribe_image",
    "transcribe_image_b64",
    "process_receipt",
]
