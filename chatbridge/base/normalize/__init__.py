"""Multimodal content normalization."""

from .content_normalizer import ContentNormalizer, ensure_images_encoded
from .data_url import DEFAULT_IMAGE_MIME, canonical_mime, guess_image_mime, parse_data_url

__all__ = [
    "ContentNormalizer",
    "ensure_images_encoded",
    "DEFAULT_IMAGE_MIME",
    "canonical_mime",
    "guess_image_mime",
    "parse_data_url",
]
