"""
Validation utilities for the product submission form
"""
from typing import List, Optional, Tuple

from core.config import MAX_IMAGES

REQUIRED_FIELDS_ERROR = "Name and contact are required."


def validate_required(name: Optional[str], contact: Optional[str]) -> Tuple[bool, str]:
    """
    Name and contact must be non-empty after trimming.
    Returns (is_valid, error_message).
    """
    if not (name or "").strip() or not (contact or "").strip():
        return False, REQUIRED_FIELDS_ERROR
    return True, ""


def validate_image_count(count: int, max_images: int = MAX_IMAGES) -> Tuple[bool, str]:
    if count > max_images:
        return False, f"Too many images. Maximum {max_images} files per submission."
    return True, ""


def parse_product_links(raw: Optional[str]) -> List[str]:
    """Split newline-delimited links, trim each, drop blanks, keep order."""
    return [line.strip() for line in (raw or "").split("\n") if line.strip()]
