"""Ingestion components for the DATA section of an SMTP transaction."""

from .body import BodyAccumulator
from .headers import HeaderExtractor

__all__ = ["BodyAccumulator", "HeaderExtractor"]
