"""Chat Filter — evasion-resistant chat content filtering with exact-span redaction."""

from .service import FilterService, FilterConfig
from .advertising import AdvertisingDetector
from .normalizer import Normalizer, normalize, normalize_for_display
from .vocabulary import Vocabulary, VocabularyEntry, VocabularyStore
from .config import create_service, load_config, load_from_yaml, build_vocabulary
from .types import (
    Category, Tier, STRICT, MODERATE, RELAXED, MINIMAL, TIERS,
    NormalizedText, Match, Violation, FilterResult,
)

__all__ = [
    "FilterService", "FilterConfig", "AdvertisingDetector",
    "Normalizer", "normalize", "normalize_for_display",
    "Vocabulary", "VocabularyEntry", "VocabularyStore",
    "create_service", "load_config", "load_from_yaml", "build_vocabulary",
    "Category", "Tier", "STRICT", "MODERATE", "RELAXED", "MINIMAL", "TIERS",
    "NormalizedText", "Match", "Violation", "FilterResult",
]
__version__ = "0.1.0"
