"""YAML/dict config loader for chat-filter.

Supports loading from a YAML file or a plain dict (for embedding
in a larger config, e.g. a server's plugin config).

Example YAML:

    chat_filter:
      enabled: true
      mask_char: "*"
      default_tier: STRICT
      words:
        severe: [badword]
        high: []
        moderate: [damn]
        low: [heck]
      patterns:
        severe:
          - "b+a+d+w+o+r+d+"
      whitelist:
        - classic
        - assess
      whitelisted_domains:
        - example.net
      block_ips: true
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

from .service import FilterConfig, FilterService
from .types import Category, Tier
from .vocabulary import Vocabulary, VocabularyStore

logger = logging.getLogger(__name__)


def _categorized(section: Any, kind: str) -> list[tuple[Category, str]]:
    """Flatten ``{category: [terms]}`` into ``[(Category, term)]``, skipping bad input."""
    if not section:
        return []
    if not isinstance(section, dict):
        logger.warning("Ignoring %s: expected a mapping of category -> list", kind)
        return []

    out: list[tuple[Category, str]] = []
    for name, terms in section.items():
        try:
            category = Category.from_string(str(name))
        except ValueError:
            logger.warning("Ignoring %s for unknown category %r", kind, name)
            continue
        if isinstance(terms, str):
            terms = [terms]
        for term in terms or []:
            if not isinstance(term, str):
                logger.warning("Ignoring non-string %s %r in %s", kind, term, category.name)
                continue
            out.append((category, term))
    return out


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [v for v in value or [] if isinstance(v, str)]


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "chat_filter" key or flat
    if "chat_filter" in data:
        data = data["chat_filter"] or {}

    mask_char = str(data.get("mask_char", "*"))
    if len(mask_char) != 1:
        logger.warning("mask_char %r is not a single character; using '*'", mask_char)
        mask_char = "*"

    return {
        "enabled": data.get("enabled", True),
        "mask_char": mask_char,
        "default_tier": Tier.from_string(data.get("default_tier")),
        "words": _categorized(data.get("words"), "word"),
        "patterns": _categorized(data.get("patterns"), "pattern"),
        "whitelist": _string_list(data.get("whitelist")),
        "whitelisted_domains": _string_list(data.get("whitelisted_domains")),
        "block_ips": bool(data.get("block_ips", True)),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path, encoding="utf-8") as f:
        return load_config(yaml.safe_load(f))


def _ensure_loaded(config: dict[str, Any]) -> dict[str, Any]:
    # Already-normalized dicts carry a resolved Tier
    if isinstance(config.get("default_tier"), Tier):
        return config
    return load_config(config)


def build_vocabulary(config: dict[str, Any]) -> Vocabulary:
    """Build a vocabulary snapshot from a normalized config dict."""
    cfg = _ensure_loaded(config)
    if not cfg["enabled"]:
        return Vocabulary.empty()
    return Vocabulary.load(cfg["words"], cfg["patterns"], cfg["whitelist"])


def create_service(config: dict[str, Any]) -> FilterService:
    """Create a fully configured filter service from a config dict."""
    cfg = _ensure_loaded(config)

    filter_config = FilterConfig(
        mask_char=cfg["mask_char"],
        default_tier=cfg["default_tier"],
        whitelisted_domains=cfg["whitelisted_domains"],
        block_ips=cfg["block_ips"],
    )
    return FilterService(VocabularyStore(build_vocabulary(cfg)), filter_config)


def reload_service(service: FilterService, config: dict[str, Any]) -> Vocabulary:
    """Rebuild the vocabulary from *config* and publish it on *service*."""
    vocabulary = build_vocabulary(config)
    service.store.publish(vocabulary)
    return vocabulary
