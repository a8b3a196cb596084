"""
Config Version Tracker

Computes a stable fingerprint of a resolved market config so the sync layer
can tell whether a fresh fetch differs from what is already stored. The
hash is for change detection only.
"""

import hashlib
import json
from typing import Any, Mapping, Optional, Union

from domain.models import ResolvedConfig

# Derived/volatile keys; including them would change the hash on every fetch.
FINGERPRINT_EXCLUDED_KEYS = ("fingerprint", "fetched_at")


def _to_plain_data(config: Union[ResolvedConfig, Mapping[str, Any]]) -> dict:
    if isinstance(config, ResolvedConfig):
        payload = config.to_dict()
    else:
        payload = dict(config)
    for key in FINGERPRINT_EXCLUDED_KEYS:
        payload.pop(key, None)
    return payload


def generate_config_fingerprint(config: Union[ResolvedConfig, Mapping[str, Any], None]) -> Optional[str]:
    """Return an MD5 hex digest of the config's content, or None for no config.

    Keys are sorted at every nesting level, so two configs with the same
    content always produce the same fingerprint regardless of dict order.
    """
    if config is None:
        return None
    serialized = json.dumps(
        _to_plain_data(config),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.md5(serialized.encode("utf-8"), usedforsecurity=False).hexdigest()


def has_config_changed(
    config: Union[ResolvedConfig, Mapping[str, Any], None],
    known_fingerprint: Optional[str],
) -> bool:
    """True if the config's fingerprint differs from the one already stored."""
    if not known_fingerprint:
        return True
    return generate_config_fingerprint(config) != known_fingerprint
