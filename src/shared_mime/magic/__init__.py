"""Content-signature rules: parsing and matching."""

from .rules import MagicRule, MatchEntry, clamp_priority
from .parser import parse_magic, MAGIC_HEADER
from .matcher import MagicMatch, MagicMatcher, entry_matches, rule_matches, window_matches

__all__ = [
    'MagicRule',
    'MatchEntry',
    'clamp_priority',
    'parse_magic',
    'MAGIC_HEADER',
    'MagicMatch',
    'MagicMatcher',
    'entry_matches',
    'rule_matches',
    'window_matches',
]
