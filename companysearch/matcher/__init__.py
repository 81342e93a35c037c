"""Ranked matcher package.

Resolves a free-text company name against a catalog through five match tiers
(exact, prefix, substring, fuzzy, full-text), deduplicated and capped at 20.
Stateless and deterministic. See `companysearch/matcher/core.py`.
"""
