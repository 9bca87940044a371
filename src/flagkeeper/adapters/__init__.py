"""Adapters – concrete backends and the HTTP boundary.

Subpackages import their third-party dependency lazily or at module level;
import them directly (``flagkeeper.adapters.redis``) rather than from here.
"""
