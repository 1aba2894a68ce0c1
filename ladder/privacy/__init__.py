"""Connection-aware visibility of user content."""

from ladder.privacy.filter import PrivacyFilter, resolve_owner_id

__all__ = ["PrivacyFilter", "resolve_owner_id"]
