# rupeebook/core/members.py
from __future__ import annotations

from typing import Dict, Iterable, Optional

from rupeebook.core.models import Member

LEGACY_OWNER_NAME = "Owner"


class MemberResolver:
    """
    Map member ids to display names.

    Entries recorded before per-entry attribution existed carry no member id;
    they, and ids that no longer match a member, resolve to *default_name*.
    *aliases* rewrites stored names to display names.
    """

    def __init__(
        self,
        members: Iterable[Member] = (),
        default_name: str = LEGACY_OWNER_NAME,
        aliases: Optional[Dict[str, str]] = None,
    ):
        self._names = {m.id: m.name for m in members}
        self.default_name = default_name
        self.aliases = dict(aliases or {})

    def name_for(self, member_id: Optional[str]) -> str:
        if not member_id:
            return self.default_name
        name = self._names.get(member_id)
        if not name:
            return self.default_name
        return self.aliases.get(name, name)

    def label_for(self, member_id: str) -> str:
        """Name for a member picked in a filter; ids matching no member show as given."""
        if member_id not in self._names:
            return member_id
        return self.name_for(member_id)

    @classmethod
    def from_config(cls, members: Iterable[Member], config: Optional[dict]) -> "MemberResolver":
        section = (config or {}).get("members") or {}
        return cls(
            members,
            default_name=section.get("default_name") or LEGACY_OWNER_NAME,
            aliases=section.get("aliases") or {},
        )
