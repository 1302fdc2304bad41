from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from app.prospects.constants import (
    CONTACT_STATUSES,
    DEFAULT_STATUS,
    FILTER_ALL,
    PROPOSAL_FILTERS,
    REFERRAL_TYPES,
    TAB_ALL,
    TABS,
    TEMPERATURES,
)


def _get(contact: Any, key: str) -> Any:
    if isinstance(contact, Mapping):
        return contact.get(key)
    return getattr(contact, key, None)


def effective_status(contact: Any) -> str:
    """A null status is an unset prospect, never a bucket of its own."""
    return _get(contact, "status") or DEFAULT_STATUS


@dataclass(frozen=True)
class FilterContext:
    tab: str = DEFAULT_STATUS
    search: str = ""
    temperature: str = FILTER_ALL
    proposal: str = FILTER_ALL
    referral_type: str = FILTER_ALL

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "FilterContext":
        """Build a context from query parameters; unknown values mean "no filter"."""

        def _pick(key: str, allowed: tuple[str, ...], default: str) -> str:
            v = (args.get(key) or "").strip()
            return v if v in allowed else default

        return cls(
            tab=_pick("tab", TABS, DEFAULT_STATUS),
            search=(args.get("search") or args.get("q") or "").strip(),
            temperature=_pick("temperature", TEMPERATURES, FILTER_ALL),
            proposal=_pick("proposal", PROPOSAL_FILTERS, FILTER_ALL),
            referral_type=_pick("referral_type", REFERRAL_TYPES, FILTER_ALL),
        )

    def matches(self, contact: Any) -> bool:
        if self.tab != TAB_ALL:
            if self.tab == DEFAULT_STATUS:
                if _get(contact, "status") not in (DEFAULT_STATUS, None):
                    return False
            elif _get(contact, "status") != self.tab:
                return False

        if self.search:
            name = _get(contact, "name") or ""
            if self.search.lower() not in name.lower():
                return False

        if self.temperature != FILTER_ALL and _get(contact, "temperature") != self.temperature:
            return False

        if self.proposal == "yes" and _get(contact, "proposal_sent") is not True:
            return False
        if self.proposal == "no" and _get(contact, "proposal_sent") is not False:
            return False

        if self.referral_type != FILTER_ALL and _get(contact, "referral_type") != self.referral_type:
            return False

        return True


def filter_contacts(contacts: Iterable[Any], ctx: FilterContext) -> list[Any]:
    """Stable filter: survivors keep their input order."""
    return [c for c in contacts if ctx.matches(c)]


def tab_counts(contacts: Iterable[Any]) -> dict[str, int]:
    counts = {tab: 0 for tab in TABS}
    for c in contacts:
        counts[TAB_ALL] += 1
        status = effective_status(c)
        if status in CONTACT_STATUSES:
            counts[status] += 1
    return counts
