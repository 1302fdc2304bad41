"""
Central constants for the prospect tracker.
"""
from __future__ import annotations

# Contact enums (values are stored verbatim, matching is case-sensitive)
CONTACT_STATUSES = ("Prospect", "Signed On", "Archived")
TEMPERATURES = ("Hot", "Warm", "Lukewarm", "Cold")
REFERRAL_TYPES = ("Organic", "BNI", "Client", "Family", "Other")
GOOD_FIT_OPTIONS = ("Yes", "No", "Maybe")

DEFAULT_STATUS = "Prospect"

# Dashboard tabs: every status plus the pass-all tab
TAB_ALL = "All"
TABS = CONTACT_STATUSES + (TAB_ALL,)

# Filter sentinel for "no filter"
FILTER_ALL = "all"
PROPOSAL_FILTERS = ("all", "yes", "no")

# Auth cookie
AUTH_COOKIE_NAME = "prospect-tracker-auth"
AUTH_COOKIE_VALUE = "authenticated"
AUTH_COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days

# Paths reachable without the auth cookie
PUBLIC_PATH_PREFIXES = ("/login", "/api/auth/login", "/static/", "/health", "/healthz")

# Markdown fields editable in the dedicated viewer
MARKDOWN_FIELDS = ("brief", "notes")
AUTOSAVE_DELAY_SECONDS = 1.0

EXPORT_FILENAME_TEMPLATE = "contacts-export-{date}.json"
