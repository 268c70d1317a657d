"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LIST_LIMIT = 500
DEFAULT_NOTIFICATION_TIMEOUT_SECONDS = 5.0
SIGNATURE_FIELD_SEPARATOR = "|"

LOOKUP_GOVERNANCE_BODY_TYPE = "governance_body_type"
LOOKUP_GOVERNANCE_ROLE = "governance_role"

# Used when the lookup_values table has no rows for a category yet.
DEFAULT_LOOKUPS = {
    LOOKUP_GOVERNANCE_BODY_TYPE: (
        ("board", "Board of Directors"),
        ("management", "Management Team"),
        ("committee", "Committee"),
    ),
    LOOKUP_GOVERNANCE_ROLE: (
        ("chair", "Chair"),
        ("vice_chair", "Vice Chair"),
        ("secretary", "Secretary"),
        ("member", "Member"),
    ),
}
