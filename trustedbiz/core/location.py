# =========================================================
# BEST-EFFORT LOCATION CLASSIFIER
#
# Business locations are unstructured text ("Austin, TX 78701",
# "Springfield Illinois", "Main St"). classify_state() guesses the
# US state and returns UNCLASSIFIED when it cannot tell.
#
# Known failure modes:
# - Street or city names equal to a state ("Washington Ave")
#   can win when no postal code is present.
# - Lower-case two-letter words are ignored, so "austin, tx"
#   only matches if the full state name is present.
#
# Only used for analytics aggregates, never for filtering.
# =========================================================

import re

UNCLASSIFIED = "Other"

STATE_CODES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming",
}

# Longest first so "West Virginia" wins over "Virginia"
_STATE_NAMES = sorted(STATE_CODES.values(), key=len, reverse=True)
_STATE_NAME_PATTERNS = [
    (name, re.compile(rf"\b{re.escape(name)}\b", re.IGNORECASE))
    for name in _STATE_NAMES
]

_TOKEN = re.compile(r"[A-Za-z]+")


def classify_state(location: str | None) -> str:
    if not location or not location.strip():
        return UNCLASSIFIED

    # Postal codes are usually at the end: "City, ST 12345"
    for token in reversed(_TOKEN.findall(location)):
        if len(token) == 2 and token.isupper() and token in STATE_CODES:
            return STATE_CODES[token]

    for name, pattern in _STATE_NAME_PATTERNS:
        if pattern.search(location):
            return name

    return UNCLASSIFIED


def count_by_state(location_counts, min_count: int = 0) -> list[tuple[str, int]]:
    """
    Fold (location, count) pairs into (state, count), busiest first.

    UNCLASSIFIED is left out; states at or below min_count are dropped.
    """
    totals: dict[str, int] = {}

    for location, count in location_counts:
        state = classify_state(location)
        if state == UNCLASSIFIED:
            continue
        totals[state] = totals.get(state, 0) + count

    return sorted(
        ((state, count) for state, count in totals.items() if count > min_count),
        key=lambda item: (-item[1], item[0]),
    )
