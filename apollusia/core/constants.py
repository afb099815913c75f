"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Participant choices
# Unmarked events are an implicit "no" and are never stored
CHOICE_YES = "yes"
CHOICE_MAYBE = "maybe"
CHOICE_NO = "no"

# Markers used when rendering a participant's choices in mails
CHOICE_MARKERS = {
    CHOICE_YES: {"class": "p-yes", "icon": "✓"},
    CHOICE_MAYBE: {"class": "p-maybe", "icon": "?"},
    CHOICE_NO: {"class": "p-no", "icon": "X"},
}

# Suffix appended to booked appointments the participant selected
BOOKED_SELECTED_SUFFIX = " *"

# Suffix appended to the title of cloned polls
CLONE_TITLE_SUFFIX = " (clone)"

# Shown instead of other participants' names on anonymous polls
ANONYMOUS_NAME = "Anonymous"

# Header carrying the participant token
PARTICIPANT_TOKEN_HEADER = "Participant-Token"

# Tokens are URL-safe base64 of this many random bytes (~43 chars)
TOKEN_BYTES = 32

# Date format for appointment lines in mails
EVENT_DATE_FORMAT = "%a, %d %b %Y %H:%M"
