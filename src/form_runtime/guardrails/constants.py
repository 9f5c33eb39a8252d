"""
Constants for schema guardrails.

Centralizing these makes them easier to maintain and update.
"""

import re

# Valid dot-path key: identifier segments, numeric segments after the first
VALID_FIELD_KEY = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z0-9_]+)*$")

MAX_KEY_LENGTH = 200

CONDITION_ATTRIBUTES = {
    "hide": "hide_when",
    "disable": "disable_when",
    "remove": "remove_when",
}
