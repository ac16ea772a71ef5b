"""Redact proxy credentials from log lines and error messages.

Passwords are only ever shown once in the operator's credential block. Anything
else that might echo them (proxy URLs inside ``requests`` exceptions, a dumped
``users`` directive) goes through :func:`redact_text` first.
"""

from __future__ import annotations

import re

URL_CREDENTIAL_REGEX = re.compile(r"(?P<scheme>[A-Za-z][A-Za-z0-9+.\-]*://)(?P<user>[^:/@\s]+):(?P<secret>[^@\s]+)@")
USERS_ENTRY_REGEX = re.compile(r"(?P<user>[A-Za-z0-9_.\-]+):(?P<type>CL|CR|NT):(?P<secret>\S+)")

MASK = "***"


def redact_text(text: str) -> str:
    result = URL_CREDENTIAL_REGEX.sub(lambda m: f"{m.group('scheme')}{m.group('user')}:{MASK}@", text)
    result = USERS_ENTRY_REGEX.sub(lambda m: f"{m.group('user')}:{m.group('type')}:{MASK}", result)
    return result
