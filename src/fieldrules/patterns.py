"""Precompiled patterns used by the built-in format rules.

Patterns are matched with ``fullmatch`` so a trailing newline never slips
past ``$``. Digit classes are ASCII-only.
"""

import re


# Email: local@domain.tld with a two-letter minimum TLD
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Phone: mainland China mobile numbers (11 digits, 13x-19x prefixes)
PHONE_PATTERN = re.compile(r"^1[3-9]\d{9}$", re.ASCII)

# URL: http(s) scheme followed by a host
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$")

# IPv4 shape only; segment range is checked separately
IP_PATTERN = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$", re.ASCII)

ALPHA_PATTERN = re.compile(r"^[a-zA-Z]+$")

ALPHANUM_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")

NUMERIC_PATTERN = re.compile(r"^[0-9]+$")

# Signed decimal: optional minus, digits, optional fraction
NUMBER_PATTERN = re.compile(r"^-?[0-9]+\.?[0-9]*$")

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

# 18-digit national ID: region, birth date (1800-2099), sequence, check char
IDCARD_PATTERN = re.compile(
    r"^[1-9]\d{5}(18|19|20)\d{2}(0[1-9]|1[0-2])(0[1-9]|[12]\d|3[01])\d{3}[\dXx]$",
    re.ASCII,
)
