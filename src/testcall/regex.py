#
# src/testcall/regex.py
#
"""
Regex helpers shared by output and directory assertions.

Text matching decodes the input as UTF-8 with replacement characters first,
so malformed bytes never abort a match.
"""
import re

CaptureMap = dict[int | str, str]


def decode_lossy(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def captures_utf8(data: bytes, pattern: str) -> CaptureMap:
    """
    Applies `pattern` to the lossy-decoded `data` and returns its captures.

    Groups are keyed by index (0 is the whole match) and, for named groups,
    additionally by name. Groups that did not participate are left out. An
    empty dict means the pattern did not match.
    """
    match = re.search(pattern, decode_lossy(data))
    if match is None:
        return {}

    captures: CaptureMap = {}
    for index in range(len(match.regs)):
        value = match.group(index)
        if value is not None:
            captures[index] = value
    for name, value in match.groupdict().items():
        if value is not None:
            captures[name] = value
    return captures


def regex_match_utf8(data: bytes, pattern: str) -> tuple[bool, str]:
    text = decode_lossy(data)
    return re.search(pattern, text) is not None, text


def regex_match_bytes(data: bytes, pattern: str | bytes) -> tuple[bool, str]:
    if isinstance(pattern, str):
        pattern = pattern.encode("utf-8")
    return re.search(pattern, data) is not None, decode_lossy(data)

# 🔼⚙️
