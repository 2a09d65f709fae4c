# app/utils/revision.py
import re

REVISION_SUFFIX = re.compile(r"Rev([0-9]+)\Z")


def next_custom_id(custom_id: str) -> str:
    """
    Derive the identifier of the next quotation revision.

    "Q-17 Rev3" -> "Q-17 Rev4", "Q-17" -> "Q-17 Rev1".
    Anything not ending in "Rev<digits>" (e.g. "Q-17 Rev", "Q-17 RevA")
    is treated as unrevised and gets " Rev1" appended.
    """
    custom_id = custom_id or ""
    match = REVISION_SUFFIX.search(custom_id)
    if match:
        revision = int(match.group(1)) + 1
        return f"{custom_id[:match.start()]}Rev{revision}"
    return f"{custom_id} Rev1".lstrip()
