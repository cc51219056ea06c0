import re
from typing import Optional

TICKET_PREFIX = "TASK-"
FIRST_TICKET_CODE = "TASK-AAA000000"
MAX_TICKET_NUMBER = 999999

_TICKET_CODE_RE = re.compile(r"^TASK-([A-Z]{3})(\d{6})$", re.IGNORECASE)


def _increment_letters(letters: str) -> str:
    chars = list(letters)
    for i in range(len(chars) - 1, -1, -1):
        if chars[i] != "Z":
            chars[i] = chr(ord(chars[i]) + 1)
            return "".join(chars)
        chars[i] = "A"
    # ZZZ vuelve a AAA
    return "".join(chars)


def increment_ticket_code(current_code: Optional[str]) -> str:
    """
    Siguiente código de la secuencia TASK-AAA000000.

    TASK-AAA000041 -> TASK-AAA000042
    TASK-AAA999999 -> TASK-AAB000000
    TASK-AZZ999999 -> TASK-BAA000000
    Un código ausente o mal formado reinicia la secuencia en TASK-AAA000000.
    """
    if not current_code:
        return FIRST_TICKET_CODE

    match = _TICKET_CODE_RE.match(current_code.strip())
    if not match:
        return FIRST_TICKET_CODE

    letters = match.group(1).upper()
    number = int(match.group(2)) + 1

    if number > MAX_TICKET_NUMBER:
        letters = _increment_letters(letters)
        number = 0

    return f"{TICKET_PREFIX}{letters}{number:06d}"
