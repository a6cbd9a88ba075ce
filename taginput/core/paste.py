import logging
import re
from typing import List, Pattern, Union


def split_pasted(text: str, pattern: Union[str, Pattern[str]]) -> List[str]:
    """Splits clipboard text with a literal separator or a compiled regex."""
    if isinstance(pattern, re.Pattern):
        return pattern.split(text)
    if not pattern:
        return [text]
    return text.split(pattern)


class PasteHandler:
    """Turns one clipboard paste into a sequence of independent tag commits."""

    def __init__(self, controller, pattern: Union[str, Pattern[str]] = ","):
        self._controller = controller
        self.pattern = pattern

    def on_paste(self, raw_text: str) -> List[str]:
        """Returns the values that were added."""
        added = []
        pieces = split_pasted(raw_text or "", self.pattern)
        logging.debug(f"Paste split into {len(pieces)} pieces")

        for piece in pieces:
            tag = self._controller.commit_value(piece, from_autocomplete=False)
            if tag is not None:
                added.append(tag.value)

        self._controller.emit_paste(raw_text)
        # the host finishes its own paste handling first, then the field is cleared
        self._controller.defer(self._controller.clear_and_refocus)
        return added
