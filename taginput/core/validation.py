import logging
from typing import Callable, List, Optional

from taginput.config.options import TagInputOptions
from taginput.core.tag_store import TagCollectionStore
from taginput.core.views import InputView


class ValidationPipeline:
    """Decides whether a candidate value may become a tag.

    `is_valid` returns None instead of a boolean while the dropdown has a
    highlighted item and the candidate did not come from it: the commit then
    belongs to the dropdown and callers must do nothing.
    """

    def __init__(self, store: TagCollectionStore, options: TagInputOptions,
                 input_view: Optional[InputView] = None,
                 highlighted_item: Optional[Callable[[], Optional[str]]] = None):
        self._store = store
        self._options = options
        self._input_view = input_view
        self._highlighted_item = highlighted_item or (lambda: None)

    def is_valid(self, value: Optional[str], from_autocomplete: bool = False) -> Optional[bool]:
        if self._highlighted_item() is not None and not from_autocomplete:
            logging.debug("Validation blocked: dropdown item highlighted")
            return None

        if value is None or not value.strip():
            return False

        dupe = self._store.find(value)
        if dupe is not None and self._options.blink_if_dupe and self._input_view is not None:
            self._input_view.blink(dupe)

        # Duplicate and capacity are independent checks; the blink above is
        # issued even when capacity alone would reject the value.
        if dupe is not None or self._store.max_items_reached:
            return False

        if self._options.only_from_autocomplete and not from_autocomplete:
            return False

        return not self._failed_validators(value)

    def errors(self, value: str) -> List[str]:
        """Human readable messages for every custom validator the value fails."""
        messages = self._options.error_messages
        return [messages.get(key, key) for key in self._failed_validators(value)]

    def buffer_valid(self, value: str) -> bool:
        # An empty buffer is not an error, it just cannot be committed.
        return not value or not self._failed_validators(value)

    def _failed_validators(self, value: str) -> List[str]:
        failed = []
        for validator in self._options.validators:
            try:
                key = validator(value)
            except Exception as e:
                logging.error(f"Tag validator {validator!r} raised: {e}", exc_info=True)
                key = "validator_error"
            if key:
                failed.append(key)
        return failed
