# taginput/config/options.py

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Pattern, Union

from taginput.config.keys import resolve_keys

PLACEHOLDER = "+ Tag"
SECONDARY_PLACEHOLDER = "Enter a new tag"
MAX_ITEMS_WARNING = "The number of items specified was greater than the property max-items."

# Returns an error key, or None when the text passes.
Validator = Callable[[str], Optional[str]]
Matcher = Callable[[str, str], bool]


def _identity(item: str) -> str:
    return item


def contains_ignore_case(candidate: str, text: str) -> bool:
    return text.lower() in candidate.lower()


@dataclass
class TagInputOptions:
    """Every recognized configuration option of a tag input."""
    separator_keys: List[int] = field(default_factory=list)
    placeholder: str = PLACEHOLDER
    secondary_placeholder: str = SECONDARY_PLACEHOLDER
    max_items: Optional[int] = None  # None = unlimited
    readonly: bool = False
    transform: Callable[[str], str] = _identity
    validators: List[Validator] = field(default_factory=list)
    error_messages: Dict[str, str] = field(default_factory=dict)
    autocomplete_items: Optional[List[str]] = None  # None = no dropdown
    only_from_autocomplete: bool = False
    show_dropdown_if_empty: bool = False
    text_change_debounce: int = 250  # ms
    add_on_blur: bool = False
    add_on_paste: bool = False
    clear_on_blur: bool = False
    paste_split_pattern: Union[str, Pattern[str]] = ","
    blink_if_dupe: bool = True
    matcher: Matcher = contains_ignore_case

    @property
    def has_autocomplete(self) -> bool:
        return self.autocomplete_items is not None

    @classmethod
    def from_config(cls, config_manager, section: str = "tag_input", **overrides) -> 'TagInputOptions':
        """Builds options from a ConfigManager section.

        Callables (transform, validators, matcher) cannot come from YAML and
        are passed as keyword overrides.
        """
        raw = config_manager.get(section, {}) or {}
        kwargs = {}

        if "separator_keys" in raw:
            kwargs["separator_keys"] = resolve_keys(raw.get("separator_keys") or [])

        for name in ("placeholder", "secondary_placeholder", "readonly",
                     "only_from_autocomplete", "show_dropdown_if_empty",
                     "add_on_blur", "add_on_paste", "clear_on_blur", "blink_if_dupe"):
            if raw.get(name) is not None:
                kwargs[name] = raw[name]

        if raw.get("max_items") is not None:
            kwargs["max_items"] = int(raw["max_items"])
        if raw.get("text_change_debounce") is not None:
            kwargs["text_change_debounce"] = int(raw["text_change_debounce"])
        if raw.get("autocomplete_items") is not None:
            kwargs["autocomplete_items"] = [str(item) for item in raw["autocomplete_items"]]
        if raw.get("error_messages"):
            kwargs["error_messages"] = dict(raw["error_messages"])

        pattern = raw.get("paste_split_pattern")
        if pattern is not None:
            # a "regex:" prefix selects a regular expression split
            if isinstance(pattern, str) and pattern.startswith("regex:"):
                kwargs["paste_split_pattern"] = re.compile(pattern[len("regex:"):])
            else:
                kwargs["paste_split_pattern"] = str(pattern)

        kwargs.update(overrides)
        return cls(**kwargs)
