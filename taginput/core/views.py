"""Interfaces of the rendering collaborators the controller talks to."""

from abc import ABC, abstractmethod
from typing import List

from taginput.core.tag_model import TagModel


class InputView(ABC):
    """The text field plus the rendered tags."""

    @abstractmethod
    def focus_input(self) -> None:
        pass

    @abstractmethod
    def is_input_focused(self) -> bool:
        pass

    @abstractmethod
    def set_text(self, text: str) -> None:
        """Shows `text` in the field without reporting it back as an edit."""
        pass

    @abstractmethod
    def blink(self, tag: TagModel) -> None:
        """Briefly highlights the rendered tag (duplicate cue)."""
        pass


class DropdownView(ABC):
    """The autocomplete popup."""

    @abstractmethod
    def show(self, items: List[str]) -> None:
        pass

    @abstractmethod
    def hide(self) -> None:
        pass

    @abstractmethod
    def update_position(self) -> None:
        pass

    @property
    @abstractmethod
    def is_visible(self) -> bool:
        pass

    def set_highlighted(self, item) -> None:
        """Mirrors the keyboard highlight; optional for views without one."""
        pass
