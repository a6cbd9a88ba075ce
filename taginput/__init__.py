from .config.options import TagInputOptions
from .core.controller import TagInputController
from .core.event_system import TagEventType
from .core.tag_model import TagModel


def __getattr__(name):
    if name == "TagLineEdit":
        from .gui.components.tag_line_edit import TagLineEdit
        return TagLineEdit
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
