from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class TagModel:
    """A committed tag. `value` is the identity key, `display` is what renders."""
    value: str
    display: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if self.display is None:
            object.__setattr__(self, "display", self.value)

    @classmethod
    def coerce(cls, item: Any) -> 'TagModel':
        """Accepts a TagModel, a plain string or a {value, display} mapping."""
        if isinstance(item, TagModel):
            return item
        if isinstance(item, dict):
            value = str(item["value"])
            return cls(value, str(item.get("display", value)))
        return cls(str(item))

    def __str__(self) -> str:
        return self.display
