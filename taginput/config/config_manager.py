import copy
import os
import yaml

DEFAULT_CONFIG = {
    "logging_level": "INFO",
    "tag_input": {
        "separator_keys": ["Return", "Comma"],
        "placeholder": "+ Tag",
        "secondary_placeholder": "Enter a new tag",
        "max_items": None,
        "readonly": False,
        "only_from_autocomplete": False,
        "show_dropdown_if_empty": False,
        "text_change_debounce": 250,  # ms
        "add_on_blur": False,
        "add_on_paste": False,
        "clear_on_blur": False,
        "paste_split_pattern": ",",
        "blink_if_dupe": True,
        "autocomplete_items": None,
        "error_messages": {},
    },
}

def _default_config_path() -> str:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return os.path.join(xdg_config_home, "taginput", "config.yaml")


def _deep_merge(base: dict, override: dict) -> dict:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigManager:
    def __init__(self, config_path: str | None = None):
        self.config_path = config_path or _default_config_path()
        self.config = self.load_config()

    def load_config(self):
        try:
            with open(self.config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            self.save_config(DEFAULT_CONFIG)
            return copy.deepcopy(DEFAULT_CONFIG)
        except yaml.YAMLError as exc:
            raise ValueError(f"Malformed config at {self.config_path}") from exc
        if not isinstance(user_config, dict):
            raise ValueError(f"Config at {self.config_path} must be a mapping")
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)

    def save_config(self, config):
        os.makedirs(os.path.dirname(self.config_path), exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False)

    def get(self, key, default=None):
        keys = key.split('.')
        value = self.config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    def set(self, key, value):
        keys = key.split('.')
        node = self.config
        for k in keys[:-1]:
            node = node.setdefault(k, {})
        node[keys[-1]] = value
        self.save_config(self.config)

    @property
    def logging_level(self):
        return self.get("logging_level", "INFO")
