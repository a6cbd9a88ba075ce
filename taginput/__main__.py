import argparse
import logging
import sys

from taginput.config.config_manager import ConfigManager
from taginput.config.options import TagInputOptions
from taginput.core.event_system import TagEventType


def setup_logging(log_level):
    numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def _log_event(event_data):
    payload = getattr(event_data, "tag", None) or getattr(event_data, "text", "")
    logging.info(f"[{event_data.event_type.value}] {payload}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tag input demo window.")
    parser.add_argument('--config', default=None, help='Path to a YAML config file.')
    parser.add_argument('--log-level', default=None, help='Overrides logging_level from the config.')
    parser.add_argument('tags', nargs='*', help='Initial tags.')
    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)
    setup_logging(args.log_level or config_manager.logging_level)

    # Qt is only needed for the window; keep it out of the import path above.
    from PySide6.QtWidgets import QApplication, QVBoxLayout, QWidget
    from taginput.gui.components.tag_line_edit import TagLineEdit

    app = QApplication(sys.argv[:1])
    options = TagInputOptions.from_config(config_manager)

    window = QWidget()
    window.setWindowTitle("Tag input")
    layout = QVBoxLayout(window)
    tag_input = TagLineEdit(options, items=args.tags)
    layout.addWidget(tag_input)

    for event_type in TagEventType:
        tag_input.controller.subscribe(event_type, _log_event)
    tag_input.values_changed.connect(lambda values: logging.info(f"value: {values}"))

    window.resize(400, 60)
    window.show()
    logging.info("Tag input demo started")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
