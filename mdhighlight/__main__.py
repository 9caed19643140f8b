from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMainWindow, QMessageBox, QPlainTextEdit

from mdhighlight.configuration import MarkdownConfiguration
from mdhighlight.settings_schema import SettingsLoadError, load_markdown_settings
from mdhighlight.ui.markdown_plugin import attach


SAMPLE_DOCUMENT = """# Markdown highlighting

Type below. Headings, *emphasis*, **strong text**, `inline code` and
[links](https://example.com) are styled as you edit.

## Code

```python
print("fenced blocks use the code font")
```

### Lists

- one item with **bold**
- another with *italic*
"""


def _split_args(argv: list[str]) -> tuple[str | None, str | None]:
    path: str | None = None
    settings_path: str | None = None
    args = iter(argv)
    for arg in args:
        if arg == "--settings":
            settings_path = next(args, None)
        elif arg.startswith("--settings="):
            settings_path = arg.split("=", 1)[1]
        elif path is None:
            path = arg
    return path, settings_path


def _load_text(path: str | None) -> str:
    if not path:
        return SAMPLE_DOCUMENT
    return Path(path).expanduser().read_text(encoding="utf-8")


class DemoWindow(QMainWindow):
    def __init__(self, text: str, configuration: MarkdownConfiguration, title: str):
        super().__init__()
        self.setWindowTitle(title)
        self.resize(860, 620)

        self._editor = QPlainTextEdit(self)
        self._editor.setPlainText(text)
        self.setCentralWidget(self._editor)

        self._highlighting = attach(self._editor, configuration)
        self._highlighting.statusMessage.connect(self._show_status)

    def _show_status(self, message: str):
        self.statusBar().showMessage(message, 5000)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    path, settings_path = _split_args(list(sys.argv[1:] if argv is None else argv))

    app = QApplication.instance() or QApplication(sys.argv[:1])

    configuration = MarkdownConfiguration()
    if settings_path:
        try:
            configuration = MarkdownConfiguration.from_mapping(load_markdown_settings(settings_path))
        except SettingsLoadError as exc:
            QMessageBox.critical(None, "Markdown Highlighting", str(exc))
            return 2

    try:
        text = _load_text(path)
    except OSError as exc:
        QMessageBox.critical(None, "Markdown Highlighting", f"Could not open {path}: {exc}")
        return 2

    window = DemoWindow(text, configuration, Path(path).name if path else "Markdown Highlighting")
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
