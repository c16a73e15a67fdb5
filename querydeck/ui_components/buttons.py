from textual.widgets import Button

VARIANT_CLASSES = {
    "primary": "btn-primary",
    "ghost": "btn-ghost",
    "warning": "btn-warning",
}


class SmallButton(Button):
    """One-line toolbar button for editor headers."""

    DEFAULT_CSS = """
    SmallButton {
        height: 1;
        min-height: 1;
        min-width: 8;
        padding: 0 2;
        border: none;
        background: #1c2943;
        color: #e5edff;
        text-style: bold;
    }

    SmallButton:hover, SmallButton:focus {
        background: #2d4470;
    }

    SmallButton.btn-primary {
        background: #4f8dff;
        color: #0b1221;
    }

    SmallButton.btn-ghost {
        background: transparent;
        color: #8fb2ff;
    }

    SmallButton.btn-warning {
        background: #7a4b1c;
        color: #fff3e0;
    }

    SmallButton:disabled {
        background: #1a2235;
        color: #56627a;
    }
    """

    def __init__(self, label: str, *, variant: str = "default", **kwargs) -> None:
        super().__init__(label, **kwargs)
        self.set_variant(variant)

    def set_variant(self, variant: str) -> None:
        self.remove_class(*VARIANT_CLASSES.values())
        css_class = VARIANT_CLASSES.get(variant)
        if css_class:
            self.add_class(css_class)
