from textual.theme import Theme

meadow = Theme(
    name="meadow",
    primary="#7BC67B",
    secondary="#4E9A5B",
    accent="#C6E377",
    foreground="#E8F3E3",
    background="#13201A",
    success="#8FD18B",
    warning="#E5C15A",
    error="#E0625A",
    surface="#1A2B22",
    panel="#22372C",
    dark=True,
    variables={
        "footer-key-foreground": "#7bc67b",
        "input-selection-background": "#4e9a5b 35%",
        "block-cursor-text-style": "none",
    },
)

notebook = Theme(
    name="notebook",
    primary="#3A5A8C",
    secondary="#6B7F99",
    accent="#C0504D",
    foreground="#22262B",
    background="#FBF8F1",
    success="#3F7D4E",
    warning="#C98B1B",
    error="#B23A3A",
    surface="#F2EEE3",
    panel="#E7E2D4",
    dark=False,
    variables={
        "footer-key-foreground": "#3a5a8c",
        "input-selection-background": "#3a5a8c 25%",
        "block-cursor-text-style": "none",
    },
)

dusk = Theme(
    name="dusk",
    primary="#B48EAD",
    secondary="#8F6F9E",
    accent="#EBCB8B",
    foreground="#ECE4F0",
    background="#1C1726",
    success="#A3BE8C",
    warning="#EBCB8B",
    error="#BF616A",
    surface="#241E31",
    panel="#2E263D",
    dark=True,
    variables={
        "footer-key-foreground": "#b48ead",
        "input-selection-background": "#8f6f9e 35%",
        "block-cursor-text-style": "none",
    },
)

ALL_THEMES = [meadow, notebook, dusk]
DEFAULT_THEME = meadow.name
