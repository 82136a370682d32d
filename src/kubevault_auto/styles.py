"""Custom styling for questionary prompts.

Used by the interactive context selection prompt.
"""

from questionary import Style

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#5fafff bold"),
        ("question", "bold"),
        ("answer", "fg:#ffd75f bold"),
        ("pointer", "fg:#ffd75f bold"),
        ("highlighted", "fg:#1c1c1c bg:#ffd75f bold"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
    ]
)

POINTER = "❯ "
QMARK = "? "
