from pygments.style import Style
from pygments.token import Keyword, Name, Number, Punctuation, String, Token


class LogStyle(Style):
    """Muted palette for JSON `extra` payloads, legible next to colorlog's level colors."""

    styles = {
        Token: "#a8a8a8",
        Punctuation: "#6c6c6c",
        Name.Tag: "#5fafd7",
        String: "#87af87",
        String.Double: "#87af87",
        Number: "#d7af5f",
        Keyword.Constant: "#af87d7",
    }
