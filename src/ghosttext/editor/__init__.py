"""In-memory host editor consumed by the autocomplete engine."""

from ghosttext.editor.editor import (
    COMMAND_PRIORITY_CRITICAL,
    COMMAND_PRIORITY_EDITOR,
    COMMAND_PRIORITY_HIGH,
    COMMAND_PRIORITY_LOW,
    COMMAND_PRIORITY_NORMAL,
    HISTORIC_TAG,
    HISTORY_MERGE_TAG,
    KEY_ARROW_RIGHT_COMMAND,
    KEY_ESCAPE_COMMAND,
    KEY_TAB_COMMAND,
    Editor,
    EditorError,
    KeyEvent,
    TouchEvent,
    merge_register,
)
from ghosttext.editor.nodes import (
    FORMAT_BOLD,
    FORMAT_CODE,
    FORMAT_ITALIC,
    FORMAT_STRIKETHROUGH,
    FORMAT_UNDERLINE,
    ROOT_KEY,
    EditorState,
    LineBreakNode,
    NodeMark,
    ParagraphNode,
    Point,
    RangeSelection,
    RootNode,
    TextNode,
    format_style,
    parse_style,
)

__all__ = [
    "COMMAND_PRIORITY_CRITICAL",
    "COMMAND_PRIORITY_EDITOR",
    "COMMAND_PRIORITY_HIGH",
    "COMMAND_PRIORITY_LOW",
    "COMMAND_PRIORITY_NORMAL",
    "Editor",
    "EditorError",
    "EditorState",
    "FORMAT_BOLD",
    "FORMAT_CODE",
    "FORMAT_ITALIC",
    "FORMAT_STRIKETHROUGH",
    "FORMAT_UNDERLINE",
    "HISTORIC_TAG",
    "HISTORY_MERGE_TAG",
    "KEY_ARROW_RIGHT_COMMAND",
    "KEY_ESCAPE_COMMAND",
    "KEY_TAB_COMMAND",
    "KeyEvent",
    "LineBreakNode",
    "NodeMark",
    "ParagraphNode",
    "Point",
    "ROOT_KEY",
    "RangeSelection",
    "RootNode",
    "TextNode",
    "TouchEvent",
    "format_style",
    "merge_register",
    "parse_style",
]
