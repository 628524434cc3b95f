"""In-process model of the editor host.

The monitor only ever talks to the host through this surface: event sources
it can subscribe to, the active editor, diagnostics lookup, commands, and
user notifications. A real editor integration feeds events into an
`EditorHost` by calling `fire(...)` on its event sources.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, List, Optional

from utils.errors import log_error
from utils.logging import log

__all__ = [
    "Disposable",
    "Event",
    "TextDocument",
    "TextEditor",
    "DecorationType",
    "SelectionChangeKind",
    "SelectionChangeEvent",
    "DiagnosticSeverity",
    "Diagnostic",
    "DiagnosticChangeEvent",
    "ProcessKind",
    "ProcessEndEvent",
    "ConfigurationChangeEvent",
    "EditorHost",
]


class Disposable:
    """Wraps a cleanup callback; `dispose()` runs it at most once."""

    def __init__(self, on_dispose: Optional[Callable[[], None]] = None):
        self._on_dispose = on_dispose
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        if self._on_dispose is not None:
            self._on_dispose()


class Event:
    """A host event source.

    Listeners are called one at a time in subscription order. A listener that
    returns an awaitable has it scheduled as a task; a listener that raises is
    logged and does not stop delivery to the others.
    """

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable[[Any], Any]] = []
        self._tasks: set[asyncio.Task] = set()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[Any], Any]) -> Disposable:
        self._listeners.append(listener)

        def _remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return Disposable(_remove)

    def fire(self, payload: Any = None) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(payload)
            except Exception as exc:
                log_error(f"[Host] Listener for '{self.name}' failed.", exc)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)


@dataclass(frozen=True)
class TextDocument:
    uri: str


class DecorationType(Disposable):
    """Handle for an overlay decoration created by the host.

    Disposing it removes it from every editor it was applied to.
    """

    def __init__(self, options: Dict[str, Any]):
        super().__init__(self._release)
        self.options = options
        self._editors: List["TextEditor"] = []

    def _release(self) -> None:
        editors, self._editors = self._editors, []
        for editor in editors:
            editor.forget_decoration(self)


@dataclass
class TextEditor:
    document: TextDocument
    decorations: Dict[int, List[int]] = field(default_factory=dict)
    _types: Dict[int, DecorationType] = field(default_factory=dict, repr=False)

    def set_decorations(self, decoration: DecorationType, lines: List[int]) -> None:
        """Apply `decoration` on `lines`; an empty list removes it."""
        if decoration.disposed or not lines:
            self.forget_decoration(decoration)
            return
        key = id(decoration)
        self._types[key] = decoration
        self.decorations[key] = list(lines)
        if not any(e is self for e in decoration._editors):
            decoration._editors.append(self)

    def forget_decoration(self, decoration: DecorationType) -> None:
        key = id(decoration)
        self._types.pop(key, None)
        self.decorations.pop(key, None)

    def visible_decorations(self) -> List[DecorationType]:
        """Decorations applied to this editor that have not been disposed."""
        return [
            d for key, d in self._types.items()
            if not d.disposed and self.decorations.get(key)
        ]


class SelectionChangeKind(IntEnum):
    KEYBOARD = 1
    MOUSE = 2
    COMMAND = 3


@dataclass(frozen=True)
class SelectionChangeEvent:
    editor: Optional[TextEditor]
    kind: Optional[SelectionChangeKind] = None


class DiagnosticSeverity(IntEnum):
    ERROR = 0
    WARNING = 1
    INFORMATION = 2
    HINT = 3


@dataclass(frozen=True)
class Diagnostic:
    severity: DiagnosticSeverity
    line: int
    message: str = ""


@dataclass(frozen=True)
class DiagnosticChangeEvent:
    uris: tuple[str, ...] = ()


class ProcessKind(str, Enum):
    TASK = "task"
    DEBUG = "debug"
    SHELL = "shell"


@dataclass(frozen=True)
class ProcessEndEvent:
    kind: ProcessKind
    exit_code: Optional[int]


@dataclass(frozen=True)
class ConfigurationChangeEvent:
    sections: tuple[str, ...] = ()

    def affects_configuration(self, section: str) -> bool:
        return any(
            s == section or s.startswith(section + ".") or section.startswith(s + ".")
            for s in self.sections
        )


class EditorHost:
    """The editor the companion runs inside.

    The terminal shell-execution event only exists when the host was built
    with shell integration; callers probe for it with `getattr`.
    """

    def __init__(self, *, shell_integration: bool = False):
        self.on_did_change_text_document = Event("didChangeTextDocument")
        self.on_did_change_active_text_editor = Event("didChangeActiveTextEditor")
        self.on_did_change_text_editor_selection = Event("didChangeTextEditorSelection")
        self.on_did_change_diagnostics = Event("didChangeDiagnostics")
        self.on_did_end_task_process = Event("didEndTaskProcess")
        self.on_did_terminate_debug_session = Event("didTerminateDebugSession")
        self.on_did_change_configuration = Event("didChangeConfiguration")
        if shell_integration:
            self.on_did_end_terminal_shell_execution = Event("didEndTerminalShellExecution")

        self.active_text_editor: Optional[TextEditor] = None
        self._diagnostics: Dict[str, List[Diagnostic]] = {}
        self._commands: Dict[str, Callable[..., Any]] = {}
        self.error_messages: List[str] = []
        self.info_messages: List[str] = []

    # --- editors ---

    def open_editor(self, uri: str) -> TextEditor:
        """Make a new editor for `uri` the active one and fire the switch event."""
        editor = TextEditor(TextDocument(uri))
        self.active_text_editor = editor
        self.on_did_change_active_text_editor.fire(editor)
        return editor

    def create_decoration_type(self, options: Dict[str, Any]) -> DecorationType:
        return DecorationType(options)

    # --- diagnostics ---

    def get_diagnostics(self, uri: str) -> List[Diagnostic]:
        return list(self._diagnostics.get(uri, []))

    def set_diagnostics(self, uri: str, diagnostics: List[Diagnostic]) -> None:
        """Replace the diagnostics of a document, keeping document order, and fire the change."""
        self._diagnostics[uri] = sorted(diagnostics, key=lambda d: d.line)
        self.on_did_change_diagnostics.fire(DiagnosticChangeEvent((uri,)))

    # --- commands ---

    def register_command(self, name: str, callback: Callable[..., Any]) -> Disposable:
        if name in self._commands:
            raise ValueError(f"Command already registered: {name}")
        self._commands[name] = callback
        return Disposable(lambda: self._commands.pop(name, None))

    async def execute_command(self, name: str, *args: Any) -> Any:
        callback = self._commands.get(name)
        if callback is None:
            raise KeyError(f"Unknown command: {name}")
        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    # --- notifications ---

    def show_error_message(self, message: str) -> None:
        self.error_messages.append(message)
        log(f"[Host] ERROR popup: {message}")

    def show_information_message(self, message: str) -> None:
        self.info_messages.append(message)
        log(f"[Host] Info popup: {message}")
