"""
Error handling and reporting utilities for the visualgifs companion.

This module provides:
- Standardized error base class (`VisualGifsError`) for all custom exceptions
- The two collaborator failures the monitor distinguishes
  (`AssetReadFailure`, `NoActiveSurface`)
- Logging helper for error events (`log_error`)
- Editor error reporting helper (`report_editor_error`)
- Decorator that keeps listener exceptions out of host dispatch
  (`wrap_listener_errors`)

Usage Examples:
---------------

1. Raising a custom error:
	from utils.errors import AssetReadFailure
	raise AssetReadFailure("Could not read GIF.", cause=exc)

2. Logging an error with traceback:
	from utils.errors import log_error
	try:
		...
	except Exception as exc:
		log_error("Failed to process event.", exc)

3. Reporting an error to the user:
	from utils.errors import report_editor_error
	report_editor_error(host, "Could not show the GIF.", exc)

4. Wrapping a host event listener:
	from utils.errors import wrap_listener_errors

	@wrap_listener_errors
	def on_activity(self, _event=None):
		...

Not finding an asset is an ordinary outcome (the provider returns None), not
an exception.
"""

from __future__ import annotations
import asyncio
import functools
import inspect
import traceback
from typing import TYPE_CHECKING, Any, Callable, TypeVar
from utils.logging import log

if TYPE_CHECKING:
	from core.host import EditorHost

__all__ = [
	"VisualGifsError",
	"AssetReadFailure",
	"NoActiveSurface",
	"log_error",
	"report_editor_error",
	"wrap_listener_errors",
]

class VisualGifsError(Exception):
	"""Base exception for visualgifs errors."""
	def __init__(self, message: str, *, cause: Exception | None = None):
		super().__init__(message)
		self.cause = cause

class AssetReadFailure(VisualGifsError):
	"""Retrieving or reading an asset failed."""

class NoActiveSurface(VisualGifsError):
	"""There is no editor to display an overlay into."""

def log_error(message: str, exc: Exception | None = None) -> None:
	"""Log an error with traceback if available."""
	if exc:
		tb = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
		log(f"[ERROR] {message}\n{tb}")
	else:
		log(f"[ERROR] {message}")

def report_editor_error(host: "EditorHost | None", message: str, exc: Exception | None = None) -> None:
	"""Show a user-facing error notification in the editor and log details."""
	log_error(message, exc)
	if host is None:
		return
	detail = f"{message} {exc}" if exc else message
	try:
		host.show_error_message(f"visualgifs: {detail}")
	except Exception as e:
		log(f"[ERROR] Failed to show error in editor: {e}")

F = TypeVar("F", bound=Callable[..., Any])
def wrap_listener_errors(func: F) -> F:
	"""Decorator: catch and log errors raised by host event listeners."""
	if inspect.iscoroutinefunction(func):
		@functools.wraps(func)
		async def async_wrapper(*args, **kwargs):
			try:
				return await func(*args, **kwargs)
			except asyncio.CancelledError:
				raise
			except Exception as exc:
				log_error(f"Listener {func.__qualname__} failed.", exc)
		return async_wrapper  # type: ignore

	@functools.wraps(func)
	def wrapper(*args, **kwargs):
		try:
			return func(*args, **kwargs)
		except Exception as exc:
			log_error(f"Listener {func.__qualname__} failed.", exc)
	return wrapper  # type: ignore
