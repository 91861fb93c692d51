import os
import sys
import time
from contextvars import ContextVar
from enum import Enum
from typing import Any, NamedTuple, TypeAlias

ERR = sys.stderr

# SEE: https://no-color.org/
NO_COLOR: bool = "NO_COLOR" in os.environ
COLOR: bool = "FORCE_COLOR" in os.environ or not NO_COLOR
DEBUG: bool = os.getenv("SHELF_DEBUG", "0") == "1"

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="shelf")

TContext: TypeAlias = str | int | float | bool | None


class LogType(Enum):
	Message = 0
	Event = 20


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40
	Exception = 50


LOG_LEVEL_COLOR: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}


def color(code: int, bold: bool = False) -> str:
	return f"\033[{'1' if bold else '0'};38;5;{code}m" if COLOR else ""


BOLD: str = "\033[1m" if COLOR else ""
RESET: str = "\033[0m" if COLOR else ""


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	value: Any = None
	context: dict[str, TContext] | None = None
	icon: str | None = None


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(f"{BOLD}{k}{RESET}={formatData(v)}" for k, v in value.items())
	elif isinstance(value, (list, tuple)):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	icon: str = f" {entry.icon}" if entry.icon else ""
	clr: str = color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{BOLD}[{entry.origin}] {entry.message}{RESET} {formatData(entry.value)} {formatData(entry.context)}{RESET}\n"
		)
	else:
		code: str = f" [{entry.value}]" if entry.value is not None else ""
		ERR.write(
			f"{clr}{BOLD}[{entry.origin}]{RESET}{icon}{code} {entry.message} {formatData(entry.context)}{RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	message: str,
	*,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	value: Any = None,
	origin: str | None = None,
	icon: str | None = None,
	context: dict[str, TContext],
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		value=value,
		context=context,
		icon=icon,
	)


def logged(level: LogLevel) -> bool:
	"""Tells if the given level is currently output, so that callers can
	skip building expensive log context."""
	return DEBUG or level is not LogLevel.Debug


def debug(
	message: str, *, origin: str | None = None, **context: TContext
) -> LogEntry | None:
	if not logged(LogLevel.Debug):
		return None
	return send(entry(message, level=LogLevel.Debug, origin=origin, context=context))


def info(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	**context: TContext,
) -> LogEntry:
	return send(entry(message, origin=origin, icon=icon, context=context))


def warning(
	message: str, *, origin: str | None = None, **context: TContext
) -> LogEntry:
	return send(
		entry(message, level=LogLevel.Warning, origin=origin, context=context)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	**context: TContext,
) -> LogEntry:
	return send(
		entry(
			message, level=LogLevel.Error, value=code, origin=origin, context=context
		)
	)


def event(
	name: str, value: Any = None, *, origin: str | None = None, **context: TContext
) -> LogEntry:
	return send(
		entry(name, type=LogType.Event, value=value, origin=origin, context=context)
	)


def exception(exception: BaseException, message: str | None = None) -> BaseException:
	"""Writes the exception, its traceback and its cause chain to stderr."""
	try:
		stream = ERR
		current: BaseException | None = exception
		prefix: str = "!!! EXCP"
		while current is not None:
			label = f"[{current.__class__.__name__}] {current}"
			stream.write(
				f"{prefix} {f'{message}: {label}' if message and current is exception else label}\n"
			)
			tb = current.__traceback__
			while tb:
				code = tb.tb_frame.f_code
				stream.write(
					f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
				)
				tb = tb.tb_next
			current = current.__cause__
			prefix = "... caused by"
		stream.flush()
	except Exception:  # nosec: B110
		# Logging must never raise from within an exception handler
		pass
	# So that it can be used as `raise exception(e)`
	return exception


# EOF
