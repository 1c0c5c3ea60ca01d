# -*- coding: utf-8 -*-
"""
Block Bario – A thread-safe block progress bar for the terminal.
Copyright (c) 2025 Igor Iatsenko
Licensed under the MIT License.
"""

import sys
import math
import numbers
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from typing import (
        Optional,
        List,
        Callable,
        Any,
        Iterable,
        Iterator,
        Union,
        TextIO,
)
from enum import Enum
import logging

__all__ = [
    'block_progress',
    'BlockProgressBar',
    'Settings',
    'Option',
    'Color',
    'FontStyle',
    'Colors',
    'write_block_scale',
]

logger = logging.getLogger('block-bario')


# ============================================================================
# Terminal utilities
# ============================================================================

class Color(Enum):
    """Foreground colors understood by the bar"""
    GREY = 'grey'
    RED = 'red'
    GREEN = 'green'
    YELLOW = 'yellow'
    BLUE = 'blue'
    MAGENTA = 'magenta'
    CYAN = 'cyan'
    WHITE = 'white'
    UNSPECIFIED = 'unspecified'


class FontStyle(Enum):
    """Font styles understood by the bar"""
    BOLD = 'bold'
    DARK = 'dark'
    ITALIC = 'italic'
    UNDERLINE = 'underline'
    BLINK = 'blink'
    REVERSE = 'reverse'
    CONCEALED = 'concealed'
    CROSSED = 'crossed'


class Colors:
    """ANSI color codes and utilities"""
    # Reset
    RESET = '\033[0m'

    # Basic colors (3/4 bit)
    GREY = '\033[30m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    # Styles
    BOLD = '\033[1m'
    DARK = '\033[2m'
    ITALIC = '\033[3m'
    UNDERLINE = '\033[4m'
    BLINK = '\033[5m'
    REVERSE = '\033[7m'
    CONCEALED = '\033[8m'
    CROSSED = '\033[9m'

    @staticmethod
    def for_color(color: Color) -> str:
        """Escape sequence for a foreground color ('' when unspecified)"""
        if color is Color.UNSPECIFIED:
            return ''
        return getattr(Colors, color.name)

    @staticmethod
    def for_style(style: FontStyle) -> str:
        """Escape sequence for a font style"""
        return getattr(Colors, style.name)


def _reset_style(stream: TextIO):
    stream.write(Colors.RESET)


# ============================================================================
# Block scale
# ============================================================================

FULL_BLOCK = '█'

# Index i is a cell filled i/8 of the way
BLOCK_FRACTIONS = [' ', '▏', '▎', '▍', '▌', '▋', '▊', '▉', '█']


def write_block_scale(percent: float, width: int) -> str:
    """
    Render a bar of exactly ``width`` cells for ``percent`` in [0, 100].

    Each cell is split in eighths, so the partial cell after the full blocks
    shows how far the next cell is filled.
    """
    if width <= 0:
        return ''

    percent = min(100.0, max(0.0, float(percent)))
    filled = percent / 100 * width
    full_cells = int(math.floor(filled))

    if full_cells >= width:
        return FULL_BLOCK * width

    remainder = filled - full_cells
    fraction_index = min(len(BLOCK_FRACTIONS) - 1, max(0, int(remainder * 8 + 0.5)))
    lead = BLOCK_FRACTIONS[fraction_index]

    return FULL_BLOCK * full_cells + lead + ' ' * (width - full_cells - 1)


# ============================================================================
# Configuration
# ============================================================================

class Option(Enum):
    """Names of the options a bar can be configured with"""
    FOREGROUND_COLOR = 'foreground_color'
    BAR_WIDTH = 'bar_width'
    START = 'start'
    END = 'end'
    PREFIX_TEXT = 'prefix_text'
    POSTFIX_TEXT = 'postfix_text'
    SHOW_PERCENTAGE = 'show_percentage'
    SHOW_ELAPSED_TIME = 'show_elapsed_time'
    SHOW_REMAINING_TIME = 'show_remaining_time'
    COMPLETED = 'completed'
    SAVED_START_TIME = 'saved_start_time'
    MAX_POSTFIX_TEXT_LEN = 'max_postfix_text_len'
    FONT_STYLES = 'font_styles'
    MAX_PROGRESS = 'max_progress'
    STREAM = 'stream'


_DEFAULT_MAX_POSTFIX_TEXT_LEN = 10

_BOOL_OPTIONS = {
    Option.SHOW_PERCENTAGE,
    Option.SHOW_ELAPSED_TIME,
    Option.SHOW_REMAINING_TIME,
    Option.COMPLETED,
    Option.SAVED_START_TIME,
}
_STR_OPTIONS = {Option.START, Option.END, Option.PREFIX_TEXT, Option.POSTFIX_TEXT}
_INT_OPTIONS = {Option.BAR_WIDTH, Option.MAX_POSTFIX_TEXT_LEN}


def _validate_option(option: Option, value: Any) -> Any:
    """Check value against the option's type and range, return the value to store"""
    name = option.value

    if option in _BOOL_OPTIONS:
        if not isinstance(value, bool):
            raise TypeError(f"{name} must be a bool, got {type(value).__name__}")
    elif option in _STR_OPTIONS:
        if not isinstance(value, str):
            raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    elif option in _INT_OPTIONS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} must be an int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"{name} must be non-negative")
    elif option is Option.FOREGROUND_COLOR:
        if not isinstance(value, Color):
            raise TypeError(f"{name} must be a Color, got {type(value).__name__}")
    elif option is Option.FONT_STYLES:
        if not isinstance(value, (list, tuple)) or not all(isinstance(s, FontStyle) for s in value):
            raise TypeError(f"{name} must be a list of FontStyle")
        value = list(value)
    elif option is Option.MAX_PROGRESS:
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise TypeError(f"{name} must be a number, got {type(value).__name__}")
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite")
        if not value > 0:
            raise ValueError(f"{name} must be positive")
    elif option is Option.STREAM:
        if not (callable(getattr(value, 'write', None)) and callable(getattr(value, 'flush', None))):
            raise TypeError(f"{name} must provide write() and flush()")

    return value


def _to_option(name: Union[str, Option]) -> Option:
    if isinstance(name, Option):
        return name
    try:
        return Option(name)
    except ValueError:
        raise TypeError(f"Unknown option '{name}'") from None


@dataclass
class Settings:
    """Display options of a block progress bar"""
    foreground_color: Color = Color.UNSPECIFIED
    bar_width: int = 100
    start: str = '['
    end: str = ']'
    prefix_text: str = ''
    postfix_text: str = ''
    show_percentage: bool = True
    show_elapsed_time: bool = False
    show_remaining_time: bool = False
    completed: bool = False
    saved_start_time: bool = False
    max_postfix_text_len: int = 0
    font_styles: List[FontStyle] = field(default_factory=list)
    max_progress: float = 100
    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def __post_init__(self):
        for f in fields(self):
            option = Option(f.name)
            setattr(self, f.name, _validate_option(option, getattr(self, f.name)))

        if self.max_postfix_text_len == 0:
            self.max_postfix_text_len = _DEFAULT_MAX_POSTFIX_TEXT_LEN
        self.max_postfix_text_len = max(self.max_postfix_text_len, len(self.postfix_text))

    def set(self, name: Union[str, Option], value: Any):
        """Validate and store one option"""
        option = _to_option(name)
        value = _validate_option(option, value)

        if option is Option.MAX_POSTFIX_TEXT_LEN:
            value = max(self.max_postfix_text_len, value)
        elif option is Option.COMPLETED:
            # Completion is final
            value = self.completed or value

        setattr(self, option.value, value)

        if option is Option.POSTFIX_TEXT:
            self.max_postfix_text_len = max(self.max_postfix_text_len, len(value))


# ============================================================================
# Time tracking
# ============================================================================

class _TimeTracker:
    """Lazily captured start time and the durations derived from it"""

    def __init__(self):
        self.start_time: Optional[datetime] = None

    def save_start_time_if_needed(self, settings: Settings):
        if (settings.show_elapsed_time or settings.show_remaining_time) and not settings.saved_start_time:
            self.start_time = datetime.now()
            settings.saved_start_time = True

    def elapsed(self) -> timedelta:
        if self.start_time is None:
            return timedelta(0)
        return datetime.now() - self.start_time

    def remaining(self, progress: float, max_progress: float,
                  elapsed: Optional[timedelta] = None) -> Optional[timedelta]:
        """Distance between elapsed time and the estimate, None when the estimate overflows"""
        if elapsed is None:
            elapsed = self.elapsed()
        try:
            eta = elapsed * (max_progress / progress) if progress > 0 else timedelta(0)
        except OverflowError:
            return None
        return abs(eta - elapsed)


def _format_duration(delta: timedelta) -> str:
    """Format as MM:SSs, growing HH: and DDd: prefixes when needed"""
    seconds = int(delta.total_seconds())
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    prefix = ''
    if days > 0:
        prefix += '{:02d}d:'.format(days)
    if hours > 0:
        prefix += '{:02d}:'.format(hours)
    return prefix + '{:02d}:{:02d}s'.format(minutes, seconds)


_PLACEHOLDER_DURATION = '00:00s'


# ============================================================================
# Block Progress Bar
# ============================================================================

class BlockProgressBar:
    """Single-line progress bar drawn with eighth-cell block glyphs"""

    def __init__(self,
                 on_update: Optional[Callable[[int, float], None]] = None,
                 on_complete: Optional[Callable[[], None]] = None,
                 **options):
        """
        Create a block progress bar.

        Args:
            on_update: Callback after every progress change (current, progress)
            on_complete: Callback when the bar becomes completed
            **options: Display options, see ``Settings`` for names and defaults
        """
        unknown = set(options) - {o.value for o in Option}
        if unknown:
            raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")

        self.settings = Settings(**options)
        self.on_update = on_update
        self.on_complete = on_complete

        self._progress = 0.0
        self._managed = False
        self._time_tracker = _TimeTracker()
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.is_completed():
            self.mark_as_completed()
        return False

    @contextmanager
    def lock(self):
        """Context manager for thread-safe operations"""
        with self._lock:
            yield self._lock

    @property
    def progress(self) -> float:
        """Raw progress value, may exceed max_progress"""
        return self._progress

    def set_option(self, name: Union[str, Option], value: Any):
        """Update one display option"""
        with self.lock():
            self.settings.set(name, value)

    def set_progress(self, value: float):
        """Replace the progress value and redraw"""
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise TypeError(f"progress must be a number, got {type(value).__name__}")
        if not math.isfinite(value):
            raise ValueError("progress must be finite")
        if value < 0:
            raise ValueError("progress must be non-negative")

        with self.lock():
            was_completed = self.settings.completed
            self._progress = float(value)
            self._time_tracker.save_start_time_if_needed(self.settings)
            self._print_progress_internal()
            just_completed = not was_completed and self.settings.completed
            current = self._current_internal()
            progress = self._progress
            max_progress = self.settings.max_progress
        self._notify(just_completed, progress, max_progress, current=current)

    def tick(self):
        """Advance progress by one and redraw"""
        with self.lock():
            was_completed = self.settings.completed
            self._progress += 1
            self._time_tracker.save_start_time_if_needed(self.settings)
            self._print_progress_internal()
            just_completed = not was_completed and self.settings.completed
            current = self._current_internal()
            progress = self._progress
            max_progress = self.settings.max_progress
        self._notify(just_completed, progress, max_progress, current=current)

    def current(self) -> int:
        """Progress as an integer clamped to max_progress"""
        with self.lock():
            return self._current_internal()

    def _current_internal(self) -> int:
        return min(int(math.floor(self._progress)), int(self.settings.max_progress))

    def is_completed(self) -> bool:
        with self.lock():
            return self.settings.completed

    def mark_as_completed(self):
        """Force completion regardless of progress and redraw"""
        with self.lock():
            was_completed = self.settings.completed
            self.settings.completed = True
            self._print_progress_internal()
            just_completed = not was_completed
            progress = self._progress
            max_progress = self.settings.max_progress
        self._notify(just_completed, progress, max_progress)

    def elapsed_time(self) -> timedelta:
        """Time since the start time was saved"""
        with self.lock():
            return self._time_tracker.elapsed()

    def remaining_time(self) -> Optional[timedelta]:
        """Estimated time left, as shown by the remaining time display (None if it overflows)"""
        with self.lock():
            return self._time_tracker.remaining(self._progress, self.settings.max_progress)

    def _notify(self, just_completed: bool, progress: float, max_progress: float,
                current: Optional[int] = None):
        """Run callbacks outside the lock with values read under it"""
        if current is not None and self.on_update:
            try:
                self.on_update(current, progress)
            except Exception:
                logger.exception('on_update callback failed')

        if just_completed:
            logger.debug('Bar completed at progress %s/%s', progress, max_progress)
            if self.on_complete:
                try:
                    self.on_complete()
                except Exception:
                    logger.exception('on_complete callback failed')

    # ------------------------------------------------------------------------
    # Coordinator protocol
    # ------------------------------------------------------------------------

    @property
    def is_managed(self) -> bool:
        """Whether an external coordinator decides when this bar is drawn"""
        return self._managed

    def set_managed(self, managed: bool):
        """Hand drawing over to a coordinator (True) or take it back (False)"""
        with self.lock():
            self._managed = bool(managed)
        logger.debug('Bar %s managed mode', 'entered' if managed else 'left')

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------

    def print_progress(self, from_coordinator: bool = False):
        """
        Draw the bar on its stream, overwriting the current line.

        Args:
            from_coordinator: Set by a coordinator drawing this bar as one of
                its rows; the final reset and newline are then left to it
        """
        with self.lock():
            was_completed = self.settings.completed
            self._print_progress_internal(from_coordinator=from_coordinator)
            just_completed = not was_completed and self.settings.completed
            progress = self._progress
            max_progress = self.settings.max_progress
        self._notify(just_completed, progress, max_progress)

    def _print_progress_internal(self, from_coordinator: bool = False):
        settings = self.settings
        max_progress = settings.max_progress

        if self._managed and not from_coordinator:
            if self._progress > max_progress:
                settings.completed = True
            return

        stream = settings.stream
        stream.write(self._render_internal())
        stream.flush()

        if self._progress > max_progress:
            settings.completed = True

        if settings.completed and not from_coordinator:
            _reset_style(stream)
            stream.write('\n')
            stream.flush()

    def _render_internal(self) -> str:
        """Build the line for the current state, ending with a carriage return"""
        settings = self.settings
        progress = self._progress
        max_progress = settings.max_progress
        percent = progress / max_progress * 100

        parts = []

        if settings.foreground_color is not Color.UNSPECIFIED:
            parts.append(Colors.for_color(settings.foreground_color))
        for style in settings.font_styles:
            parts.append(Colors.for_style(style))

        parts.append(settings.prefix_text)
        parts.append(settings.start)
        parts.append(write_block_scale(percent, settings.bar_width))
        parts.append(settings.end)

        if settings.show_percentage:
            parts.append(' {}%'.format(min(100, max(0, int(percent)))))

        elapsed = self._time_tracker.elapsed()

        if settings.show_elapsed_time:
            parts.append(' [')
            parts.append(_format_duration(elapsed) if settings.saved_start_time else _PLACEHOLDER_DURATION)

        if settings.show_remaining_time:
            parts.append('<' if settings.show_elapsed_time else ' [')
            remaining = None
            if settings.saved_start_time:
                remaining = self._time_tracker.remaining(progress, max_progress, elapsed)
            parts.append(_format_duration(remaining) if remaining is not None else _PLACEHOLDER_DURATION)
            parts.append(']')
        elif settings.show_elapsed_time:
            parts.append(']')

        parts.append(' ')
        parts.append(settings.postfix_text.ljust(settings.max_postfix_text_len))
        parts.append('\r')

        return ''.join(parts)


# ============================================================================
# Convenience Functions
# ============================================================================

def block_progress(iterable: Iterable,
                   max_progress: Optional[float] = None,
                   **kwargs) -> Iterator:
    """
    Wrap an iterable to display a block progress bar automatically.

    Example:
        for item in block_progress([1, 2, 3, 4, 5], prefix_text="Processing "):
            process(item)

    Args:
        iterable: The iterable to wrap
        max_progress: Total items (auto-detected if possible); without it the
            bar stops advancing once completed
        **kwargs: Additional arguments for BlockProgressBar
    """
    if max_progress is None:
        try:
            max_progress = max(1, len(iterable))
        except TypeError:
            max_progress = 100

    with BlockProgressBar(max_progress=max_progress, **kwargs) as bar:
        for item in iterable:
            yield item
            if not bar.is_completed():
                bar.tick()
