import io
from datetime import datetime, timedelta

from block_bario import BlockProgressBar
from block_bario import _format_duration


def make_bar(**kwargs):
    stream = io.StringIO()
    return BlockProgressBar(stream=stream, bar_width=10, show_percentage=False, **kwargs), stream


def rewind(bar, seconds):
    bar._time_tracker.start_time = datetime.now() - timedelta(seconds=seconds)


def clear(stream):
    stream.seek(0)
    stream.truncate()


def test_format_duration():
    assert _format_duration(timedelta(0)) == '00:00s'
    assert _format_duration(timedelta(seconds=5)) == '00:05s'
    assert _format_duration(timedelta(minutes=12, seconds=34)) == '12:34s'
    assert _format_duration(timedelta(hours=1, minutes=2, seconds=3)) == '01:02:03s'
    assert _format_duration(timedelta(days=1, seconds=5)) == '01d:00:05s'


def test_start_time_not_saved_without_time_display():
    bar, _ = make_bar()
    bar.tick()
    assert bar.settings.saved_start_time is False
    assert bar.elapsed_time() == timedelta(0)


def test_start_time_saved_once():
    bar, _ = make_bar(show_elapsed_time=True)
    bar.tick()
    assert bar.settings.saved_start_time is True
    start = bar._time_tracker.start_time
    bar.tick()
    bar.set_progress(40)
    assert bar._time_tracker.start_time == start


def test_placeholder_before_first_update():
    bar, stream = make_bar(show_elapsed_time=True, show_remaining_time=True)
    bar.print_progress()
    assert '] [00:00s<00:00s] ' in stream.getvalue()


def test_remaining_placeholder_in_own_bracket():
    bar, stream = make_bar(show_remaining_time=True)
    bar.print_progress()
    assert '] [00:00s] ' in stream.getvalue()


def test_elapsed_time_display():
    bar, stream = make_bar(show_elapsed_time=True)
    bar.tick()
    rewind(bar, 65)
    clear(stream)
    bar.print_progress()
    assert '] [01:05s] ' in stream.getvalue()


def test_elapsed_and_remaining_display():
    bar, stream = make_bar(show_elapsed_time=True, show_remaining_time=True)
    bar.set_progress(50)
    rewind(bar, 60)
    clear(stream)
    bar.print_progress()
    assert '] [01:00s<01:00s] ' in stream.getvalue()


def test_remaining_is_absolute_difference():
    bar, _ = make_bar(show_remaining_time=True)
    bar.set_progress(200)
    rewind(bar, 60)
    # estimate is 30s, already 30s past it
    assert int(bar.remaining_time().total_seconds()) == 30


def test_remaining_is_zero_without_progress():
    bar, _ = make_bar(show_remaining_time=True)
    bar.set_progress(0)
    rewind(bar, 60)
    assert int(bar.remaining_time().total_seconds()) == 60


def test_remaining_estimate_overflow_shows_placeholder():
    bar, stream = make_bar(show_remaining_time=True)
    bar.set_progress(1e-9)
    rewind(bar, 3600)
    clear(stream)
    bar.print_progress()
    assert '] [00:00s] ' in stream.getvalue()
    assert bar.remaining_time() is None
