import io

from block_bario import BlockProgressBar, Colors


def make_bar(**kwargs):
    stream = io.StringIO()
    return BlockProgressBar(stream=stream, bar_width=12, postfix_text='row', **kwargs), stream


def test_standalone_by_default():
    bar, _ = make_bar()
    assert not bar.is_managed


def test_managed_bar_writes_nothing_on_its_own():
    bar, stream = make_bar()
    bar.set_managed(True)
    assert bar.is_managed
    for _ in range(3):
        bar.tick()
    bar.set_progress(40)
    bar.print_progress()
    assert stream.getvalue() == ''
    assert bar.current() == 40


def test_coordinator_render_matches_standalone_line():
    managed, managed_stream = make_bar()
    managed.set_managed(True)
    for _ in range(3):
        managed.tick()
    managed.print_progress(from_coordinator=True)

    standalone, standalone_stream = make_bar()
    for _ in range(3):
        standalone.tick()
    standalone_stream.seek(0)
    standalone_stream.truncate()
    standalone.print_progress()

    assert managed_stream.getvalue() == standalone_stream.getvalue()


def test_managed_overshoot_completes_silently():
    bar, stream = make_bar()
    bar.set_managed(True)
    bar.set_progress(150)
    assert bar.is_completed()
    assert stream.getvalue() == ''


def test_coordinator_render_suppresses_final_newline():
    bar, stream = make_bar()
    bar.set_managed(True)
    bar.set_progress(150)
    bar.print_progress(from_coordinator=True)
    output = stream.getvalue()
    assert output.endswith('\r')
    assert '\n' not in output
    assert Colors.RESET not in output


def test_mark_as_completed_in_managed_mode():
    bar, stream = make_bar()
    bar.set_managed(True)
    bar.mark_as_completed()
    assert bar.is_completed()
    assert stream.getvalue() == ''


def test_leaving_managed_mode_restores_output():
    bar, stream = make_bar()
    bar.set_managed(True)
    bar.tick()
    bar.set_managed(False)
    bar.tick()
    assert stream.getvalue().count('\r') == 1
