"""Examples demonstrating the block progress bar options"""

import sys
import time
import random
import threading

from block_bario import (
    block_progress,
    BlockProgressBar,
    Color,
    FontStyle,
)


def example_0():
    print("=== Example 0: Iterable wrapper ===")

    for i in block_progress(range(1, 100 + 1), bar_width=50, prefix_text="Processing items "):
        time.sleep(0.02)


def example_1():
    print("=== Example 1: Colors and font styles ===")

    bar = BlockProgressBar(
        bar_width=60,
        foreground_color=Color.GREEN,
        font_styles=[FontStyle.BOLD],
        prefix_text="Downloading ",
    )
    progress = 0.0
    while not bar.is_completed():
        progress += random.uniform(0.1, 1.5)
        bar.set_progress(progress)
        time.sleep(0.02)


def example_2():
    print("=== Example 2: Elapsed and remaining time ===")

    bar = BlockProgressBar(
        bar_width=40,
        foreground_color=Color.YELLOW,
        show_elapsed_time=True,
        show_remaining_time=True,
        max_progress=250,
    )
    for i in range(250):
        bar.set_option('postfix_text', f"item {i + 1}/250")
        bar.tick()
        time.sleep(0.01)
    bar.mark_as_completed()


def example_3():
    print("=== Example 3: Ticking from threads ===")

    bar = BlockProgressBar(bar_width=40, max_progress=400, foreground_color=Color.CYAN,
                           show_elapsed_time=True, stream=sys.stderr)

    def worker():
        for _ in range(100):
            time.sleep(random.uniform(0.001, 0.02))
            bar.tick()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    bar.mark_as_completed()


def example_4():
    print("=== Example 4: Bars drawn by a coordinator ===")

    bars = [
        BlockProgressBar(bar_width=30, max_progress=random.randint(50, 150), prefix_text=f"Task {i} ")
        for i in range(3)
    ]
    for bar in bars:
        bar.set_managed(True)

    def worker(bar):
        while not bar.is_completed():
            bar.tick()
            time.sleep(random.uniform(0.005, 0.03))

    threads = [threading.Thread(target=worker, args=(bar,)) for bar in bars]
    for t in threads:
        t.start()

    first = True
    while True:
        done = all(bar.is_completed() for bar in bars)
        if not first:
            sys.stdout.write('\033[F' * len(bars))
        first = False
        for bar in bars:
            bar.print_progress(from_coordinator=True)
            sys.stdout.write('\n')
        sys.stdout.flush()
        if done:
            break
        time.sleep(0.05)

    for t in threads:
        t.join()


if __name__ == "__main__":
    import logging

    logging.basicConfig(level=logging.DEBUG)

    for i in range(0, 4 + 1):
        if i != 0:
            time.sleep(1)
        globals()[f"example_{i}"]()
