from contextlib import contextmanager
from time import perf_counter
from typing import Callable


@contextmanager
def timeme(label: str, report: Callable[[str], None] = print):
    """Context manager that reports how long the wrapped block takes."""
    start = perf_counter()
    try:
        yield
    finally:
        elapsed = perf_counter() - start
        report(f"{label} took {elapsed:.3f} s")
