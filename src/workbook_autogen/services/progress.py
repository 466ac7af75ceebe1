from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display over pipeline steps with tqdm (TTY only).

In non-TTY environments (CI, the platform's agent runtime) no bar is created so
the log stream stays free of ANSI control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Step progress bar for one job pipeline."""

    def __init__(self, total_steps: int, *, description: str = "Creating workbook") -> None:
        self.total_steps = total_steps
        self.description = description
        self.current_step = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_steps,
                desc=description,
                unit="step",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_step(self, step_name: str) -> None:
        self.current_step += 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({step_name})")

    def finish_step(self, success: bool = True) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            if not success:
                self.pbar.set_postfix(status="failed")

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
