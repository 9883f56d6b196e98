"""
Tiny Language - Configuration
Shared constants and interpreter options
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

VERSION = "0.1.0"

# Canvas dimensions
CANVAS_WIDTH = 400
CANVAS_HEIGHT = 300

# Per-statement delays set by slow() / slower() / fast()
SLOW_DELAY_MS = 300
SLOWER_DELAY_MS = 1000

# Safety limits
MAX_LOOP_ITERATIONS = 10000
MAX_CALL_DEPTH = 200

STEP_MODES = ('into', 'over')

# Color palette for graphics
COLORS = {
    'black': '#000000',
    'white': '#ffffff',
    'red': '#ff0000',
    'green': '#00ff00',
    'lime': '#00ff00',
    'blue': '#0000ff',
    'yellow': '#ffff00',
    'orange': '#ff8800',
    'purple': '#8800ff',
    'cyan': '#00ffff',
    'pink': '#ff88ff',
    'gray': '#888888',
    'grey': '#888888',
}

@dataclass(slots=True)
class Options:
    """Host-tunable interpreter settings"""
    step_delay_ms: float = 0
    step_mode: str = 'into'
    max_loop_iterations: int = MAX_LOOP_ITERATIONS
    seed: Optional[int] = None

    def __post_init__(self):
        if self.step_mode not in STEP_MODES:
            raise ValueError(f"step_mode must be one of {STEP_MODES}, got {self.step_mode!r}")
        if self.step_delay_ms < 0:
            raise ValueError("step_delay_ms must be >= 0")
        if self.max_loop_iterations < 1:
            raise ValueError("max_loop_iterations must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Options':
        """Read TINY_STEP_DELAY, TINY_STEP_MODE, TINY_LOOP_LIMIT and TINY_SEED"""
        environ = os.environ if environ is None else environ
        options = cls()
        if 'TINY_STEP_DELAY' in environ:
            options.step_delay_ms = float(environ['TINY_STEP_DELAY'])
        if 'TINY_STEP_MODE' in environ:
            options.step_mode = environ['TINY_STEP_MODE']
        if 'TINY_LOOP_LIMIT' in environ:
            options.max_loop_iterations = int(environ['TINY_LOOP_LIMIT'])
        if 'TINY_SEED' in environ:
            options.seed = int(environ['TINY_SEED'])
        options.__post_init__()
        return options
