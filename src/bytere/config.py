"""Configuration for compiling and running patterns."""

import sys
from dataclasses import dataclass
from enum import Enum


class Strategy(Enum):
    """Evaluation strategy of the virtual machine."""

    DEPTH_FIRST = "depth"
    BREADTH_FIRST = "breadth"


@dataclass(frozen=True)
class Config:
    """Configuration for the compiler and the virtual machine.

    Attributes:
        strategy: Evaluator used when none is given explicitly.
        max_address: Ceiling of the address counter. The code generator
            advances it past every emitted instruction, so the last usable
            address is one less. The VM program counter may not exceed it.
        max_offset: Ceiling of the VM string pointer.
        max_depth: Largest number of SPLITs a depth-first path may nest
            before evaluation fails with a recursion-limit error.
        warn_unreachable_end: Log a warning for patterns that need input
            after a ``$`` anchor.
    """

    strategy: Strategy = Strategy.DEPTH_FIRST
    max_address: int = sys.maxsize
    max_offset: int = sys.maxsize
    max_depth: int = 100_000
    warn_unreachable_end: bool = True

    def __post_init__(self) -> None:
        if self.max_address < 0:
            raise ValueError(f"max_address must be >= 0, got {self.max_address}")
        if self.max_offset < 0:
            raise ValueError(f"max_offset must be >= 0, got {self.max_offset}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")

    @classmethod
    def default(cls) -> "Config":
        """Create a default configuration."""
        return cls()

    @classmethod
    def breadth_first(cls) -> "Config":
        """Create a configuration that evaluates with an explicit stack."""
        return cls(strategy=Strategy.BREADTH_FIRST)
