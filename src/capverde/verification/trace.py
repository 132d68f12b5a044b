"""Verification trace: the rule applications behind each top-level query."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceKind(Enum):
    START = "start"
    INFO = "info"
    END = "end"


@dataclass
class TraceEntry:
    depth: int
    message: str
    kind: TraceKind = TraceKind.INFO


@dataclass
class VerificationTrace:
    """Per-query log of rule applications, indented by recursion depth.

    Entries of nested sub-properties are recorded in the block of the
    top-level property that triggered them.
    """

    blocks: Dict[Any, List[List[TraceEntry]]] = field(default_factory=dict)
    _current: Optional[List[TraceEntry]] = field(default=None, init=False, repr=False)

    def log(self, prop: Any, message: str, depth: int, kind: TraceKind = TraceKind.INFO) -> None:
        if depth == 0 and kind is TraceKind.START:
            self._current = []
        if self._current is None:
            self._current = []
        self._current.append(TraceEntry(depth, message, kind))
        if depth == 0 and kind is TraceKind.END:
            self.blocks.setdefault(prop, []).append(self._current)
            self._current = None

    def entries(self, prop: Any) -> List[TraceEntry]:
        found: List[TraceEntry] = []
        for block in self.blocks.get(prop, []):
            found.extend(block)
        return found

    def format_trace(self, prop: Any) -> str:
        blocks = self.blocks.get(prop)
        if not blocks:
            return f"No trace recorded for {prop}"
        lines: List[str] = []
        for k, block in enumerate(blocks):
            if k:
                lines.append("")
            for entry in block:
                lines.append("     " * entry.depth + entry.message)
        return "\n".join(lines)
