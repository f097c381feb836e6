"""Fire-and-forget process launch.

Two implementations share one contract: ``spawn_detached`` returns as soon as
the child exists, the child outlives the parent, and its output never goes to
the parent's streams.
"""
import os
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .errors import SpawnError


class ProcessSpawner(ABC):
    def __init__(self, output_path: Optional[str] = None):
        # None discards the child's output
        self.output_path = output_path
        # Children not yet seen to exit; reap() drops the finished ones
        self.children: List[subprocess.Popen] = []

    @abstractmethod
    def detach_options(self) -> Dict[str, Any]:
        ...

    def reap(self) -> None:
        self.children = [child for child in self.children if child.poll() is None]

    def spawn_detached(self, argv: Sequence[str]) -> int:
        self.reap()
        output = None
        try:
            if self.output_path:
                output = open(self.output_path, "ab")
            process = subprocess.Popen(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=output if output is not None else subprocess.DEVNULL,
                stderr=subprocess.STDOUT if output is not None else subprocess.DEVNULL,
                close_fds=True,
                **self.detach_options(),
            )
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            raise SpawnError(f"Could not launch worker process: {exc}") from exc
        finally:
            if output is not None:
                output.close()
        self.children.append(process)
        return process.pid


class PosixSpawner(ProcessSpawner):
    """Background execution in a new session, detached from our terminal."""

    def detach_options(self) -> Dict[str, Any]:
        return {"start_new_session": True}


class WindowsSpawner(ProcessSpawner):
    """Equivalent of ``start /B``: no console, own process group."""

    DETACHED_PROCESS = getattr(subprocess, "DETACHED_PROCESS", 0x00000008)
    CREATE_NEW_PROCESS_GROUP = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0x00000200)

    def detach_options(self) -> Dict[str, Any]:
        return {"creationflags": self.DETACHED_PROCESS | self.CREATE_NEW_PROCESS_GROUP}


def default_spawner(output_path: Optional[str] = None) -> ProcessSpawner:
    if output_path is None:
        output_path = config.WORKER_OUTPUT
    if os.name == "nt":
        return WindowsSpawner(output_path)
    return PosixSpawner(output_path)
