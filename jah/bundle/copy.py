"""Strictly sequential copy jobs for the output side of a build."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..errors import CopyFailure

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CopyJob:
    source: Path
    destination: Path
    render: Optional[Callable[[str], str]] = None

    def run(self) -> None:
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        if self.render is None:
            shutil.copyfile(self.source, self.destination)
            return
        text = self.source.read_text(encoding="utf-8")
        self.destination.write_text(self.render(text), encoding="utf-8")


@dataclass(slots=True)
class CopyQueue:
    """Runs copy jobs one at a time, in the order they were scheduled.

    The first failing job raises :class:`CopyFailure` and the remaining jobs
    are not attempted.
    """

    label: str = "files"
    jobs: List[CopyJob] = field(default_factory=list)

    def schedule(
        self,
        source: Path,
        destination: Path,
        *,
        render: Optional[Callable[[str], str]] = None,
    ) -> CopyJob:
        job = CopyJob(source=source, destination=destination, render=render)
        self.jobs.append(job)
        return job

    def __len__(self) -> int:
        return len(self.jobs)

    def run(self) -> List[Path]:
        written: List[Path] = []
        if self.jobs:
            logger.info("Copying %d %s", len(self.jobs), self.label)
        for job in self.jobs:
            verb = "Rendering" if job.render else "Copying"
            logger.info("%s %s => %s", verb, job.source, job.destination)
            try:
                job.run()
            except OSError as exc:
                raise CopyFailure(job.source, job.destination, exc) from exc
            written.append(job.destination)
        return written
