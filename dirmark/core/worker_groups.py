from __future__ import annotations


class WorkerGroup:
    COPY_MARKED = "copy_marked"
