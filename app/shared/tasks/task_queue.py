# -*- coding: utf-8 -*-
"""
backend/app/shared/tasks/task_queue.py

Cola de tareas diferidas en proceso (asyncio) con entrega at-least-once.

- Cada job tiene un job_id estable; los handlers DEBEN ser idempotentes.
- Un job que levanta excepción se reintenta en el mismo worker con backoff
  exponencial hasta `max_attempts`; después se registra como "dead"
  (log ERROR) para reconciliación manual.
- Registro de jobs en vuelo (job_id → asyncio.Task) para cancelación ordenada
  en shutdown.
- Modo `inline`: enqueue() ejecuta el job en el acto (tests / scripts), con la
  misma política de reintentos.

Autor: CourseMart
Fecha: 2026-03-04
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

JobHandler = Callable[..., Awaitable[Any]]


@dataclass
class Job:
    job_id: str
    handler: JobHandler
    kwargs: Dict[str, Any] = field(default_factory=dict)
    attempts: int = 0


class DeferredTaskQueue:
    """Cola con N workers, reintentos y registro de tasks activas."""

    def __init__(
        self,
        *,
        workers: int = 2,
        max_attempts: int = 5,
        backoff_seconds: float = 1.0,
        inline: bool = False,
    ):
        self.workers = max(1, workers)
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.inline = inline
        self._queue: Optional[asyncio.Queue[Job]] = None
        self._worker_tasks: List[asyncio.Task] = []
        self._active: Dict[str, asyncio.Task] = {}
        self.dead_jobs: List[str] = []
        self.completed = 0

    # ------------------------------------------------------------------ #
    # Ciclo de vida
    # ------------------------------------------------------------------ #
    @property
    def is_running(self) -> bool:
        return bool(self._worker_tasks)

    async def start(self) -> None:
        if self.inline or self.is_running:
            return
        self._queue = asyncio.Queue()
        for i in range(self.workers):
            self._worker_tasks.append(
                asyncio.create_task(self._worker(i), name=f"deferred-worker-{i}")
            )
        logger.info("DeferredTaskQueue: %d workers iniciados", self.workers)

    async def stop(self, timeout: float = 30.0) -> None:
        """Espera a que se vacíe la cola (hasta `timeout`) y cancela workers."""
        if not self.is_running:
            return
        assert self._queue is not None
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "DeferredTaskQueue: timeout (%ss) con %d jobs pendientes",
                timeout,
                self._queue.qsize(),
            )
        for task in self._worker_tasks:
            task.cancel()
        await asyncio.gather(*self._worker_tasks, return_exceptions=True)
        self._worker_tasks.clear()
        self._active.clear()
        logger.info("DeferredTaskQueue: detenida")

    async def drain(self) -> None:
        """Bloquea hasta que no queden jobs en la cola (tests)."""
        if self._queue is not None:
            await self._queue.join()

    def get_active_count(self) -> int:
        return len([t for t in self._active.values() if not t.done()])

    # ------------------------------------------------------------------ #
    # Encolado
    # ------------------------------------------------------------------ #
    async def enqueue(self, job_id: str, handler: JobHandler, **kwargs: Any) -> None:
        job = Job(job_id=job_id, handler=handler, kwargs=kwargs)
        if self.inline:
            await self._run_with_retries(job)
            return
        if not self.is_running:
            await self.start()
        assert self._queue is not None
        await self._queue.put(job)
        logger.debug("DeferredTaskQueue: job encolado job_id=%s", job_id)

    async def _run_with_retries(self, job: Job) -> None:
        while True:
            if await self._execute(job):
                return
            if job.attempts >= self.max_attempts:
                self._mark_dead(job)
                return
            await asyncio.sleep(self._backoff(job.attempts))

    # ------------------------------------------------------------------ #
    # Workers
    # ------------------------------------------------------------------ #
    async def _worker(self, index: int) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                task = asyncio.current_task()
                if task is not None:
                    self._active[job.job_id] = task
                await self._run_with_retries(job)
            finally:
                self._active.pop(job.job_id, None)
                self._queue.task_done()

    async def _execute(self, job: Job) -> bool:
        job.attempts += 1
        try:
            await job.handler(**job.kwargs)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning(
                "DeferredTaskQueue: job falló job_id=%s intento=%d/%d",
                job.job_id,
                job.attempts,
                self.max_attempts,
                exc_info=True,
            )
            return False
        self.completed += 1
        logger.debug("DeferredTaskQueue: job completado job_id=%s", job.job_id)
        return True

    def _backoff(self, attempts: int) -> float:
        return self.backoff_seconds * (2 ** (attempts - 1))

    def _mark_dead(self, job: Job) -> None:
        self.dead_jobs.append(job.job_id)
        logger.error(
            "DeferredTaskQueue: job descartado tras %d intentos job_id=%s",
            job.attempts,
            job.job_id,
        )


__all__ = ["DeferredTaskQueue", "Job", "JobHandler"]

# Fin del archivo backend/app/shared/tasks/task_queue.py
