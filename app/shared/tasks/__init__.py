# -*- coding: utf-8 -*-
"""
backend/app/shared/tasks/__init__.py

Tareas diferidas (post-respuesta) con entrega at-least-once.
"""

from .task_queue import DeferredTaskQueue, Job, JobHandler

__all__ = ["DeferredTaskQueue", "Job", "JobHandler"]
