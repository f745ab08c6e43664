# -*- coding: utf-8 -*-
"""
backend/app/shared/__init__.py

Infraestructura compartida de CourseMart: configuración, base de datos,
caché, cola diferida, notificaciones, email y middlewares HTTP.

Los subpaquetes se importan explícitamente; este módulo no crea settings
ni conexiones al importarse.
"""

__all__: list[str] = []
