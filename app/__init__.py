# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Inicializador del paquete principal 'app' del backend CourseMart.

Permite que los módulos internos se importen como 'app.*' cuando la
carpeta 'backend' está en PYTHONPATH (o el proyecto instalado con pip -e).

Autor: CourseMart
Fecha: 2026-03-02
"""

# Fin del archivo backend/app/__init__.py
