# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/__init__.py

Módulo de pagos de CourseMart.

Este módulo gestiona:
- Checkout multi-pasarela (Razorpay, Stripe, Stripe Checkout, PayU, PayPal)
- Verificación de pagos y webhooks de proveedores
- Fulfillment: inscripciones, contadores de curso/instructor y ganancias
- Reembolsos, reintentos y cancelaciones

Estructura:
- enums: Tipos de datos (PaymentGateway, PaymentStatus, Currency, etc.)
- models: Modelos ORM (Payment, RefundRequest, Coupon, Enrollment, etc.)
- schemas: Validación y serialización Pydantic
- adapters: Un adapter por pasarela + GatewayRegistry
- services: Lógica de negocio de bajo nivel
- facades: Funciones de alto nivel (API pública)
- routes: Router FastAPI bajo /payments

Los submódulos se importan explícitamente para evitar ciclos.

Autor: CourseMart
Fecha: 2026-03-05
"""

__all__: list[str] = []

# Fin del archivo backend/app/modules/payments/__init__.py
