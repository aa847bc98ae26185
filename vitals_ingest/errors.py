"""Errores del motor de telemetría de rendimiento.

Ningún error de este módulo es fatal para el proceso:
- InvalidMeasurement: entrada mal formada, se rechaza y no se almacena.
- InvalidRange: error de programación en el rango pedido (since > until, rango <= 0).
- EmptyWindow: se pidió un análisis para una métrica sin datos en la ventana.
"""

from __future__ import annotations


class VitalsError(Exception):
    """Base para errores del motor."""


class InvalidMeasurement(VitalsError, ValueError):
    """Medición rechazada en la ingesta (name/value ausente o no numérico)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidRange(VitalsError, ValueError):
    """Rango temporal inválido."""


class EmptyWindow(VitalsError, LookupError):
    """No hay mediciones de la métrica en la ventana consultada."""

    def __init__(self, name: str):
        super().__init__(f"No measurements for metric {name!r} in window")
        self.name = name
