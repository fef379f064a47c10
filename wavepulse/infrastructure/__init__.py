"""
WavePulse – Infrastructure Layer
==================================
Implementaciones concretas de interfaces.

Este módulo contiene:
- persistence/: Base de datos (MySQL / SQLite) y repositorio en memoria
- external/: API REST de Bybit

REGLA DE DEPENDENCIA:
Esta capa implementa interfaces definidas en:
- domain/repositories/
- application/ports/

Puede importar de:
- domain/ (entidades, interfaces)
- application/ (ports)
- shared/ (config, logging)
"""
