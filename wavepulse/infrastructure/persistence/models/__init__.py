"""
Infrastructure Models Package.

Modelos ORM de SQLAlchemy. Representan la estructura de la base de
datos, NO las entidades de dominio.
"""

from wavepulse.infrastructure.persistence.models.signal import SignalModel

__all__ = ["SignalModel"]
