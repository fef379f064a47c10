"""
Dependency Injection Container.

Este módulo proporciona el contenedor de inyección de dependencias
que gestiona todas las instancias de servicios, repositorios y casos de uso.

Clean Architecture: Este contenedor vive en la capa más externa y es el único
lugar donde se crean dependencias concretas.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

# Domain
from wavepulse.domain.repositories.signal_repository import ISignalRepository
from wavepulse.domain.services.dedup_gate import DedupGate
from wavepulse.domain.services.indicator_calculator import IndicatorParams
from wavepulse.domain.services.pullback_evaluator import PullbackEvaluator
from wavepulse.domain.services.risk_calculator import RiskCalculator, RiskConfig
from wavepulse.domain.services.signal_evaluator import ISignalEvaluator, SignalRulesConfig
from wavepulse.domain.services.wavetrend_evaluator import WaveTrendConfluenceEvaluator

# Application
from wavepulse.application.ports.candle_source import ICandleSource
from wavepulse.application.services.signal_poller import SignalPoller
from wavepulse.application.use_cases.signal_pipeline import SignalPipeline

# Shared
from wavepulse.shared.config.settings import Settings

# Estrategias disponibles (settings.signal_strategy)
EVALUATORS: Dict[str, Type[ISignalEvaluator]] = {
    "wavetrend": WaveTrendConfluenceEvaluator,
    "pullback": PullbackEvaluator,
}


@dataclass
class Container:
    """
    Contenedor de Inyección de Dependencias.

    Gestiona el ciclo de vida de todas las dependencias de la aplicación.
    Las capas internas dependen de abstracciones, no de implementaciones.
    """

    # Configuración
    settings: Settings = field(default_factory=Settings)

    # Repositorios / ports (implementaciones concretas)
    _signal_repository: Optional[ISignalRepository] = None
    _candle_source: Optional[ICandleSource] = None
    _db_manager: Optional[Any] = None

    # Domain Services
    _signal_evaluator: Optional[ISignalEvaluator] = None
    _risk_calculator: Optional[RiskCalculator] = None
    _dedup_gate: Optional[DedupGate] = None

    # Application
    _signal_pipeline: Optional[SignalPipeline] = None
    _signal_poller: Optional[SignalPoller] = None

    # ==================== Domain Services ====================

    @property
    def indicator_params(self) -> IndicatorParams:
        return IndicatorParams.from_settings(self.settings)

    @property
    def rules_config(self) -> SignalRulesConfig:
        return SignalRulesConfig.from_settings(self.settings)

    @property
    def risk_calculator(self) -> RiskCalculator:
        """Obtiene o crea RiskCalculator (singleton)."""
        if self._risk_calculator is None:
            self._risk_calculator = RiskCalculator(RiskConfig.from_settings(self.settings))
        return self._risk_calculator

    @property
    def dedup_gate(self) -> DedupGate:
        if self._dedup_gate is None:
            self._dedup_gate = DedupGate()
        return self._dedup_gate

    @property
    def signal_evaluator(self) -> ISignalEvaluator:
        """Estrategia elegida por settings.signal_strategy."""
        if self._signal_evaluator is None:
            strategy = self.settings.signal_strategy
            if strategy not in EVALUATORS:
                raise ValueError(
                    f"Estrategia desconocida: {strategy!r} "
                    f"(disponibles: {', '.join(sorted(EVALUATORS))})"
                )
            self._signal_evaluator = EVALUATORS[strategy](
                params=self.indicator_params,
                config=self.rules_config,
                risk_calculator=self.risk_calculator,
            )
        return self._signal_evaluator

    # ==================== Infrastructure ====================

    @property
    def db_manager(self):
        """DatabaseManager (solo si db_enabled)."""
        if self._db_manager is None:
            # Import aquí para no cargar SQLAlchemy si la BD está deshabilitada
            from wavepulse.infrastructure.persistence.database import DatabaseManager
            self._db_manager = DatabaseManager(self.settings)
        return self._db_manager

    @property
    def signal_repository(self) -> ISignalRepository:
        """SQL si la BD está habilitada, buffer en memoria si no."""
        if self._signal_repository is None:
            if self.settings.db_enabled:
                from wavepulse.infrastructure.persistence.repositories.signal_repository_impl import (
                    SqlSignalRepository,
                )
                self._signal_repository = SqlSignalRepository(
                    self.db_manager, self.settings.symbol,
                )
            else:
                from wavepulse.infrastructure.persistence.repositories.in_memory_signal_repository import (
                    InMemorySignalRepository,
                )
                self._signal_repository = InMemorySignalRepository(
                    maxlen=self.settings.history_buffer_size,
                )
        return self._signal_repository

    @property
    def candle_source(self) -> ICandleSource:
        if self._candle_source is None:
            from wavepulse.infrastructure.external.bybit_adapter import BybitKlineAdapter
            self._candle_source = BybitKlineAdapter(self.settings)
        return self._candle_source

    # ==================== Use Cases ====================

    @property
    def signal_pipeline(self) -> SignalPipeline:
        """Pipeline único por símbolo: dueño del EngineState."""
        if self._signal_pipeline is None:
            self._signal_pipeline = SignalPipeline(
                evaluator=self.signal_evaluator,
                repository=self.signal_repository,
                candle_source=self.candle_source,
                dedup_gate=self.dedup_gate,
                symbol=self.settings.symbol,
            )
        return self._signal_pipeline

    @property
    def signal_poller(self) -> SignalPoller:
        if self._signal_poller is None:
            self._signal_poller = SignalPoller(
                self.signal_pipeline,
                interval_seconds=self.settings.poll_interval_seconds,
            )
        return self._signal_poller

    # ==================== Lifecycle ====================

    def reset(self) -> None:
        """Resetea todas las instancias (útil para tests)."""
        self._signal_repository = None
        self._candle_source = None
        self._db_manager = None
        self._signal_evaluator = None
        self._risk_calculator = None
        self._dedup_gate = None
        self._signal_pipeline = None
        self._signal_poller = None

    def override(self, name: str, instance: Any) -> None:
        """
        Override una dependencia (útil para tests con mocks).

        Args:
            name: Nombre de la dependencia (ej: 'signal_repository')
            instance: Instancia a usar
        """
        attr_name = f"_{name}"
        if hasattr(self, attr_name):
            setattr(self, attr_name, instance)
        else:
            raise ValueError(f"Unknown dependency: {name}")


# ==================== Global Container ====================

_container: Optional[Container] = None


def get_container() -> Container:
    """Obtiene la instancia global del contenedor."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Resetea el contenedor global."""
    global _container
    if _container is not None:
        _container.reset()
    _container = None


def init_container(settings: Optional[Settings] = None) -> Container:
    """
    Inicializa el contenedor con configuración específica.

    Args:
        settings: Configuración opcional. Si es None, usa valores por defecto.
    """
    global _container
    if settings is None:
        settings = Settings()
    _container = Container(settings=settings)
    return _container


def create_test_container(settings: Optional[Settings] = None, **overrides) -> Container:
    """
    Crea un contenedor con dependencias sustituidas.

    Ejemplo:
        container = create_test_container(
            candle_source=stub_source,
            signal_repository=InMemorySignalRepository(),
        )
    """
    container = Container(settings=settings or Settings())
    for name, instance in overrides.items():
        container.override(name, instance)
    return container
