"""Domain services - Pure business logic with no external dependencies."""
from wavepulse.domain.services.dedup_gate import DedupGate
from wavepulse.domain.services.indicator_calculator import IndicatorCalculator, IndicatorParams
from wavepulse.domain.services.pullback_evaluator import PullbackEvaluator
from wavepulse.domain.services.risk_calculator import RiskCalculator, RiskConfig, RiskLevels
from wavepulse.domain.services.signal_evaluator import ISignalEvaluator, SignalRulesConfig
from wavepulse.domain.services.wavetrend_evaluator import WaveTrendConfluenceEvaluator

__all__ = [
    "DedupGate",
    "IndicatorCalculator",
    "IndicatorParams",
    "ISignalEvaluator",
    "PullbackEvaluator",
    "RiskCalculator",
    "RiskConfig",
    "RiskLevels",
    "SignalRulesConfig",
    "WaveTrendConfluenceEvaluator",
]
