"""
WavePulse – Settings (Pydantic BaseSettings)
============================================
Configuración centralizada cargada desde variables de entorno / .env.
Se usa pydantic-settings para validación estricta al arranque.

Los servicios de dominio NO leen este objeto directamente: reciben
dataclasses de configuración propias (IndicatorParams, SignalRulesConfig,
RiskConfig) construidas con sus métodos from_settings().
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── Bybit (fuente de velas) ────────────────────────────────────────
    bybit_base_url: str = Field(
        default="https://api-demo.bybit.com",
        description="Host REST de Bybit (demo por defecto)",
    )
    bybit_category: str = Field(default="linear", description="Categoría de producto Bybit")
    symbol: str = Field(default="DOGEUSDT", description="Par único a evaluar")
    candle_interval: str = Field(
        default="1", description="Intervalo de vela en formato Bybit (1 = 1 minuto)",
    )
    candle_limit: int = Field(
        default=200, ge=1, le=1000, description="Velas por consulta (máximo Bybit: 1000)",
    )
    fetch_timeout_seconds: float = Field(
        default=10.0, description="Timeout total de la petición de velas",
    )

    # ─── Polling ────────────────────────────────────────────────────────
    poll_interval_seconds: float = Field(
        default=10.0, gt=0, description="Cadencia del poller que invoca tick()",
    )
    poller_enabled: bool = Field(default=True, description="Arrancar el poller con la app")

    # ─── Indicadores ────────────────────────────────────────────────────
    ema_fast_period: int = Field(default=21, ge=1, description="EMA rápida (pullback)")
    ema_trend_period: int = Field(default=50, ge=1, description="EMA de tendencia")
    rsi_period: int = Field(default=14, ge=1, description="Período RSI (Wilder)")
    atr_period: int = Field(default=14, ge=1, description="Período ATR (Wilder)")
    volume_avg_period: int = Field(default=20, ge=1, description="SMA de volumen")
    wt_channel_length: int = Field(default=10, ge=1, description="WaveTrend n1 (canal)")
    wt_average_length: int = Field(default=21, ge=1, description="WaveTrend n2 (promedio)")
    wt_signal_length: int = Field(default=4, ge=1, description="WaveTrend SMA de señal")
    macd_fast_period: int = Field(default=12, ge=1)
    macd_slow_period: int = Field(default=26, ge=1)
    macd_signal_period: int = Field(default=9, ge=1)

    # ─── Signal Engine ──────────────────────────────────────────────────
    signal_strategy: str = Field(
        default="wavetrend", description="Evaluador activo: wavetrend | pullback",
    )
    signal_high_confirmations: int = Field(
        default=2, ge=1, le=2, description="Confirmaciones requeridas para nivel High",
    )
    signal_rsi_midline: float = Field(
        default=50.0, description="Umbral RSI de confirmación direccional",
    )
    signal_volume_spike_factor: float = Field(
        default=1.5, gt=0, description="volume > SMA(volume) × factor = pico de volumen",
    )
    signal_rsi_pullback_buy: float = Field(
        default=40.0, description="Cruce RSI al alza para BUY (estrategia pullback)",
    )
    signal_rsi_pullback_sell: float = Field(
        default=60.0, description="Cruce RSI a la baja para SELL (estrategia pullback)",
    )
    signal_atr_stop_multiplier: float = Field(
        default=1.5, description="Stop loss = precio ∓ ATR × mult",
    )
    signal_atr_profit_multiplier: float = Field(
        default=2.5, description="Take profit = precio ± ATR × mult",
    )

    # ─── Server ─────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8888)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO", description="Nivel del root logger")

    # ─── Database ───────────────────────────────────────────────────────
    db_enabled: bool = Field(default=False, description="Habilitar persistencia SQL")
    db_url: Optional[str] = Field(
        default=None, description="URL async completa; si se omite se construye MySQL",
    )
    db_host: str = Field(default="localhost", description="MySQL host")
    db_port: int = Field(default=3306, description="MySQL port")
    db_user: str = Field(default="wavepulse", description="MySQL username")
    db_password: str = Field(default="wavepulse_secret", description="MySQL password")
    db_name: str = Field(default="wavepulse", description="MySQL database name")
    db_echo: bool = Field(default=False, description="Loguear queries SQL (debug)")
    db_pool_size: int = Field(default=5, description="Conexiones en el pool")
    db_max_overflow: int = Field(default=10, description="Conexiones extra en picos")
    history_buffer_size: int = Field(
        default=500, description="Señales retenidas por el repositorio en memoria",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton global – se importa donde se necesite
settings = Settings()
