# src/worker/__init__.py
"""
Фоновые воркеры: периодическая проверка поездок.
"""

from src.worker.sweep_runner import SweepRunner, run_sweep_worker

__all__ = ["SweepRunner", "run_sweep_worker"]
