"""Application use cases."""

from stockflow.application.use_cases.record_movement import RecordMovementUseCase
from stockflow.application.use_cases.run_sync import RunSyncUseCase
from stockflow.application.use_cases.stock_report import StockReport, StockReportUseCase

__all__ = [
    "RecordMovementUseCase",
    "RunSyncUseCase",
    "StockReport",
    "StockReportUseCase",
]
