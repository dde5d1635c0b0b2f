"""
Stock Report Use Case.

Stock levels, low stock and valuation.
"""

from dataclasses import dataclass, field

from stockflow.application.dto.requests import StockReportRequest
from stockflow.application.dto.responses import (
    LowStockResponse,
    StockLevelResponse,
    StockReportResponse,
)
from stockflow.config import get_logger
from stockflow.core.entities.stock import ProductStockSummary, StockLevel
from stockflow.core.interfaces import IStockLedger, ISyncOutbox

logger = get_logger(__name__)


@dataclass
class StockReport:
    """Result of a stock report."""

    levels: list[StockLevel] = field(default_factory=list)
    low_stock: list[ProductStockSummary] = field(default_factory=list)
    total_value: float = 0.0
    pending_sync: int = 0


class StockReportUseCase:
    """Read-only view over the ledger and the outbox."""

    def __init__(
        self,
        ledger: IStockLedger | None = None,
        outbox: ISyncOutbox | None = None,
    ):
        self._ledger = ledger
        self._outbox = outbox

    async def _get_ledger(self) -> IStockLedger:
        if self._ledger is None:
            from stockflow.application.services import get_stock_ledger

            self._ledger = await get_stock_ledger()
        return self._ledger

    async def _get_outbox(self) -> ISyncOutbox:
        if self._outbox is None:
            from stockflow.application.services import get_sync_outbox

            self._outbox = await get_sync_outbox()
        return self._outbox

    async def execute(self, request: StockReportRequest | None = None) -> StockReport:
        """Execute stock report use case."""
        request = request or StockReportRequest()
        ledger = await self._get_ledger()
        outbox = await self._get_outbox()

        report = StockReport(
            levels=await ledger.list_stock_levels(
                warehouse_id=request.warehouse_id,
                product_id=request.product_id,
                limit=request.limit,
                offset=request.offset,
            ),
            low_stock=await ledger.list_low_stock(),
            total_value=await ledger.get_total_stock_value(),
            pending_sync=await outbox.count_pending(),
        )

        logger.info(
            "stock_report_built",
            levels=len(report.levels),
            low_stock=len(report.low_stock),
            total_value=round(report.total_value, 2),
        )
        return report

    def to_response(self, report: StockReport) -> StockReportResponse:
        """Convert report to response DTO."""
        return StockReportResponse(
            levels=[
                StockLevelResponse(
                    product_id=level.product_id,
                    product_code=level.product_code,
                    product_name=level.product_name,
                    warehouse_id=level.warehouse_id,
                    warehouse_name=level.warehouse_name,
                    quantity=level.quantity,
                    status=level.status.value,
                    value=level.value,
                )
                for level in report.levels
            ],
            low_stock=[
                LowStockResponse(
                    product_id=p.product_id,
                    product_code=p.product_code,
                    product_name=p.product_name,
                    total_quantity=p.total_quantity,
                    min_stock=p.min_stock,
                    shortfall=p.shortfall,
                    status=p.status.value,
                )
                for p in report.low_stock
            ],
            total_value=report.total_value,
            pending_sync=report.pending_sync,
        )
