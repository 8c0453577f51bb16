from __future__ import annotations

from dataclasses import dataclass, field

from ..adapters.price_adapters.base import PriceData
from ..domain import PriceTable, VaultPair
from ..processors import BatchResult
from ..report import PricingReport
from ..state import AppState


@dataclass
class PipelineContext:
    state: AppState
    vaults: list[VaultPair] | None = None
    price_data: PriceData | None = None
    base_prices: PriceTable | None = None
    market_prices: PriceTable | None = None
    validation_failures: list[str] = field(default_factory=list)
    batch: BatchResult | None = None
    report: PricingReport | None = None

    @property
    def vaults_required(self) -> list[VaultPair]:
        if self.vaults is None:
            raise RuntimeError(
                "Vaults have not been set. Ensure collect_vaults() is called before accessing this property."
            )
        return self.vaults

    @property
    def base_prices_required(self) -> PriceTable:
        if self.base_prices is None:
            raise RuntimeError(
                "Base prices have not been set. Ensure price_tokens() is called before accessing this property."
            )
        return self.base_prices

    @property
    def batch_required(self) -> BatchResult:
        if self.batch is None:
            raise RuntimeError(
                "Batch result has not been set. Ensure compute_intrinsic_values() is called before accessing this property."
            )
        return self.batch

    @property
    def report_required(self) -> PricingReport:
        if self.report is None:
            raise RuntimeError(
                "Report has not been set. Ensure build_report() is called before accessing this property."
            )
        return self.report
