"""Tenant data-mode enforcement.

LIVE tenants must never receive TEST_FIXTURE records. Every other
combination of data mode and provenance is allowed.

Deterministic - no LLM calls.
"""

from dataclasses import dataclass

from greenpass.models.common import DataMode, Provenance


@dataclass(frozen=True)
class DataModeDecision:
    allowed: bool
    data_mode: DataMode
    message: str | None = None


class DataModeGate:
    """Check a submission's provenance against the tenant data mode."""

    def check(self, *, data_mode: DataMode, provenance: str | None) -> DataModeDecision:
        if data_mode == DataMode.LIVE and provenance == Provenance.TEST_FIXTURE:
            return DataModeDecision(
                allowed=False,
                data_mode=data_mode,
                message=(
                    "TEST_FIXTURE records cannot be submitted while the tenant "
                    "is in LIVE data mode."
                ),
            )
        return DataModeDecision(allowed=True, data_mode=data_mode)
