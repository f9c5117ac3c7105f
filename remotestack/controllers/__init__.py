"""Controllers wiring OAM descriptor kinds to the reconciler."""

from .containerized_workload import (
    containerized_workload_packager,
    setup_containerized_workload,
    translate_containerized_workload,
)
from .manual_scaler import manual_scaler_modifier, setup_manual_scaler_trait

__all__ = [
    "containerized_workload_packager",
    "manual_scaler_modifier",
    "setup_containerized_workload",
    "setup_manual_scaler_trait",
    "translate_containerized_workload",
]
