from .step_10_preflight import PreflightStep
from .step_15_fetch_keys import FetchKeysStep
from .step_20_confirm import ConfirmStep
from .step_30_partition import PartitionStep
from .step_40_format_mount import FormatMountStep
from .step_50_generate_config import GenerateConfigStep
from .step_60_install import InstallStep
from .step_90_finalize_reboot import FinalizeRebootStep

__all__ = [
    "PreflightStep",
    "FetchKeysStep",
    "ConfirmStep",
    "PartitionStep",
    "FormatMountStep",
    "GenerateConfigStep",
    "InstallStep",
    "FinalizeRebootStep",
]
