from .step_10_preflight import PreflightStep
from .step_20_swap import ProvisionSwapStep
from .step_30_wifi import EnsureWifiStep
from .step_40_packages import InstallPackagesStep
from .step_50_toolchain import InstallToolchainStep
from .step_60_build_unison import BuildUnisonStep
from .step_70_verify import VerifyUnisonStep

__all__ = [
    "PreflightStep",
    "ProvisionSwapStep",
    "EnsureWifiStep",
    "InstallPackagesStep",
    "InstallToolchainStep",
    "BuildUnisonStep",
    "VerifyUnisonStep",
]
