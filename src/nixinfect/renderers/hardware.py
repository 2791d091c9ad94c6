"""hardware-configuration.nix renderer: boot loader, root filesystem, swap devices."""

from typing import List

from jinja2 import Environment

from ..errors import RenderError
from ..schema import ExistingSwap, HostFacts, LegacyTarget

FILENAME = "hardware-configuration.nix"

BASE_KERNEL_MODULES = ["ata_piix", "uhci_hcd", "xen_blkfront"]


def kernel_modules(is_x86_64: bool) -> List[str]:
    modules = list(BASE_KERNEL_MODULES)
    if is_x86_64:
        modules.append("vmw_pvscsi")
    return modules


def render(facts: HostFacts, env: Environment) -> str:
    if not facts.rootfs.source_device or not facts.rootfs.fs_type:
        raise RenderError("Root filesystem device or type is missing")
    if isinstance(facts.boot, LegacyTarget) and not facts.boot.grub_device_path:
        raise RenderError("Legacy boot target has no GRUB device")

    # Ephemeral swap files are install-time only and never reach the config.
    swap_device = facts.swap.device_path if isinstance(facts.swap, ExistingSwap) else None
    return env.get_template(FILENAME + ".j2").render(
        boot=facts.boot,
        rootfs=facts.rootfs,
        kernel_modules=kernel_modules(facts.profile.is_x86_64),
        swap_device=swap_device,
    )
