"""configuration.nix renderer: top-level module importing the generated ones."""

from typing import List

from jinja2 import Environment

from ..schema import ExistingSwap, HostFacts, Provider

FILENAME = "configuration.nix"

DEFAULT_STATE_VERSION = "24.05"


def provider_imports(provider: Provider) -> List[str]:
    if provider == Provider.AMAZON:
        return ['(modulesPath + "/virtualisation/amazon-image.nix")']
    return []


def provider_settings(facts: HostFacts) -> List[str]:
    provider = facts.profile.provider
    if provider == Provider.AMAZON and facts.profile.is_efi:
        return ["ec2.efi = true;"]
    if provider == Provider.DIGITALOCEAN:
        return ["services.do-agent.enable = true;"]
    return []


def render(facts: HostFacts, env: Environment, state_version: str = DEFAULT_STATE_VERSION) -> str:
    return env.get_template(FILENAME + ".j2").render(
        profile=facts.profile,
        provider_imports=provider_imports(facts.profile.provider),
        provider_settings=provider_settings(facts),
        # zram is the fallback whenever no block-device swap is carried over.
        zram_swap=not isinstance(facts.swap, ExistingSwap),
        authorized_keys=facts.authorized_keys,
        state_version=state_version,
    )
