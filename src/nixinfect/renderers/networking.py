"""networking.nix renderer: static addressing for the primary interface."""

from jinja2 import Environment

from ..errors import RenderError
from ..schema import HostFacts

FILENAME = "networking.nix"


def render(facts: HostFacts, env: Environment) -> str:
    net = facts.network
    if not net.primary_interface_name:
        raise RenderError("Network snapshot has no primary interface name")
    return env.get_template(FILENAME + ".j2").render(net=net)
