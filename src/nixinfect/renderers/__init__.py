"""
Renderers turn HostFacts into NixOS modules.
Rendering is pure: no I/O besides loading the packaged templates.
Writing to disk is done by nixinfect.pipeline.write_config.
"""

from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

from ..schema import HostFacts, RenderedConfig
from .configuration import DEFAULT_STATE_VERSION
from .configuration import FILENAME as CONFIGURATION_NIX
from .configuration import render as render_configuration
from .hardware import FILENAME as HARDWARE_NIX
from .hardware import render as render_hardware
from .networking import FILENAME as NETWORKING_NIX
from .networking import render as render_networking
from .nix import nix_attr, nix_bool, nix_list, nix_string


def make_env() -> Environment:
    env = Environment(
        loader=PackageLoader("nixinfect", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["nixstr"] = nix_string
    env.filters["nixbool"] = nix_bool
    env.filters["nixattr"] = nix_attr
    env.filters["nixlist"] = nix_list
    return env


def render(
    facts: HostFacts,
    env: Optional[Environment] = None,
    state_version: str = DEFAULT_STATE_VERSION,
) -> RenderedConfig:
    """Render every module. Raises RenderError if a required fact is missing."""
    if env is None:
        env = make_env()
    return RenderedConfig(files={
        HARDWARE_NIX: render_hardware(facts, env),
        NETWORKING_NIX: render_networking(facts, env),
        CONFIGURATION_NIX: render_configuration(facts, env, state_version=state_version),
    })
