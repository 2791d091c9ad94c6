"""Entry point: inspect the host, render NixOS modules, write them atomically."""

import os
import shlex
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from . import inspectors, renderers
from .cli import parse_args
from .errors import NixInfectError, ProbeFailure
from .executor import Executor, make_executor
from .pipeline import load_facts, save_facts, write_config
from .schema import HostFacts
from .swapfile import ephemeral_swap


def _status(msg: str) -> None:
    print(msg, file=sys.stderr)


def _run_inspectors(host_root: Path, args, executor: Optional[Executor] = None) -> HostFacts:
    return inspectors.run_all(
        host_root,
        executor=executor,
        provider=args.provider,
        swap_disabled=args.no_swap,
        sudo_user=os.environ.get("SUDO_USER"),
    )


def _run_install_command(command: str, executor: Executor) -> None:
    cmd = shlex.split(command)
    _status(f"Running {command} ...")
    r = executor(cmd)
    if r.returncode != 0:
        raise ProbeFailure(cmd, r.returncode, r.stderr)


def run(args, executor: Optional[Executor] = None) -> int:
    if executor is None:
        executor = make_executor(args.command_timeout)

    if args.from_facts:
        _status(f"Loading host facts from {args.from_facts}")
        facts = load_facts(args.from_facts)
    else:
        _status("Inspecting host ...")
        facts = _run_inspectors(args.host_root, args, executor)
    if args.save_facts:
        save_facts(facts, args.save_facts)
        _status(f"Host facts written to {args.save_facts}")

    rendered = renderers.render(facts, state_version=args.state_version)

    if args.dry_run:
        for name in sorted(rendered.files):
            print(f"# ==> {name} <==")
            print(rendered.files[name], end="")
        return 0

    with ephemeral_swap(facts.swap, executor):
        for path in write_config(rendered, args.output_dir, overwrite=args.overwrite):
            _status(f"Wrote {path}")
        if args.install_command:
            _run_install_command(args.install_command, executor)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return run(args)
    except NixInfectError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: invalid host facts: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
