"""Install the erb_lint gems before linting.

``gem_versions`` is either a whitespace separated list of gem specs
("erb_lint:0.9.0 erb_lint-extra:1.2") or the word "gemfile", in which case
every locked gem whose name starts with ``erb_lint`` is installed at the
version pinned in Gemfile.lock.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from rich.console import Console

from erbcop_core.errors import ConfigError, InstallError

console = Console()
logger = logging.getLogger(__name__)

# Locked specs sit four spaces deep under a "specs:" heading: "    erb_lint (0.9.0)".
_LOCKED_SPEC_RE = re.compile(r"^    (?P<name>[^\s(]+) \((?P<version>[^)]+)\)$")


def locked_specs(lockfile_text: str, prefix: str = "erb_lint") -> list[str]:
    specs = []
    for line in lockfile_text.splitlines():
        match = _LOCKED_SPEC_RE.match(line)
        if match and match.group("name").startswith(prefix):
            spec = f"{match.group('name')}:{match.group('version')}"
            if spec not in specs:
                specs.append(spec)
    return specs


def resolve_gem_specs(gem_versions: str | None, lockfile: str = "Gemfile.lock") -> list[str]:
    if not gem_versions:
        return []
    if gem_versions.strip().lower() == "gemfile":
        path = Path(lockfile)
        if not path.exists():
            raise ConfigError(f"ERB_LINT_GEM_VERSIONS is 'gemfile' but {lockfile} does not exist.")
        return locked_specs(path.read_text())
    return gem_versions.split()


def install_command(specs: list[str]) -> list[str]:
    return ["gem", "install", *specs, "--no-document", "--conservative"]


def install_gems(specs: list[str]) -> None:
    if not specs:
        logger.debug("No erb_lint gems to install")
        return

    command = install_command(specs)
    console.print("Installing gems with:", " ".join(command))
    try:
        subprocess.run(command, check=True)
    except FileNotFoundError as e:
        raise InstallError("The `gem` executable was not found. Is Ruby installed?") from e
    except subprocess.CalledProcessError as e:
        raise InstallError(f"gem install exited with status {e.returncode}") from e
