"""Loading of requested targets from YAML files and selector strings."""

import asyncio
import re
from collections.abc import Sequence
from pathlib import Path

import yaml

from cucumber_batch.models.target import RequestedTarget, TargetsDocument

_SELECTOR = re.compile(r"^(?P<file>.+?)(?::(?P<scenario>\d+)(?::(?P<example>\d+))?)?$")


async def load_targets(targets_file: Path) -> Sequence[RequestedTarget]:
    """Load the targets listed in a YAML targets file.

    Raises:
        FileNotFoundError: If the targets file does not exist

    """
    if not targets_file.exists():
        raise FileNotFoundError(f"Targets file not found: {targets_file}")

    content = await asyncio.to_thread(targets_file.read_text)
    data = yaml.safe_load(content) or {}
    return TargetsDocument.model_validate(data).targets


def parse_target(selector: str) -> RequestedTarget:
    """Parse a ``file[:scenario_line[:example_line]]`` selector."""
    match = _SELECTOR.match(selector.strip())
    if match is None:
        raise ValueError(f"Invalid target selector: {selector!r}")

    scenario = match.group("scenario")
    example = match.group("example")
    return RequestedTarget(
        file=match.group("file"),
        scenario_line=int(scenario) if scenario else None,
        example_line=int(example) if example else None,
    )
