"""Painting of scenario verdicts onto the nodes of a test tree."""

import logging
from collections.abc import Sequence

from cucumber_batch.extractor import GENERIC_FAILURE
from cucumber_batch.models.result import ScenarioVerdict
from cucumber_batch.tree import NodeMessage, TestNode, TestTree

log = logging.getLogger(__name__)


def apply_verdicts(
    tree: TestTree, root_id: int, verdicts: Sequence[ScenarioVerdict]
) -> int:
    """Record verdicts on the scenario and example leaves below ``root_id``.

    Leaves are matched by line number only, since scenario names are not
    unique under outlines. The walk descends through rules and outlines.
    Verdicts with no matching leaf are ignored.

    Returns:
        Number of nodes a verdict was recorded on

    """
    by_line: dict[int, ScenarioVerdict] = {}
    for verdict in verdicts:
        by_line.setdefault(verdict.line, verdict)

    applied = 0
    matched_lines: set[int] = set()
    for node in tree.descendants(root_id):
        if not node.addressable or node.line is None:
            continue

        verdict = by_line.get(node.line)
        if verdict is None:
            log.debug("No result for %s at line %d", node.label or node.kind, node.line)
            continue

        _record(tree, node, verdict)
        matched_lines.add(verdict.line)
        applied += 1

    for line in sorted(by_line.keys() - matched_lines):
        log.debug("Result at line %d has no matching node in the tree", line)

    return applied


def _record(tree: TestTree, node: TestNode, verdict: ScenarioVerdict) -> None:
    if verdict.passed:
        tree.mark_passed(node.node_id)
        return

    if verdict.failure is None:
        message = NodeMessage(text=GENERIC_FAILURE, file=node.file, line=node.line)
    else:
        message = NodeMessage(
            text=f"{verdict.failure.label}\n\n{verdict.failure.message}",
            file=node.file,
            line=verdict.failure.report_line,
        )
    tree.mark_failed(node.node_id, [message])
