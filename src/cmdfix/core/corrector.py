"""Rule matching engine: turns a failed command into ranked corrections."""

from __future__ import annotations

import logging
import math
import queue
import threading
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from cmdfix.config.settings import Settings
from cmdfix.core.catalog import RuleCatalog, get_catalog
from cmdfix.core.command import Command
from cmdfix.core.corrected import CorrectedCommand
from cmdfix.core.rule import Rule

logger = logging.getLogger(__name__)


@dataclass
class RuleDiagnostic:
    """A recoverable problem with one rule during one cycle."""

    rule_name: str
    kind: str  # "error" or "slow"
    message: str
    elapsed: float = 0.0


@dataclass
class RuleOutcome:
    """What a single rule produced for a command."""

    rule: Rule
    matched: bool = False
    skipped: bool = False
    candidates: list[str] = field(default_factory=list)
    error: Exception | None = None
    elapsed: float = 0.0


@dataclass
class CorrectionResult:
    """Ranked corrections plus the per-rule diagnostics of the cycle."""

    corrections: list[CorrectedCommand]
    diagnostics: list[RuleDiagnostic] = field(default_factory=list)


def _as_candidates(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    candidates = list(value)
    for candidate in candidates:
        if not isinstance(candidate, str):
            raise TypeError(f"expected str candidates, got {type(candidate).__name__}")
    return candidates


def evaluate_rule(rule: Rule, command: Command) -> RuleOutcome:
    """Run one rule against a command without letting it raise.

    ``is_match`` is skipped when the rule needs output and there is none;
    ``get_new_command`` is only called after a positive match.
    """
    outcome = RuleOutcome(rule=rule)
    if rule.requires_output and not command.output:
        outcome.skipped = True
        return outcome

    started = time.perf_counter()
    try:
        if rule.is_match(command):
            outcome.matched = True
            outcome.candidates = _as_candidates(rule.get_new_command(command))
    except Exception as e:
        outcome.candidates = []
        outcome.error = e
    outcome.elapsed = time.perf_counter() - started
    return outcome


class Corrector:
    """Evaluates a rule catalog against failed commands."""

    def __init__(
        self,
        rules: Iterable[Rule] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the corrector.

        Args:
            rules: Rules in catalog order, defaults to the process-wide catalog
            settings: Settings, defaults to built-in defaults

        Raises:
            ConfigurationError: If rule names are missing or duplicated
        """
        if rules is None:
            rules = get_catalog()
        elif not isinstance(rules, RuleCatalog):
            rules = RuleCatalog(rules)
        self.rules: tuple[Rule, ...] = tuple(rules)
        self.settings = settings or Settings()

    def active_rules(self) -> list[Rule]:
        """Enabled rules, in catalog order."""
        return [rule for rule in self.rules if self.settings.is_rule_enabled(rule)]

    def evaluate(self, command: Command) -> CorrectionResult:
        """Produce ranked, deduplicated corrections for a command.

        Args:
            command: The failed command

        Returns:
            Corrections sorted by priority (catalog then candidate order on
            ties) and the diagnostics of rules that failed or ran too long
        """
        rules = self.active_rules()
        logger.debug("Matching %d rules against %r", len(rules), command.script)

        if self.settings.workers > 1 and len(rules) > 1:
            outcomes = self._evaluate_parallel(rules, command)
        else:
            outcomes = [evaluate_rule(rule, command) for rule in rules]

        diagnostics: list[RuleDiagnostic] = []
        candidates: list[CorrectedCommand] = []
        for outcome in outcomes:
            if not self._accept(outcome, diagnostics):
                continue
            candidates.extend(self._wrap(outcome, command))

        corrections = rank(candidates)
        logger.debug("Generated %d corrections", len(corrections))
        return CorrectionResult(corrections=corrections, diagnostics=diagnostics)

    def correct(self, command: Command) -> list[CorrectedCommand]:
        return self.evaluate(command).corrections

    def best(self, command: Command) -> CorrectedCommand | None:
        corrections = self.correct(command)
        return corrections[0] if corrections else None

    def match_rule(self, command: Command, name: str) -> list[CorrectedCommand]:
        """Run only the named rule, ignoring whether it is enabled."""
        for rule in self.rules:
            if rule.name == name:
                outcome = evaluate_rule(rule, command)
                if outcome.error is not None:
                    logger.debug("Rule %r failed: %s", name, outcome.error)
                    return []
                return rank(self._wrap(outcome, command))
        return []

    def _evaluate_parallel(self, rules: Sequence[Rule], command: Command) -> list[RuleOutcome]:
        """Evaluate rules on daemon worker threads, returning outcomes in catalog order.

        Rules still running once every rule could have used its full budget
        are abandoned and reported as slow. Daemon threads do not keep the
        process alive after the cycle ends.
        """
        workers = min(self.settings.workers, len(rules))
        timeout = self.settings.rule_timeout
        deadline = timeout * math.ceil(len(rules) / workers) if timeout else None

        pending: queue.SimpleQueue[int] = queue.SimpleQueue()
        for index in range(len(rules)):
            pending.put(index)
        results: list[RuleOutcome | None] = [None] * len(rules)
        remaining = [len(rules)]
        lock = threading.Lock()
        finished = threading.Event()

        def work() -> None:
            while True:
                try:
                    index = pending.get_nowait()
                except queue.Empty:
                    return
                results[index] = evaluate_rule(rules[index], command)
                with lock:
                    remaining[0] -= 1
                    if remaining[0] == 0:
                        finished.set()

        for number in range(workers):
            threading.Thread(target=work, name=f"cmdfix-rule-{number}", daemon=True).start()

        finished.wait(deadline)

        # Rules that have not started yet are dropped with the running ones
        while True:
            try:
                pending.get_nowait()
            except queue.Empty:
                break

        snapshot = list(results)
        return [
            outcome if outcome is not None else RuleOutcome(rule=rule, elapsed=math.inf)
            for rule, outcome in zip(rules, snapshot)
        ]

    def _accept(self, outcome: RuleOutcome, diagnostics: list[RuleDiagnostic]) -> bool:
        name = outcome.rule.name
        if outcome.error is not None:
            message = f"{type(outcome.error).__name__}: {outcome.error}"
            logger.debug("Rule %r failed: %s", name, message, exc_info=outcome.error)
            diagnostics.append(RuleDiagnostic(name, "error", message, outcome.elapsed))
            return False

        timeout = self.settings.rule_timeout
        if timeout and outcome.elapsed > timeout:
            if math.isinf(outcome.elapsed):
                message = f"abandoned after exceeding {timeout}s"
            else:
                message = f"took {outcome.elapsed:.3f}s, budget is {timeout}s"
            logger.warning("Slow rule %r %s", name, message)
            diagnostics.append(RuleDiagnostic(name, "slow", message, outcome.elapsed))
            return False

        if outcome.matched:
            logger.debug("Rule %r matched with %d candidates", name, len(outcome.candidates))
        return outcome.matched

    def _wrap(self, outcome: RuleOutcome, command: Command) -> list[CorrectedCommand]:
        rule = outcome.rule
        priority = self.settings.get_rule_priority(rule)
        side_effect = rule.side_effect if rule.has_side_effect else None

        wrapped = []
        for script in outcome.candidates:
            # Re-running the same script is only a fix when a side effect changes something.
            if script == command.script and side_effect is None:
                continue
            wrapped.append(
                CorrectedCommand(
                    script=script,
                    priority=priority,
                    side_effect=side_effect,
                    rule_name=rule.name,
                )
            )
        return wrapped


def rank(candidates: Iterable[CorrectedCommand]) -> list[CorrectedCommand]:
    """Deduplicate by script and sort by priority.

    Among candidates sharing a script the lowest priority survives, the
    earliest one on ties. Sorting is stable, so equal priorities keep the
    order in which they were produced.
    """
    best: dict[str, tuple[int, CorrectedCommand]] = {}
    for position, candidate in enumerate(candidates):
        current = best.get(candidate.script)
        if current is None or candidate.priority < current[1].priority:
            best[candidate.script] = (position, candidate)

    survivors = sorted(best.values(), key=lambda item: (item[1].priority, item[0]))
    return [candidate for _, candidate in survivors]


def get_corrected_commands(
    command: Command,
    settings: Settings | None = None,
) -> list[CorrectedCommand]:
    """Rank corrections for a command using the process-wide catalog."""
    return Corrector(settings=settings).correct(command)


def get_best_correction(
    command: Command,
    settings: Settings | None = None,
) -> CorrectedCommand | None:
    return Corrector(settings=settings).best(command)
