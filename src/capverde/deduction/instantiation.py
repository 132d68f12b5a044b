"""
Deduction instantiation.

Turns generic deduction templates into explicit deductions by matching the
template premises against a snapshot of known equations. The step is a pure
function: it reads an immutable equation tuple and returns the accepted and
rejected candidates without touching any component.
"""
from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Tuple

from ..model.equation import Equation
from .deduction import Deduction


@dataclass(frozen=True)
class Instantiation:
    """Outcome of one instantiation pass.

    Attributes:
        accepted: Explicit deductions usable as capabilities (deduplicated)
        rejected: Candidates dropped by the filters, with the reason
    """
    accepted: Tuple[Deduction, ...] = ()
    rejected: Tuple[Tuple[Deduction, str], ...] = ()

    @property
    def conclusions(self) -> Tuple[Equation, ...]:
        found: List[Equation] = []
        for deduction in self.accepted:
            if deduction.conclusion not in found:
                found.append(deduction.conclusion)
        return tuple(found)


def _label(deduction: Deduction) -> Deduction:
    """Suffix the conclusion name with its (bracket-normalized) left operand."""
    conclusion = deduction.conclusion
    left = str(conclusion.op1) if conclusion.op1 is not None else str(conclusion)
    left = left.replace("(", "<").replace(")", ">")
    return replace(deduction, conclusion=conclusion.renamed(f"{conclusion.name}_{left}"))


def instantiate_deductions(templates: Iterable[Deduction],
                           equations: Sequence[Equation],
                           max_equation_depth: int = 3,
                           max_term_depth: int = 2) -> Instantiation:
    """Instantiate deduction templates against known equations.

    For every template and every equation matching its first premise the
    template is copied as ``<name>Explicit`` and the substitutions applied.
    A second premise is matched against every other equation, producing
    ``<name>ExplicitFinal`` copies whose conclusion is also rewritten by the
    instantiated second premise. Templates without premises are skipped;
    premises beyond the second are never matched, so such templates stay
    templated and are rejected.

    Args:
        templates: Deduction templates (explicit deductions pass through unmatched)
        equations: Snapshot of the equations known to the component
        max_equation_depth: Complexity bound for conclusions
        max_term_depth: Complexity bound for conclusion operands

    Returns:
        Instantiation with accepted and rejected candidates
    """
    equations = tuple(equations)
    accepted: List[Deduction] = []
    rejected: List[Tuple[Deduction, str]] = []

    def consider(candidate: Deduction):
        reason = candidate.rejection_reason(max_equation_depth, max_term_depth)
        if reason is not None:
            rejected.append((candidate, reason))
        elif candidate not in accepted:
            accepted.append(candidate)

    for template in templates:
        if not template.premises:
            continue
        for eq1 in equations:
            match1 = eq1.match2(template.premises[0])
            if not match1:
                continue
            explicit = template.renamed(template.name + "Explicit").update(match1)
            if len(template.premises) == 1:
                consider(_label(explicit))
                continue
            for eq2 in equations:
                if eq2 == eq1:
                    continue
                match2 = eq2.match2(explicit.premises[1])
                if not match2:
                    continue
                final = explicit.renamed(explicit.name + "Final").update(match2)
                final = replace(final, conclusion=final.conclusion.update(final.premises[1]))
                consider(_label(final))

    return Instantiation(tuple(accepted), tuple(rejected))
