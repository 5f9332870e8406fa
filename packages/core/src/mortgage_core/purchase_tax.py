"""Progressive purchase-tax calculation and bracket schedule editing.

Tax is marginal: only the slice of the price that falls inside a bracket is
taxed at that bracket's rate. The schedule editing helpers keep the
structural rules the calculator relies on (ascending ceilings, a single
open-ended bracket at the end); ``bracket_tax`` itself assumes those rules
hold and does not check them.
"""

from decimal import Decimal
from typing import Optional, Sequence

import structlog

from .exceptions import ValidationError
from .models import BracketTaxLine, PurchaseTaxPolicy, TaxBracket
from .policy import MAX_TAX_BRACKETS, get_default_brackets

logger = structlog.get_logger()

ZERO = Decimal("0")
HUNDRED = Decimal("100")
NEW_BRACKET_STEP = Decimal("100000")


# =============================================================================
# CALCULATION
# =============================================================================

def bracket_tax_breakdown(
    price: Decimal,
    brackets: Sequence[TaxBracket],
) -> list[BracketTaxLine]:
    """Per-bracket tax lines for ``price``.

    Brackets are walked in order until the whole price has been allotted;
    brackets past that point produce no line.

    Args:
        price: Purchase price
        brackets: Ascending bracket schedule

    Returns:
        One line per bracket reached, in schedule order
    """
    lines: list[BracketTaxLine] = []
    if price <= 0 or not brackets:
        return lines

    remaining = price
    previous_ceiling = ZERO
    for index, bracket in enumerate(brackets):
        if remaining <= 0:
            break
        effective_ceiling = price if bracket.is_open_ended else bracket.ceiling
        lower = max(previous_ceiling, ZERO)
        upper = min(effective_ceiling, price)
        taxable = max(ZERO, min(upper - lower, remaining))
        lines.append(
            BracketTaxLine(
                bracket_index=index,
                lower=lower,
                upper=upper,
                taxable_amount=taxable,
                rate=bracket.rate,
                tax=taxable * bracket.rate / HUNDRED,
            )
        )
        remaining -= taxable
        previous_ceiling = bracket.ceiling

    return lines


def bracket_tax(price: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Total progressive purchase tax on ``price``; 0 for a non-positive price."""
    return sum((line.tax for line in bracket_tax_breakdown(price, brackets)), ZERO)


# =============================================================================
# SCHEDULE VALIDATION
# =============================================================================

def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Check the structural rules of a bracket schedule.

    An empty schedule is valid (no purchase tax). Otherwise ceilings must be
    strictly ascending, rates within 0-100, there may be at most six
    brackets, and exactly the last one must be open-ended.

    Raises:
        ValidationError: On the first rule violated
    """
    if not brackets:
        return

    if len(brackets) > MAX_TAX_BRACKETS:
        raise ValidationError(
            f"A schedule may have at most {MAX_TAX_BRACKETS} brackets",
            field="brackets",
            value=len(brackets),
            constraint=f"len <= {MAX_TAX_BRACKETS}",
        )

    previous: Optional[TaxBracket] = None
    for index, bracket in enumerate(brackets):
        if bracket.rate < 0 or bracket.rate > HUNDRED:
            raise ValidationError(
                f"Bracket {index} rate must be between 0 and 100",
                field="rate",
                value=str(bracket.rate),
                constraint="0 <= rate <= 100",
            )
        if bracket.ceiling <= 0:
            raise ValidationError(
                f"Bracket {index} ceiling must be positive",
                field="ceiling",
                value=str(bracket.ceiling),
                constraint="ceiling > 0",
            )
        if previous is not None and bracket.ceiling <= previous.ceiling:
            raise ValidationError(
                f"Bracket ceiling must be greater than {previous.ceiling}",
                field="ceiling",
                value=str(bracket.ceiling),
                constraint=f"ceiling > {previous.ceiling}",
            )
        is_last = index == len(brackets) - 1
        if bracket.is_open_ended and not is_last:
            raise ValidationError(
                "Only the last bracket may be open-ended",
                field="ceiling",
                value=str(bracket.ceiling),
                details={"bracket_index": index},
            )
        previous = bracket

    if not brackets[-1].is_open_ended:
        raise ValidationError(
            "The last bracket must be open-ended",
            field="ceiling",
            value=str(brackets[-1].ceiling),
            constraint="last ceiling >= open-ended sentinel",
        )


# =============================================================================
# SCHEDULE EDITING
# =============================================================================

def suggest_next_ceiling(brackets: Sequence[TaxBracket]) -> Decimal:
    """Default ceiling offered for a new bracket: 100,000 above the highest finite one."""
    finite = [b.ceiling for b in brackets if not b.is_open_ended]
    return (max(finite) if finite else ZERO) + NEW_BRACKET_STEP


def add_bracket(brackets: Sequence[TaxBracket], bracket: TaxBracket) -> tuple[TaxBracket, ...]:
    """Insert ``bracket`` at its ordered position.

    Raises:
        ValidationError: If the schedule is full, the ceiling collides
            with an existing bracket, or the result breaks a schedule rule
    """
    if len(brackets) >= MAX_TAX_BRACKETS:
        raise ValidationError(
            f"A schedule may have at most {MAX_TAX_BRACKETS} brackets",
            field="brackets",
            value=len(brackets),
            constraint=f"len < {MAX_TAX_BRACKETS}",
        )
    for existing in brackets:
        if existing.ceiling == bracket.ceiling or (existing.is_open_ended and bracket.is_open_ended):
            raise ValidationError(
                f"A bracket with ceiling {existing.ceiling} already exists",
                field="ceiling",
                value=str(bracket.ceiling),
            )

    updated = tuple(sorted([*brackets, bracket], key=lambda b: b.ceiling))
    validate_brackets(updated)
    logger.info("tax_bracket_added", ceiling=str(bracket.ceiling), rate=str(bracket.rate))
    return updated


def replace_bracket(
    brackets: Sequence[TaxBracket],
    index: int,
    bracket: TaxBracket,
) -> tuple[TaxBracket, ...]:
    """Replace the bracket at ``index``, keeping it between its neighbours.

    Raises:
        ValidationError: If ``index`` is out of range, the new ceiling is
            not strictly between the neighbouring ceilings, or the result
            breaks a schedule rule (e.g. a finite last bracket)
    """
    if index < 0 or index >= len(brackets):
        raise ValidationError(
            f"No bracket at position {index}",
            field="index",
            value=index,
            constraint=f"0 <= index < {len(brackets)}",
        )
    if index > 0 and bracket.ceiling <= brackets[index - 1].ceiling:
        raise ValidationError(
            f"Bracket ceiling must be greater than {brackets[index - 1].ceiling}",
            field="ceiling",
            value=str(bracket.ceiling),
            constraint=f"ceiling > {brackets[index - 1].ceiling}",
        )
    if index < len(brackets) - 1 and bracket.ceiling >= brackets[index + 1].ceiling:
        raise ValidationError(
            f"Bracket ceiling must be less than {brackets[index + 1].ceiling}",
            field="ceiling",
            value=str(bracket.ceiling),
            constraint=f"ceiling < {brackets[index + 1].ceiling}",
        )

    updated = list(brackets)
    updated[index] = bracket
    result = tuple(sorted(updated, key=lambda b: b.ceiling))
    validate_brackets(result)
    return result


def remove_bracket(brackets: Sequence[TaxBracket], index: int) -> tuple[TaxBracket, ...]:
    """Remove the bracket at ``index``.

    The open-ended bracket can only be removed together with the rest of
    the schedule, i.e. when it is the only bracket left.

    Raises:
        ValidationError: If ``index`` is out of range or removal would
            leave finite brackets with no open-ended one
    """
    if index < 0 or index >= len(brackets):
        raise ValidationError(
            f"No bracket at position {index}",
            field="index",
            value=index,
            constraint=f"0 <= index < {len(brackets)}",
        )
    if brackets[index].is_open_ended and len(brackets) > 1:
        raise ValidationError(
            "Cannot remove the open-ended bracket while other brackets remain",
            field="index",
            value=index,
        )
    updated = tuple(b for i, b in enumerate(brackets) if i != index)
    validate_brackets(updated)
    return updated


def load_default_brackets(policy: PurchaseTaxPolicy) -> PurchaseTaxPolicy:
    """Replace the schedule with the canonical one for the policy's home type."""
    return policy.model_copy(update={"brackets": get_default_brackets(policy.is_first_home)})


def switch_home_type(policy: PurchaseTaxPolicy, is_first_home: bool) -> PurchaseTaxPolicy:
    """Change the home type and load its canonical schedule.

    Choosing a different home type always replaces the schedule with that
    type's table. Re-selecting the current type keeps the user's
    edits and only seeds the schedule when none is set.
    """
    if is_first_home == policy.is_first_home and policy.brackets:
        return policy

    updated = load_default_brackets(policy.model_copy(update={"is_first_home": is_first_home}))
    logger.info("tax_brackets_loaded", is_first_home=is_first_home, count=len(updated.brackets))
    return updated
