"""
Rule Parser - Rule Chain Mini-Language

Turns the rule chain attached to a field into an ordered list of RuleSpec
objects.

## Grammar

    chain := rule ("|" rule)*
    rule  := name [":" args] [">" message]

- `:` introduces the rule argument. Its shape depends on the rule: a single
  scalar (`min:3`), two comma separated bounds (`between:1,5`), a comma
  separated list (`enum:admin,user`), a dotted pair (`unique:users.email`)
  or a nested selector (`slice:max:2`).
- `>` introduces an override message. Only the first `>` is a delimiter; the
  message is everything after it, used verbatim.
- `required` marks the field mandatory.

There is no quoting or escaping. A `|`, `,`, `:` or `>` inside a parameter
always acts as a delimiter; existing rule strings rely on this.

Example:
    parse_chain("required>Name is required|string|from:1,5")
    -> [RuleSpec(rule="required", name="required", argument=None,
                 message="Name is required"),
        RuleSpec(rule="string", name="string", ...),
        RuleSpec(rule="from:1,5", name="from", argument="1,5", ...)]
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

CHAIN_DELIMITER = "|"
ARGUMENT_DELIMITER = ":"
MESSAGE_DELIMITER = ">"
LIST_DELIMITER = ","

REQUIRED = "required"


@dataclass(frozen=True)
class RuleSpec:
    """One parsed rule of a chain."""

    rule: str
    name: str
    argument: Optional[str] = None
    message: Optional[str] = None

    @property
    def params(self) -> Tuple[str, ...]:
        """Comma separated parameters of the argument (empty without one)."""
        if self.argument is None:
            return ()
        return tuple(self.argument.split(LIST_DELIMITER))

    @property
    def is_required(self) -> bool:
        return self.rule == REQUIRED

    def bounds(self) -> Tuple[str, str]:
        """
        Return the two bounds of a range rule (`from:1,5`, `between:1,5`).

        Raises:
            ValueError: If the argument does not hold two comma separated bounds
        """
        if self.argument is None or LIST_DELIMITER not in self.argument:
            raise ValueError(
                f"Rule '{self.rule}' expects two comma separated bounds"
            )
        low, high = self.argument.split(LIST_DELIMITER, 1)
        return low, high

    def table_column(self) -> Optional[Tuple[str, str]]:
        """Split a `table.column` argument, or None when it has no dot."""
        if self.argument is None or "." not in self.argument:
            return None
        table, column = self.argument.split(".", 1)
        return table, column


def parse_rule(token: str) -> RuleSpec:
    """Parse a single rule token (one element of a chain)."""
    message = None
    if MESSAGE_DELIMITER in token:
        token, message = token.split(MESSAGE_DELIMITER, 1)

    if ARGUMENT_DELIMITER in token:
        name, argument = token.split(ARGUMENT_DELIMITER, 1)
    else:
        name, argument = token, None

    return RuleSpec(rule=token, name=name, argument=argument, message=message)


def parse_chain(chain: str) -> List[RuleSpec]:
    """
    Parse a full rule chain into RuleSpecs, preserving declaration order.

    Args:
        chain: Rule chain string, e.g. "required|string|max:255"

    Returns:
        List of RuleSpec in evaluation order
    """
    return [parse_rule(token) for token in chain.split(CHAIN_DELIMITER)]
