import logging
from typing import Any, Callable, Dict, Optional

from .dispatcher import FieldContext, Violation, dispatch
from .exceptions import UniquenessCheckError
from .messages import MessageSynthesizer, format_field_name
from .mime_sniffer import Sniffer, detect_extension
from .predicates import is_empty
from .record import FieldView, ValueKind
from .rule_parser import RuleSpec, parse_chain

logger = logging.getLogger(__name__)

FAULT_PREFIX = "validation fault"


class FieldEvaluator:
    """Evaluates the rule chain of one field, left to right, first failure wins"""

    def __init__(self, synthesizer: MessageSynthesizer, checker: Any = None,
                 sniffer: Sniffer = detect_extension):
        """
        Initialize field evaluator.

        Args:
            synthesizer: Renders messages for the call's locale
            checker: Uniqueness checker used by `unique:` rules (optional)
            sniffer: File type detector used by image/file/mimes rules
        """
        self.synthesizer = synthesizer
        self.checker = checker
        self.sniffer = sniffer

    def evaluate(self, view: FieldView, record: Any,
                 recurse: Callable[[Any], Dict[str, Any]]) -> Optional[Any]:
        """
        Run a field's rule chain.

        While the value is empty only `required` can fire; every other rule
        is skipped. A non-empty value goes through the dispatcher for every
        rule, `required` included, so a required nested record is still
        validated.

        Args:
            view: Field to evaluate
            record: Record owning the field (read by same/match rules)
            recurse: Validates a nested record and returns its report

        Returns:
            None when every rule passes, otherwise the outcome of the first
            violated rule (message, nested report or element list)

        Raises:
            Exception: Anything raised by a predicate or a collaborator
        """
        ctx = FieldContext(
            record=record,
            label=format_field_name(view.label),
            synthesizer=self.synthesizer,
            recurse=recurse,
            checker=self.checker,
            sniffer=self.sniffer,
        )
        empty = is_empty(view.value, view.kind)

        for spec in parse_chain(view.rules):
            if empty:
                if spec.is_required:
                    key = "bool" if view.kind is ValueKind.BOOLEAN else "required"
                    return self.synthesizer.render(key, ctx.label, override=spec.message)
                continue

            violation = dispatch(view.kind, spec, view.value, ctx)
            if violation is not None:
                return self._outcome(violation, spec, ctx)

        return None

    def _outcome(self, violation: Violation, spec: RuleSpec, ctx: FieldContext) -> Any:
        if violation.payload is not None:
            return violation.payload
        return self.synthesizer.render(
            violation.key, ctx.label, *violation.params, override=spec.message
        )

    def run(self, view: FieldView, record: Any,
            recurse: Callable[[Any], Dict[str, Any]]) -> Optional[Any]:
        """
        Evaluate a field, turning any internal fault into the field's outcome.

        Raises:
            UniquenessCheckError: If the uniqueness store failed; not a
                field outcome, the whole call fails
        """
        try:
            return self.evaluate(view, record, recurse)
        except UniquenessCheckError:
            raise
        except Exception as e:
            fault = f"{FAULT_PREFIX}: {type(e).__name__}: {e}"
            logger.warning(
                "Field evaluation fault",
                extra={"field": view.label, "rules": view.rules, "error": fault},
            )
            return fault
