import logging
from concurrent.futures import Executor
from typing import Any, Dict, Optional, Tuple

from .exceptions import RecursionLimitError
from .field_evaluator import FieldEvaluator
from .record import field_views

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Core validation logic: fans fields out, joins their outcomes into a report"""

    def __init__(self, evaluator: FieldEvaluator, max_depth: int = 32,
                 executor: Optional[Executor] = None):
        """
        Initialize validation engine.

        Args:
            evaluator: Field evaluator bound to the call's locale and collaborators
            max_depth: Maximum number of nested record levels below the top record
            executor: Pool used for top-level fields; None evaluates them
                sequentially in the caller's thread
        """
        self.evaluator = evaluator
        self.max_depth = max_depth
        self.executor = executor

    def validate(self, record: Any) -> Dict[str, Any]:
        """
        Validate a record.

        Top-level fields are submitted to the executor and collected in
        declaration order. Nested records are validated inline on the thread
        that reached them, so no task ever waits on the pool it runs in.

        Args:
            record: Dataclass instance

        Returns:
            Report mapping wire label to outcome, failing fields only

        Raises:
            StructuralError: If record is not a dataclass instance
            UniquenessCheckError: If the uniqueness store failed
        """
        views = field_views(record)
        path = (id(record),)
        recurse = self._recursor(path)

        if self.executor is None:
            outcomes = [self.evaluator.run(view, record, recurse) for view in views]
        else:
            futures = [
                self.executor.submit(self.evaluator.run, view, record, recurse)
                for view in views
            ]
            outcomes = [f.result() for f in futures]

        report = self._collect(views, outcomes)
        logger.debug(
            "Record validated",
            extra={
                "record_type": type(record).__name__,
                "fields": len(views),
                "failures": len(report),
            },
        )
        return report

    def _validate_nested(self, record: Any, path: Tuple[int, ...]) -> Dict[str, Any]:
        views = field_views(record)
        recurse = self._recursor(path + (id(record),))
        outcomes = [self.evaluator.run(view, record, recurse) for view in views]
        return self._collect(views, outcomes)

    def _recursor(self, path: Tuple[int, ...]):
        """Build the callback a field uses to validate a nested record."""

        def recurse(child: Any) -> Dict[str, Any]:
            if id(child) in path:
                raise RecursionLimitError(
                    f"cycle detected: {type(child).__name__} is already being validated"
                )
            if len(path) > self.max_depth:
                raise RecursionLimitError(
                    f"maximum nesting depth {self.max_depth} exceeded"
                )
            return self._validate_nested(child, path)

        return recurse

    @staticmethod
    def _collect(views, outcomes) -> Dict[str, Any]:
        return {
            view.label: outcome
            for view, outcome in zip(views, outcomes)
            if outcome is not None
        }
