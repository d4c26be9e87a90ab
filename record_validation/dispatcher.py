"""
Type Dispatcher

Routes one parsed rule to the predicate that applies to the value's kind.

Each value kind owns a KindRules entry:
- simple: rules without an argument, looked up by the full rule token
  (`email`, `int`, `image`)
- parameterized: rules with an argument, looked up by the rule name
  (`min:3` -> `min`, `image:png,gif` -> `image`)
- fallback: a handler receiving every rule (sequences, nested records)

Handlers return None when the rule passes (or does not apply) and a
Violation otherwise. Rule names with no entry for the kind are no-ops.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from . import predicates
from .messages import MessageSynthesizer, format_field_name
from .mime_sniffer import Sniffer, detect_extension
from .record import UploadedFile, ValueKind, is_record, lookup_labelled
from .rule_parser import ARGUMENT_DELIMITER, RuleSpec

SLICE_PREFIX = "slice"


@dataclass(frozen=True)
class Violation:
    """
    A violated rule.

    Attributes:
        key: Message key ("min.string", "email", ...)
        params: Rule parameters substituted into the message template
        payload: Pre-built outcome (nested report dict or element list);
            when set it is reported as is instead of a rendered message
    """

    key: str
    params: Tuple[str, ...] = ()
    payload: Any = None


@dataclass
class FieldContext:
    """Everything a handler may need besides the value and the rule."""

    record: Any
    label: str
    synthesizer: MessageSynthesizer
    recurse: Callable[[Any], Dict[str, Any]]
    checker: Any = None
    sniffer: Sniffer = detect_extension


Handler = Callable[[Any, RuleSpec, FieldContext], Optional[Violation]]


@dataclass(frozen=True)
class KindRules:
    simple: Mapping[str, Handler] = field(default_factory=dict)
    parameterized: Mapping[str, Handler] = field(default_factory=dict)
    fallback: Optional[Handler] = None


# ---------------------------------------------------------------------------
# Handler builders
# ---------------------------------------------------------------------------

def _check(predicate: Callable[[Any], bool], key: str) -> Handler:
    def handler(value, spec, ctx):
        if predicate(value):
            return Violation(key)
        return None
    return handler


def _compare(predicate: Callable[[Any, str], bool], category: str) -> Handler:
    def handler(value, spec, ctx):
        if predicate(value, spec.argument):
            return Violation(f"{spec.name}.{category}", (spec.argument,))
        return None
    return handler


def _range(predicate: Callable[[Any, str, str], bool], category: str) -> Handler:
    def handler(value, spec, ctx):
        low, high = spec.bounds()
        if predicate(value, low, high):
            return Violation(f"{spec.name}.{category}", (low, high))
        return None
    return handler


def _layout(layout: str) -> Handler:
    return _check(lambda value: predicates.is_not_datetime(value, layout), f"date.{layout}")


def _enum(value, spec, ctx):
    if predicates.is_not_enum(value, spec.params):
        return Violation("enum", (spec.argument,))
    return None


def _same(value, spec, ctx):
    _, other = lookup_labelled(ctx.record, spec.argument)
    if predicates.is_not_same(value, other):
        return Violation("same", (format_field_name(spec.argument),))
    return None


def _match(value, spec, ctx):
    _, other = lookup_labelled(ctx.record, spec.argument)
    if predicates.is_not_same(value, other):
        return Violation("match")
    return None


def _unique(value, spec, ctx):
    if spec.table_column() is None:
        return None
    if predicates.is_not_unique(ctx.checker, spec.argument, value):
        return Violation("unique")
    return None


def _comparisons(category: str) -> Dict[str, Handler]:
    return {
        "min": _compare(predicates.is_not_min, category),
        "max": _compare(predicates.is_not_max, category),
        "equal": _compare(predicates.is_not_equal, category),
        "size": _compare(predicates.is_not_size, category),
        "from": _range(predicates.is_not_from, category),
        "between": _range(predicates.is_not_between, category),
        "enum": _enum,
        "same": _same,
        "match": _match,
    }


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def _image(value, spec, ctx):
    if predicates.is_not_mimes(value, predicates.IMAGE_EXTENSIONS, ctx.sniffer):
        return Violation("image")
    return None


def _file(value, spec, ctx):
    if predicates.is_not_file(value):
        return Violation("file")
    return None


def _file_types(key: str) -> Handler:
    def handler(value, spec, ctx):
        if predicates.is_not_mimes(value, spec.argument, ctx.sniffer):
            return Violation(key, (spec.argument,))
        return None
    return handler


def _file_size(value, spec, ctx):
    parsed = predicates.file_size_limit(spec.argument)
    if parsed is None:
        return None
    limit, key, amount = parsed
    if predicates.is_not_file_size(value, limit):
        return Violation(key, (amount,))
    return None


# ---------------------------------------------------------------------------
# Sequences and nested records
# ---------------------------------------------------------------------------

def _element(element: Any, spec: RuleSpec, ctx: FieldContext) -> Optional[Violation]:
    """Element pass: email for text, image and size for files, recursion for records."""
    if isinstance(element, str):
        if spec.rule == "email" and predicates.is_not_email(element):
            return Violation("email")
        return None
    if isinstance(element, UploadedFile):
        if spec.rule == "image":
            return _image(element, spec, ctx)
        if spec.name == "size" and spec.argument is not None:
            return _file_size(element, spec, ctx)
        return None
    if is_record(element):
        report = ctx.recurse(element)
        if report:
            return Violation("", payload=report)
    return None


def _sequence(value, spec, ctx):
    if spec.rule.startswith(SLICE_PREFIX) and ARGUMENT_DELIMITER in spec.rule:
        selector = spec.rule.split(ARGUMENT_DELIMITER, 2)[1:]
        if len(selector) == 2:
            bound, amount = selector
            if bound == "min" and predicates.is_not_min(value, amount):
                return Violation("min.slice", (amount,))
            if bound == "max" and predicates.is_not_max(value, amount):
                return Violation("max.slice", (amount,))

    failures: List[Any] = []
    for index, element in enumerate(value, start=1):
        violation = _element(element, spec, ctx)
        if violation is None:
            continue
        if violation.payload is not None:
            failures.append(violation.payload)
        else:
            failures.append(
                ctx.synthesizer.render(
                    violation.key,
                    f"{ctx.label} ({index})",
                    *violation.params,
                    override=spec.message,
                )
            )

    if failures:
        return Violation("", payload=failures)
    return None


def _record(value, spec, ctx):
    report = ctx.recurse(value)
    if report:
        return Violation("", payload=report)
    return None


# ---------------------------------------------------------------------------
# Kind table
# ---------------------------------------------------------------------------

_TEXT = KindRules(
    simple={
        "string": _check(predicates.is_not_string, "string"),
        "ascii": _check(predicates.is_not_ascii, "ascii"),
        "alpha": _check(predicates.is_not_alpha, "alpha"),
        "numeric": _check(predicates.is_not_numeric, "numeric"),
        "alpha_numeric": _check(predicates.is_not_alphanumeric, "alpha_numeric"),
        "email": _check(predicates.is_not_email, "email"),
        "rfc3339": _layout("rfc3339"),
        "datetime": _layout("datetime"),
        "dateonly": _layout("dateonly"),
        "timeonly": _layout("timeonly"),
        "phone": _check(predicates.is_not_phone, "phone"),
        "phone_with_code": _check(predicates.is_not_phone_with_code, "phone_with_code"),
        "username": _check(predicates.is_not_username, "username"),
        "gh_card": _check(predicates.is_not_gh_card, "gh_card"),
        "gh_gps": _check(predicates.is_not_gh_gps, "gh_gps"),
    },
    parameterized={**_comparisons("string"), "unique": _unique},
)

_INTEGER = KindRules(
    simple={
        "int": _check(predicates.is_not_int, "int"),
        "uint": _check(predicates.is_not_uint, "uint"),
    },
    parameterized=_comparisons("numeric"),
)

_FLOAT = KindRules(
    simple={"float": _check(predicates.is_not_float, "float")},
    parameterized=_comparisons("numeric"),
)

_REFERENCE = KindRules(
    simple={"image": _image, "file": _file},
    parameterized={
        "image": _file_types("image_type"),
        "file": _file_types("file_type"),
        "mimes": _file_types("mimes"),
        "size": _file_size,
    },
)

KINDS: Mapping[ValueKind, KindRules] = {
    ValueKind.TEXT: _TEXT,
    ValueKind.SIGNED_INT: _INTEGER,
    ValueKind.UNSIGNED_INT: _INTEGER,
    ValueKind.FLOAT: _FLOAT,
    ValueKind.SEQUENCE: KindRules(fallback=_sequence),
    ValueKind.REFERENCE: _REFERENCE,
    ValueKind.RECORD: KindRules(fallback=_record),
}


def dispatch(kind: ValueKind, spec: RuleSpec, value: Any,
             ctx: FieldContext) -> Optional[Violation]:
    """
    Apply one rule to a non-empty value.

    Args:
        kind: Kind of the value
        spec: Parsed rule
        value: Field value
        ctx: Field context (record, label, collaborators)

    Returns:
        Violation, or None when the rule passes or does not apply

    Raises:
        ValueError: If the rule argument is malformed (e.g. `min:abc`)
    """
    rules = KINDS.get(kind)
    if rules is None:
        return None
    if rules.fallback is not None:
        return rules.fallback(value, spec, ctx)

    handler = rules.simple.get(spec.rule)
    if handler is None and spec.argument is not None:
        handler = rules.parameterized.get(spec.name)
    if handler is None:
        return None
    return handler(value, spec, ctx)
