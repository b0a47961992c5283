"""
Declarative payload validation.

A rule set is an ordered list of ``FieldRules``; each holds the rules
for one field. ``run_validation`` walks the fields in order, stops at the
first failing rule of a field and keeps going with the next field, so
the caller gets at most one error per field.

Rules are plain or async predicates, which lets the registration rule
set ask the repository whether an email is already taken.
"""

from __future__ import annotations

import inspect
import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from auth.errors import FieldError

logger = logging.getLogger(__name__)

_MISSING = object()

Predicate = Callable[[Any, "ValidationContext"], Union[bool, Awaitable[bool]]]


@dataclass
class ValidationContext:
    """Per-request state the predicates may consult."""

    repository: Any = None
    # Set when an existing record is being updated; disables the
    # "email already exists" check.
    identifier: Optional[str] = None


@dataclass
class Rule:
    check: Predicate
    message: Union[str, Callable[[Any], str]]

    def render(self, value: Any) -> str:
        return self.message(value) if callable(self.message) else self.message


@dataclass
class FieldRules:
    name: str
    rules: List[Rule] = field(default_factory=list)
    default: Any = _MISSING
    optional: bool = False
    trim: bool = False
    # NFC-normalize strings so composed and decomposed accents compare equal.
    normalize: bool = False


async def run_validation(
    payload: Dict[str, Any],
    rule_set: List[FieldRules],
    context: Optional[ValidationContext] = None,
) -> Tuple[List[FieldError], Dict[str, Any]]:
    """
    Apply ``rule_set`` to ``payload``.

    Returns ``(errors, sanitized)`` where ``sanitized`` is a copy of the
    payload with defaults filled in and trimmed strings.
    """
    context = context or ValidationContext()
    sanitized = dict(payload)
    errors: List[FieldError] = []

    for field_rules in rule_set:
        value = sanitized.get(field_rules.name, _MISSING)
        if field_rules.default is not _MISSING and value in (_MISSING, None, ""):
            value = field_rules.default
            sanitized[field_rules.name] = value
        if field_rules.optional and (value is _MISSING or value is None):
            continue
        if value is _MISSING:
            value = None
        if field_rules.trim and value is not None:
            value = _as_text(value)
            if isinstance(value, str):
                value = value.strip()
            sanitized[field_rules.name] = value
        if field_rules.normalize and isinstance(value, str):
            value = unicodedata.normalize("NFC", value)
            sanitized[field_rules.name] = value

        for rule in field_rules.rules:
            outcome = rule.check(value, context)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if not outcome:
                errors.append(FieldError(field_rules.name, rule.render(value), value))
                break

    if errors:
        logger.debug("Validation failed for fields: %s", [e.field for e in errors])
    return errors, sanitized


# ── Predicates ─────────────────────────────────────────────────────────

_TRUE_VALUES = {True, "true", "1", 1}
_FALSE_VALUES = {False, "false", "0", 0}
_url_adapter = TypeAdapter(AnyHttpUrl)
# Portuguese alphabet: ASCII letters plus accented vowels and cedilla.
_PT_BR_LETTERS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZÃÁÀÂÄÇÉÊËÍÏÕÓÔÖÚÜ"
    "abcdefghijklmnopqrstuvwxyzãáàâäçéêëíïõóôöúü"
)
# bcrypt only reads the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


def _as_text(value: Any) -> Any:
    """Scalars become strings the way a JSON client would write them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def not_empty(value: Any, _ctx=None) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def is_string(value: Any, _ctx=None) -> bool:
    return isinstance(value, str)


def is_text(value: Any, _ctx=None) -> bool:
    """Portuguese letters and spaces only."""
    return isinstance(value, str) and all(c in _PT_BR_LETTERS or c == " " for c in value)


def min_length(n: int) -> Predicate:
    return lambda value, _ctx=None: isinstance(value, str) and len(value) >= n


def max_length(n: int) -> Predicate:
    return lambda value, _ctx=None: isinstance(value, str) and len(value) <= n


def max_bytes(n: int) -> Predicate:
    return lambda value, _ctx=None: isinstance(value, str) and len(value.encode()) <= n


def is_lowercase(value: Any, _ctx=None) -> bool:
    return isinstance(value, str) and value == value.lower()


def is_email(value: Any, _ctx=None) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_strong_password(value: Any, _ctx=None) -> bool:
    """At least one lowercase, uppercase, digit and symbol."""
    if not isinstance(value, str):
        return False
    return (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
        and any(not c.isalnum() and not c.isspace() for c in value)
    )


def is_boolean(value: Any, _ctx=None) -> bool:
    if isinstance(value, str):
        value = value.lower()
    try:
        return value in _TRUE_VALUES or value in _FALSE_VALUES
    except TypeError:
        return False


def to_boolean(value: Any) -> bool:
    if isinstance(value, str):
        value = value.lower()
    return value in _TRUE_VALUES


def is_in(choices) -> Predicate:
    allowed = tuple(choices)
    return lambda value, _ctx=None: isinstance(value, str) and value in allowed


def is_url(value: Any, _ctx=None) -> bool:
    if not isinstance(value, str):
        return False
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


async def email_not_taken(value: Any, ctx: ValidationContext) -> bool:
    # Updates keep their own address.
    if ctx.identifier or ctx.repository is None:
        return True
    existing = await ctx.repository.find_by_email(value)
    return not existing


# ── Rule sets ──────────────────────────────────────────────────────────

ROLES = ("Admin", "Client")


def registration_rules() -> List[FieldRules]:
    return [
        FieldRules(
            "nome",
            trim=True,
            normalize=True,
            rules=[
                Rule(not_empty, "Name is required"),
                Rule(is_text, "Name must contain only letters and spaces"),
                Rule(min_length(3), "Name must have at least 3 characters"),
                Rule(max_length(100), "Name must have at most 100 characters"),
            ],
        ),
        FieldRules(
            "email",
            trim=True,
            rules=[
                Rule(not_empty, "Email is required"),
                Rule(is_lowercase, "Uppercase letters are not allowed in the email"),
                Rule(is_email, "Enter a valid email"),
                Rule(email_not_taken, lambda v: f"the email {v} already exists!"),
            ],
        ),
        FieldRules(
            "senha",
            trim=True,
            rules=[
                Rule(not_empty, "Password is required"),
                Rule(min_length(6), "Password must have at least 6 characters"),
                Rule(
                    max_bytes(BCRYPT_MAX_BYTES),
                    f"Password must have at most {BCRYPT_MAX_BYTES} bytes",
                ),
                Rule(
                    is_strong_password,
                    "Password is not strong enough. Use at least 1 uppercase "
                    "letter, 1 lowercase letter, 1 number and 1 special character",
                ),
            ],
        ),
        FieldRules(
            "ativo",
            default=True,
            rules=[Rule(is_boolean, "Active must be a boolean")],
        ),
        FieldRules(
            "tipo",
            default="Client",
            rules=[Rule(is_in(ROLES), "Role must be Admin or Client")],
        ),
        FieldRules(
            "avatar",
            optional=True,
            rules=[Rule(is_url, "Invalid avatar URL")],
        ),
    ]


def login_rules() -> List[FieldRules]:
    return [
        FieldRules(
            "email",
            trim=True,
            rules=[
                Rule(not_empty, "Email is required"),
                Rule(is_email, "Enter a valid email to log in"),
            ],
        ),
        FieldRules(
            "senha",
            trim=True,
            rules=[
                Rule(not_empty, "Password is required"),
                Rule(is_string, "Password must be text"),
            ],
        ),
    ]
