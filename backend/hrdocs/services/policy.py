"""
Cardinality and mandatory-document rules as pure functions.

Nothing in here touches the database: callers count documents and pass the
numbers in, which keeps the whole decision table testable in isolation.
"""
import enum

from hrdocs.errors import PolicyViolation, ValidationFailed


class CardinalityPolicy(enum.Enum):
    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"
    SINGLE_OR_MULTIPLE = "single_or_multiple"

    @classmethod
    def from_flags(cls, allow_single: bool, allow_multiple: bool) -> "CardinalityPolicy":
        return _POLICY_TABLE[(bool(allow_single), bool(allow_multiple))]

    @property
    def limit(self) -> int | None:
        """Maximum active, non-NA documents per employee; None means unbounded."""
        if self is CardinalityPolicy.NONE:
            return 0
        if self is CardinalityPolicy.SINGLE:
            return 1
        return None


_POLICY_TABLE = {
    (False, False): CardinalityPolicy.NONE,
    (True, False): CardinalityPolicy.SINGLE,
    (False, True): CardinalityPolicy.MULTIPLE,
    (True, True): CardinalityPolicy.SINGLE_OR_MULTIPLE,
}


def policy_for(document_type) -> CardinalityPolicy:
    return CardinalityPolicy.from_flags(document_type.allow_single, document_type.allow_multiple)


def check_upload_slot(policy: CardinalityPolicy, active_count: int, type_name: str = "this type"):
    """Raise if one more active, non-NA document would break the policy."""
    if policy is CardinalityPolicy.NONE:
        raise PolicyViolation(
            "UploadsNotAllowed",
            f"Document type '{type_name}' does not allow document uploads",
        )
    if policy is CardinalityPolicy.SINGLE and active_count > 0:
        raise PolicyViolation(
            "SingleDocumentLimitExceeded",
            f"Only one document of type '{type_name}' is allowed. "
            "Please delete the existing document before uploading a new one.",
        )


def check_not_applicable(allow_not_applicable: bool, reason: str | None, type_name: str = "this type"):
    if not allow_not_applicable:
        raise PolicyViolation(
            "NaNotAllowed",
            f"Document type '{type_name}' does not allow marking as not applicable",
        )
    if reason is None or not reason.strip():
        raise ValidationFailed(
            "ReasonRequired",
            "Not applicable reason is required when marking document as N/A",
        )


def mandatory_guard_blocks(
    policy: CardinalityPolicy,
    is_mandatory: bool,
    allow_not_applicable: bool,
    other_active_count: int,
    na_sibling_exists: bool,
    strict: bool = False,
) -> bool:
    """Whether removing a document would leave a mandatory type unfilled.

    Only the single-document policy is guarded. With ``strict`` off, a type
    that allows N/A is never blocked, since the employee can still record an
    N/A entry; ``strict`` blocks that case too unless an N/A entry exists.
    """
    if not is_mandatory or policy is not CardinalityPolicy.SINGLE:
        return False
    if other_active_count > 0 or na_sibling_exists:
        return False
    if allow_not_applicable and not strict:
        return False
    return True


def check_mandatory_guard(document_type, other_active_count: int, na_sibling_exists: bool,
                          action: str = "delete", strict: bool = False):
    if mandatory_guard_blocks(
        policy_for(document_type),
        document_type.is_mandatory,
        document_type.allow_not_applicable,
        other_active_count,
        na_sibling_exists,
        strict=strict,
    ):
        raise PolicyViolation(
            "MandatoryDocumentRequired",
            f"Cannot {action} mandatory document '{document_type.name}'. "
            "At least one active document is required.",
        )
