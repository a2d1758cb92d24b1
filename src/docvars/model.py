"""
Core Data Model Objects

Defines the data structures the engine consumes and produces:
    - Answer values (Scalar / MultiSelect / RepeatingGroup)
    - Survey responses and the response set
    - Variable mappings (template variable -> answer source)
    - Selection rules, conditions and templates
    - Evaluation, selection and validation results

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about HTTP, storage or document formats
        - Represent structure, not behavior
        - Are never mutated by the engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from docvars.config import EngineConfig


# =========================================================================
# Sentinel question ids
# =========================================================================

ADMIN_PREFIX = "__"

AUTO = "__auto__"
MANUAL = "__manual__"
CALCULATED = "__calculated__"

COI_DATE = "__COIDate"
SIGN_DATE = "__SIGNDate"
AUTHORIZED_SHARES = "__authorizedShares"
PAR_VALUE = "__parValue"
FAIR_MARKET_VALUE = "__fairMarketValue"

CUSTOMER_NAME = "__customerName"
CUSTOMER_EMAIL = "__customerEmail"
CUSTOMER_COMPANY = "__customerCompany"


class DataType(Enum):
    """How a mapped answer is rendered."""

    TEXT = "text"
    LIST = "list"
    DATE = "date"
    NUMBER = "number"
    CURRENCY = "currency"
    EMAIL = "email"
    PHONE = "phone"


class ConditionOperator(Enum):
    """
    Comparison operators of the rule language.

    Equality operators fall back to case-insensitive string comparison when
    either side is not numeric. Ordering operators are numeric only.
    """

    EQUALS = "=="
    NOT_EQUALS = "!="
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    IN = "in"
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="


class ValueType(Enum):
    LITERAL = "literal"
    QUESTION = "question"


class SourceType(Enum):
    QUESTION = "question"
    COMPUTED = "computed"


class LogicalOperator(Enum):
    AND = "AND"
    OR = "OR"


class PersonTypeFilter(Enum):
    """Which people a per-person template is generated for."""

    ALL = "all"
    INDIVIDUAL = "individual"
    INDIVIDUAL_FOUNDER = "individual_founder"
    CORPORATION = "corporation"
    CORPORATION_FOUNDER = "corporation_founder"


# =========================================================================
# Answer values
# =========================================================================


@dataclass(frozen=True)
class Scalar:
    """A single free-text answer."""

    text: str


@dataclass(frozen=True)
class MultiSelect:
    """An ordered list of selected options (checkboxes and the like)."""

    items: Tuple[str, ...]


@dataclass(frozen=True)
class RepeatingGroup:
    """
    An ordered list of person-like records, e.g. ``directors`` or ``founders``.

    Records are heterogeneous: each one may carry any subset of fields
    (name, address, email, type, cash, ceoName, ...).
    """

    records: Tuple[Dict[str, str], ...]

    def field_names(self) -> List[str]:
        """Union of record keys, in first-seen order."""
        names: List[str] = []
        for record in self.records:
            for key in record:
                if key not in names:
                    names.append(key)
        return names


AnswerValue = Union[Scalar, MultiSelect, RepeatingGroup]


def _raw_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def answer_value_from_raw(raw: Any) -> AnswerValue:
    """
    Classify a raw decoded answer into its tagged variant.

    A list whose first element is a mapping is a repeating group; any other
    list is a multi-select. Everything else becomes a scalar.
    """
    if isinstance(raw, (Scalar, MultiSelect, RepeatingGroup)):
        return raw
    if isinstance(raw, (list, tuple)):
        if raw and isinstance(raw[0], Mapping):
            records = tuple(
                {str(key): _raw_text(value) for key, value in item.items()}
                for item in raw
                if isinstance(item, Mapping)
            )
            return RepeatingGroup(records)
        return MultiSelect(tuple(_raw_text(item) for item in raw))
    if isinstance(raw, Mapping):
        raise TypeError(f"Unsupported answer value type: {type(raw)}")
    return Scalar(_raw_text(raw))


def answer_to_raw(value: AnswerValue) -> Any:
    """Inverse of answer_value_from_raw, used by serialization."""
    if isinstance(value, Scalar):
        return value.text
    if isinstance(value, MultiSelect):
        return list(value.items)
    if isinstance(value, RepeatingGroup):
        return [dict(record) for record in value.records]
    raise TypeError(f"Unsupported answer value: {type(value)}")


def answer_is_present(value: Optional[AnswerValue]) -> bool:
    """An answer counts as given unless it is missing or an empty scalar."""
    if value is None:
        return False
    if isinstance(value, Scalar):
        return value.text != ""
    return True


def answer_text(value: AnswerValue) -> str:
    """
    Flatten an answer to one comparable string.

    Multi-selects join with ``,``; a repeating group compares as its record
    count.
    """
    if isinstance(value, Scalar):
        return value.text
    if isinstance(value, MultiSelect):
        return ",".join(value.items)
    return str(len(value.records))


# =========================================================================
# Responses
# =========================================================================


@dataclass(frozen=True)
class SurveyResponse:
    question_id: str
    value: AnswerValue

    @classmethod
    def of(cls, question_id: str, raw: Any) -> SurveyResponse:
        return cls(question_id=question_id, value=answer_value_from_raw(raw))


class ResponseSet:
    """
    Answers keyed by question id.

    Duplicate ids collapse to the last response given.
    """

    def __init__(self, responses: Iterable[SurveyResponse] = ()):
        self._by_id: Dict[str, AnswerValue] = {}
        for response in responses:
            self._by_id.pop(response.question_id, None)
            self._by_id[response.question_id] = response.value

    @classmethod
    def from_mapping(cls, answers: Mapping[str, Any]) -> ResponseSet:
        return cls(SurveyResponse.of(qid, raw) for qid, raw in answers.items())

    def get(self, question_id: str) -> Optional[AnswerValue]:
        return self._by_id.get(question_id)

    def text(self, question_id: str) -> Optional[str]:
        """The answer's text when it is a scalar, else None."""
        value = self._by_id.get(question_id)
        if isinstance(value, Scalar):
            return value.text
        return None

    def first_text(self, question_id: str) -> Optional[str]:
        """Scalar text, or the first option of a multi-select."""
        value = self._by_id.get(question_id)
        if isinstance(value, Scalar):
            return value.text
        if isinstance(value, MultiSelect) and value.items:
            return value.items[0]
        return None

    def group(self, question_id: str) -> Optional[RepeatingGroup]:
        value = self._by_id.get(question_id)
        if isinstance(value, RepeatingGroup):
            return value
        return None

    def groups(self) -> Iterator[Tuple[str, RepeatingGroup]]:
        for question_id, value in self._by_id.items():
            if isinstance(value, RepeatingGroup):
                yield question_id, value

    def with_answer(self, question_id: str, raw: Any) -> ResponseSet:
        """A copy with one more (or one replaced) answer."""
        return ResponseSet([*self, SurveyResponse.of(question_id, raw)])

    def __iter__(self) -> Iterator[SurveyResponse]:
        for question_id, value in self._by_id.items():
            yield SurveyResponse(question_id, value)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __repr__(self) -> str:
        return f"ResponseSet({list(self._by_id)!r})"


# =========================================================================
# Template configuration
# =========================================================================


@dataclass
class VariableMapping:
    """
    Binds one template variable to an answer source.

    Properties:
        variable_name: Placeholder name used in the document
        question_id:
            A real answer id, or one of the sentinels:
                __auto__        value already produced by expansion
                __manual__      admin input, filled from default_value
                __calculated__  evaluate ``formula``
                __founders.cash          list of a group field
                __founder.1.cash         one indexed group field
                __foundersCount          group size
        data_type / transform_rule: Rendering of the value
        required: Whether an empty value should be reported
    """

    variable_name: str
    question_id: str
    data_type: DataType = DataType.TEXT
    transform_rule: str = ""
    required: bool = False
    default_value: Optional[str] = None
    formula: Optional[str] = None


@dataclass
class RuleCondition:
    """
    One comparison inside a selection rule.

    If source_type is COMPUTED, question_id names an entry of the
    computed-variable table (e.g. ``foundersCount``), not an answer.
    """

    question_id: str
    operator: ConditionOperator
    value: str = ""
    value_type: ValueType = ValueType.LITERAL
    value_question_id: Optional[str] = None
    source_type: SourceType = SourceType.QUESTION


@dataclass
class SelectionRule:
    conditions: List[RuleCondition] = field(default_factory=list)
    logical_operator: LogicalOperator = LogicalOperator.AND
    priority: int = 1
    is_always_include: bool = False
    is_manual_only: bool = False
    id: Optional[str] = None


@dataclass
class Template:
    id: str
    name: str = ""
    display_name: Optional[str] = None
    category: str = "Other"
    rules: List[SelectionRule] = field(default_factory=list)
    variables: List[VariableMapping] = field(default_factory=list)
    is_active: bool = True
    repeat_for_persons: bool = False
    person_type_filter: PersonTypeFilter = PersonTypeFilter.ALL

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.id


# =========================================================================
# Results
# =========================================================================


@dataclass
class RuleEvaluationResult:
    template_id: str
    score: float = 0.0
    matched_rules: int = 0
    total_rules: int = 0
    is_always_include: bool = False
    is_manual_only: bool = False


@dataclass
class ConditionDetail:
    rule_index: int
    condition: RuleCondition
    is_met: bool
    actual_value: str


@dataclass
class TemplateSelection:
    required: List[Template] = field(default_factory=list)
    suggested: List[Template] = field(default_factory=list)
    optional: List[Template] = field(default_factory=list)


@dataclass
class ValidationResult:
    missing_variables: List[str] = field(default_factory=list)
    empty_required: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.missing_variables and not self.empty_required


@dataclass
class TransformOptions:
    """
    Knobs for one transformation run.

    Properties:
        now: Clock used for current-date variables (defaults to datetime.now())
        document_number: Fixed document number instead of a generated one
        overrides: Values applied on top of the finished variable map
        config: Engine settings
    """

    now: Optional[datetime] = None
    document_number: Optional[str] = None
    overrides: Dict[str, str] = field(default_factory=dict)
    config: EngineConfig = field(default_factory=EngineConfig)
