"""
Variable transformation stages.

The variable map is built by an ordered fold over STAGES. Each stage reads
the map produced so far and returns a patch of new or replaced entries:

    stage(context, variables) -> Dict[str, Any]

ARCHITECTURAL RULE:
    Stage order is part of the output contract. A later stage may read
    what earlier stages wrote, so STAGES must never be reordered or run in
    parallel. Stages never mutate the map or the records inside it.
"""

from __future__ import annotations

import calendar
import logging
import math
import re
from collections import ChainMap
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from docvars.aliases import capitalize_first, expand_case_aliases, group_list_names
from docvars.config import EngineConfig
from docvars.formatters import (
    corporate_capitalize,
    format_currency,
    format_date,
    format_number_with_comma,
    format_time,
    format_value,
    generate_document_number,
    number_text,
    number_to_english,
    parse_date,
    parse_float,
    to_title_case,
)
from docvars.formula import evaluate_formula
from docvars.groups import compute_variables, expand_group
from docvars.lists import format_list, format_list_and, generate_array_helper_variables
from docvars.model import (
    ADMIN_PREFIX,
    AUTHORIZED_SHARES,
    AUTO,
    CALCULATED,
    COI_DATE,
    FAIR_MARKET_VALUE,
    MANUAL,
    PAR_VALUE,
    SIGN_DATE,
    DataType,
    MultiSelect,
    RepeatingGroup,
    ResponseSet,
    Scalar,
    VariableMapping,
    answer_is_present,
)
from docvars.name_rules import FOUNDERS, OFFICER_NAME_ALIASES, format_answer_by_name
from docvars.roles import get_title_for_name

logger = logging.getLogger(__name__)

LONG_DATE = "MMM D, YYYY"
SHORT_DATE = "MM/DD/YYYY"
ISO_DATE = "YYYY-MM-DD"
KOREAN_DATE = "YYYY년 MM월 DD일"

_INDEXED_REFERENCE = re.compile(r"^__([A-Za-z]+)\.(\d+)\.(\w+)$")
_GROUP_REFERENCE = re.compile(r"^__(\w+)\.(\w+)$")
_COUNT_REFERENCE = re.compile(r"^__(\w+)Count$")

_TRUTHY_ANSWERS = ("yes", "true", "1", "y")


@dataclass(frozen=True)
class StageContext:
    """Immutable inputs shared by every stage of one run."""

    responses: ResponseSet
    mappings: Tuple[VariableMapping, ...]
    now: datetime
    document_number: Optional[str] = None
    overrides: Mapping[str, str] = field(default_factory=dict)
    config: EngineConfig = field(default_factory=EngineConfig)


Variables = Mapping[str, Any]
Stage = Callable[[StageContext, Variables], Dict[str, Any]]


def _money(value: Any) -> Optional[float]:
    """Amount of a "$1,000"-style variable value, None if it is not one."""
    if not isinstance(value, str) or not value:
        return None
    return parse_float(value.replace("$", "").replace(",", ""))


def _date_variables(prefixes: Tuple[str, ...], moment: Union[str, date], formats: Dict[str, str]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for suffix, pattern in formats.items():
        rendered = format_date(moment, pattern)
        for prefix in prefixes:
            variables[f"{prefix}{suffix}"] = rendered
    return variables


def shareholder_signing_date(cashin: date) -> date:
    """
    Last business day of the cash-in month, or of the following month when
    the cash-in falls on or after the 15th. Weekends roll back to Friday.
    """
    year, month = cashin.year, cashin.month
    if cashin.day >= 15:
        month += 1
        if month > 12:
            month = 1
            year += 1
    moment = date(year, month, calendar.monthrange(year, month)[1])
    while moment.weekday() >= 5:
        moment -= timedelta(days=1)
    return moment


# =========================================================================
# 1-3. Dates
# =========================================================================


def current_values(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    now = ctx.now
    document_number = ctx.document_number or generate_document_number(
        ctx.config.document_number_prefix, now=now
    )
    return {
        "currentDate": format_date(now, LONG_DATE),
        "currentDateShort": format_date(now, SHORT_DATE),
        "currentDateISO": format_date(now, ISO_DATE),
        "currentTime": format_time(now, "h:mm A"),
        "documentNumber": document_number,
        "currentYear": str(now.year),
        "currentDateKR": format_date(now, KOREAN_DATE),
    }


def admin_dates(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """COIDate* and SIGNDate* from the admin answers, falling back to today."""
    coi = ctx.responses.first_text(COI_DATE) or ctx.now
    sign = ctx.responses.first_text(SIGN_DATE) or ctx.now

    patch = _date_variables(
        ("COIDate",), coi,
        {"": LONG_DATE, "Short": SHORT_DATE, "ISO": ISO_DATE, "KR": KOREAN_DATE},
    )
    patch.update(_date_variables(
        ("SIGNDate", "signDate", "SignDate"), sign,
        {"": LONG_DATE},
    ))
    patch.update(_date_variables(
        ("SIGNDate",), sign,
        {"Short": SHORT_DATE, "ISO": ISO_DATE, "KR": KOREAN_DATE},
    ))
    patch["SIGNYear"] = format_date(sign, "YYYY")
    return patch


def cashin_dates(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    cashin = ctx.responses.first_text("cashin")
    if not cashin:
        return {}

    patch = _date_variables(("cashin", "Cashin"), cashin, {"": LONG_DATE})
    patch["cashinShort"] = format_date(cashin, SHORT_DATE)
    patch["cashinISO"] = format_date(cashin, ISO_DATE)

    moment = parse_date(cashin)
    if moment is None:
        logger.warning("Could not read cash-in date %r; SHSIGNDate not set", cashin)
        return patch
    signing = shareholder_signing_date(moment)
    patch["SHSIGNDate"] = format_date(signing, LONG_DATE)
    patch["SHSIGNDateShort"] = format_date(signing, SHORT_DATE)
    patch["SHSIGNDateISO"] = format_date(signing, ISO_DATE)
    return patch


# =========================================================================
# 4-7. Answers
# =========================================================================


def company_address(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    responses = ctx.responses
    has_us = (responses.text("hasUSAddress") or "").strip().lower() == "yes"
    us_address = (responses.text("usAddress") or "").strip()
    kr_address = (responses.text("krAddress") or "").strip()
    address = us_address if has_us and us_address else kr_address
    return {
        "companyAddress": address,
        "CompanyAddress": address,
        "usAddress": us_address,
        "USAddress": us_address,
        "krAddress": kr_address,
        "KRAddress": kr_address,
        "hasUSAddress": "true" if has_us else "",
    }


def scalar_answers(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Every non-admin scalar and multi-select answer under its own id."""
    patch: Dict[str, Any] = {}
    for response in ctx.responses:
        question_id = response.question_id
        value = response.value
        if question_id.startswith(ADMIN_PREFIX) or isinstance(value, RepeatingGroup):
            continue
        capitalized = capitalize_first(question_id)
        if isinstance(value, Scalar):
            text = format_answer_by_name(question_id, value.text)
            patch[question_id] = text
            patch[capitalized] = text
        else:
            items = list(value.items)
            joined = ", ".join(items)
            patch[question_id] = joined
            patch[f"{question_id}List"] = joined
            patch[f"{question_id}Formatted"] = format_list_and(items)
            patch[capitalized] = joined
    return patch


def repeating_groups(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for group, answer in ctx.responses.groups():
        if answer.records:
            patch.update(expand_group(group, answer))
    return patch


def _admin_text(responses: ResponseSet, question_id: str) -> Optional[str]:
    value = responses.get(question_id)
    if not answer_is_present(value):
        return None
    return responses.first_text(question_id) or "0"


def admin_numbers(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Authorized shares, par value and fair market value."""
    responses = ctx.responses
    patch: Dict[str, Any] = {}

    authorized = _admin_text(responses, AUTHORIZED_SHARES)
    if authorized is not None:
        number = parse_float(authorized.replace(",", ""))
        patch["authorizedShares"] = format_number_with_comma(number)
        patch["authorizedSharesRaw"] = number_text(number) if number is not None else ""
        patch["authorizedSharesEnglish"] = number_to_english(number)

    par_value = _admin_text(responses, PAR_VALUE)
    if par_value is not None:
        patch["parValue"] = par_value
        patch["parValueDollar"] = "$" + par_value
        patch["PV"] = "$" + par_value

    fair_market_value = _admin_text(responses, FAIR_MARKET_VALUE)
    if fair_market_value is not None:
        formatted = format_currency(fair_market_value)
        patch["fairMarketValue"] = formatted
        patch["fairMarketValueDollar"] = formatted
        patch["FMV"] = formatted
    return patch


def officer_names(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for question_id, aliases in OFFICER_NAME_ALIASES.items():
        text = ctx.responses.text(question_id)
        if not text:
            continue
        name = to_title_case(text.strip())
        for key in (question_id, capitalize_first(question_id), *aliases):
            patch[key] = name
    return patch


# =========================================================================
# 8-9. Mappings
# =========================================================================


def _fallback(mapping: VariableMapping, empty: str = "") -> str:
    return mapping.default_value or empty


def _indexed_value(mapping: VariableMapping, match: "re.Match[str]", current: Variables) -> str:
    singular, index, field_name = match.groups()
    field_cap = capitalize_first(field_name)
    for name in (f"{capitalize_first(singular)}{index}{field_cap}", f"{singular}{index}{field_cap}"):
        if current.get(name):
            return current[name]
    return _fallback(mapping)


def _group_count_reference(question_id: str, ctx: StageContext) -> Optional[str]:
    match = _COUNT_REFERENCE.match(question_id)
    if match and ctx.responses.group(match.group(1)) is not None:
        return f"{match.group(1)}Count"
    return None


def apply_mapping(mapping: VariableMapping, ctx: StageContext, current: Variables) -> Dict[str, Any]:
    """
    Entries one mapping contributes.

    Source kinds, checked in this order:
        __auto__                re-format the existing value
        __manual__              default value unless already set
        __calculated__          handled by calculated_variables
        __founder.1.cash        one indexed group value
        __founders.cash         list of a group field (transform rule picks the list style)
        __foundersCount         group size
        anything else           the answer with that id
    """
    name = mapping.variable_name
    question_id = mapping.question_id

    if question_id == AUTO:
        existing = current.get(name)
        if isinstance(existing, str) and existing:
            return {name: format_value(existing, mapping.data_type, mapping.transform_rule)}
        logger.debug("Auto variable %s has no value yet", name)
        return {}

    if question_id == MANUAL:
        if current.get(name):
            return {}
        return {name: mapping.default_value} if mapping.default_value else {}

    if question_id == CALCULATED:
        return {}

    indexed = _INDEXED_REFERENCE.match(question_id)
    if indexed:
        return {name: _indexed_value(mapping, indexed, current)}

    grouped = _GROUP_REFERENCE.match(question_id)
    if grouped:
        names = group_list_names(grouped.group(1), grouped.group(2))
        source = names.get(mapping.transform_rule, names["list_and"])
        return {name: current.get(source) or _fallback(mapping)}

    count_name = _group_count_reference(question_id, ctx)
    if count_name:
        return {name: current.get(count_name) or _fallback(mapping, "0")}

    value = ctx.responses.get(question_id)
    if not answer_is_present(value):
        return {name: _fallback(mapping)}
    if isinstance(value, RepeatingGroup):
        return {}
    if isinstance(value, MultiSelect):
        items = list(value.items)
        patch = generate_array_helper_variables(name, items)
        patch[name] = format_list(items, mapping.transform_rule or "list_and")
        return patch
    return {name: format_value(value.text, mapping.data_type, mapping.transform_rule)}


def mapped_variables(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for mapping in ctx.mappings:
        patch.update(apply_mapping(mapping, ctx, ChainMap(patch, variables)))
    return patch


def _format_calculated(value: str, mapping: VariableMapping) -> str:
    if mapping.data_type in (DataType.NUMBER, DataType.CURRENCY):
        return format_value(value, mapping.data_type, mapping.transform_rule)
    return value


def calculated_variables(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Evaluate ``__calculated__`` formulas; each may read earlier results."""
    patch: Dict[str, Any] = {}
    for mapping in ctx.mappings:
        if mapping.question_id != CALCULATED:
            continue
        if not mapping.formula:
            logger.warning("Calculated variable %s has no formula", mapping.variable_name)
            continue
        value = evaluate_formula(mapping.formula, ChainMap(patch, variables))
        if value:
            patch[mapping.variable_name] = _format_calculated(value, mapping)
        elif mapping.default_value:
            patch[mapping.variable_name] = mapping.default_value
    return patch


# =========================================================================
# 10-12. Shares
# =========================================================================


def founder_shares(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """
    Founder{N}Share = floor(cash / FMV) where no mapping set it, plus the
    cashSum and shareSum totals over all share slots.
    """
    patch: Dict[str, Any] = {}
    slots = range(1, ctx.config.max_founder_share_slots + 1)
    fmv = _money(variables.get("FMV"))

    for slot in slots:
        share_name = f"Founder{slot}Share"
        if variables.get(share_name):
            continue
        cash = _money(variables.get(f"Founder{slot}Cash"))
        if cash and cash > 0 and fmv and fmv > 0:
            patch[share_name] = format_number_with_comma(math.floor(cash / fmv))

    current = ChainMap(patch, variables)
    total_cash = 0.0
    total_shares = 0.0
    for slot in slots:
        cash = _money(current.get(f"Founder{slot}Cash"))
        if cash:
            total_cash += cash
        shares = _money(current.get(f"Founder{slot}Share"))
        if shares:
            total_shares += shares

    cash_sum = "$" + format_number_with_comma(total_cash)
    share_sum = format_number_with_comma(total_shares)
    for key in ("cashSum", "CashSum", "CASHSUM"):
        patch[key] = cash_sum
    for key in ("shareSum", "ShareSum", "SHARESUM"):
        patch[key] = share_sum
    return patch


def option_pool(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """
    Pool size x such that x / (shareSum + x) equals the optionPool percent,
    rounded half up.
    """
    percent = parse_float(ctx.responses.text("optionPool"))
    total = _money(variables.get("shareSum"))
    if percent is None or not 0 < percent < 100 or not total or total <= 0:
        return {}

    fraction = percent / 100
    pool = math.floor(fraction * total / (1 - fraction) + 0.5)
    shares = format_number_with_comma(pool)
    issued = format_number_with_comma(total + pool)
    return {
        "optionPoolShares": shares,
        "OptionPoolShares": shares,
        "optionPoolSharesRaw": str(pool),
        "OptionPoolSharesRaw": str(pool),
        "totalIssuedShares": issued,
        "TotalIssuedShares": issued,
    }


def founder_loop_shares(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Add ``share`` to each founders loop record; the records are copied."""
    founders = variables.get(FOUNDERS)
    fmv = _money(variables.get("FMV"))
    if not isinstance(founders, list) or not fmv or fmv <= 0:
        return {}

    records = []
    for record in founders:
        cash = _money(record.get("cash"))
        share = format_number_with_comma(math.floor(cash / fmv)) if cash and cash > 0 else "0"
        records.append({**record, "share": share})
    return {FOUNDERS: records}


# =========================================================================
# 13-19. Signatories, flags and aliases
# =========================================================================


def bank_consent(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Bank-consent signatory names and their official titles."""
    responses = ctx.responses
    patch: Dict[str, Any] = {}
    for question_id, keys in (
        ("bankConsent", ("BankConsent", "bankConsent", "BankConsent1", "bankConsent1")),
        ("bankConsent2", ("BankConsent2", "bankConsent2")),
    ):
        text = responses.text(question_id)
        if not text:
            continue
        name = to_title_case(text.strip())
        title = get_title_for_name(name, responses)
        for key in keys:
            patch[key] = name
            patch[f"{key}Title"] = title
    return patch


def designator(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    value = ctx.responses.text("designator") or ""
    if value == "custom":
        custom = (ctx.responses.text("designatorCustom") or "").strip()
        if custom:
            value = custom
    if not value:
        return {}
    formatted = corporate_capitalize(value)
    return {"designator": formatted, "Designator": formatted, "DESIGNATOR": formatted}


def stock_option(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    responses = ctx.responses
    question_id = "stockOption" if "stockOption" in responses else "StockOption"
    value = responses.get(question_id)
    if not answer_is_present(value):
        return {}
    text = value.text.strip().lower() if isinstance(value, Scalar) else ""
    flag = "true" if text in _TRUTHY_ANSWERS else ""
    return {
        "hasStockOption": flag,
        "HasStockOption": flag,
        "stockOption": text,
        "StockOption": text,
    }


def computed_flags(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Group counts and founder-kind flags, only where nothing else set them."""
    return {
        key: str(value)
        for key, value in compute_variables(ctx.responses).items()
        if key not in variables
    }


def case_aliases(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    expanded = expand_case_aliases(variables)
    return {key: value for key, value in expanded.items() if key not in variables}


def overrides(ctx: StageContext, variables: Variables) -> Dict[str, Any]:
    """Caller-supplied values win over everything computed."""
    return dict(ctx.overrides)


STAGES: Tuple[Tuple[str, Stage], ...] = (
    ("current_values", current_values),
    ("admin_dates", admin_dates),
    ("cashin_dates", cashin_dates),
    ("company_address", company_address),
    ("scalar_answers", scalar_answers),
    ("repeating_groups", repeating_groups),
    ("admin_numbers", admin_numbers),
    ("officer_names", officer_names),
    ("mapped_variables", mapped_variables),
    ("calculated_variables", calculated_variables),
    ("founder_shares", founder_shares),
    ("option_pool", option_pool),
    ("founder_loop_shares", founder_loop_shares),
    ("bank_consent", bank_consent),
    ("designator", designator),
    ("stock_option", stock_option),
    ("computed_flags", computed_flags),
    ("case_aliases", case_aliases),
    ("overrides", overrides),
)
