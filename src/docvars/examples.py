"""
Example incorporation bundle.

A small but complete company-formation survey: two directors, one
individual and one corporate founder, share pricing, an option pool, and
six active templates (plus one inactive) covering every selection bucket.
"""
from docvars.model import (
    CALCULATED,
    MANUAL,
    ConditionOperator,
    DataType,
    PersonTypeFilter,
    ResponseSet,
    RuleCondition,
    SelectionRule,
    SourceType,
    Template,
    VariableMapping,
)
from docvars.serialization import Bundle


def build_example_responses() -> ResponseSet:
    return ResponseSet.from_mapping({
        "companyName": "acme corp",
        "designator": "Inc.",
        "state": "Delaware",
        "hasUSAddress": "yes",
        "usAddress": "251 Little Falls Drive, Wilmington, DE 19808",
        "krAddress": "서울특별시 강남구 테헤란로 123",
        "ceoName": "jane doe",
        "ceoEmail": "jane@acme.example",
        "cfoName": "john smith",
        "csName": "jane doe",
        "directors": [
            {"name": "jane doe", "address": "1 Main St, Dover, DE", "email": "jane@acme.example"},
            {"name": "john smith", "address": "2 Oak Ave, Dover, DE", "email": "john@acme.example"},
        ],
        "founders": [
            {
                "name": "jane doe",
                "type": "individual",
                "cash": "1000000",
                "address": "1 Main St, Dover, DE",
                "email": "jane@acme.example",
            },
            {
                "name": "seoul ventures LLC",
                "type": "corporation",
                "cash": "500000",
                "ceoName": "kim min",
                "address": "서울특별시 서초구 1",
                "email": "ir@seoulventures.example",
            },
        ],
        "services": ["Incorporation", "Banking"],
        "cashin": "2024-03-20",
        "optionPool": "10",
        "stockOption": "yes",
        "bankConsent": "jane doe",
        "__COIDate": "2024-01-15",
        "__SIGNDate": "2024-02-01",
        "__authorizedShares": "10000000",
        "__parValue": "0.00001",
        "__fairMarketValue": "0.1",
    })


def build_certificate_mappings() -> list:
    return [
        VariableMapping("companyName", "companyName", DataType.TEXT, "capitalize", required=True),
        VariableMapping("incorporationDate", "__COIDate", DataType.DATE, "MMMM D, YYYY"),
        VariableMapping("directorNames", "__directors.name", DataType.TEXT, "list_and"),
        VariableMapping("firstFounderCash", "__founder.1.cash"),
        VariableMapping("numberOfFounders", "__foundersCount"),
        VariableMapping("services", "services", DataType.LIST, "list_and"),
        VariableMapping("incorporator", MANUAL, default_value="Jane Doe"),
        VariableMapping(
            "totalCapital", CALCULATED, DataType.CURRENCY,
            formula="{Founder1Cash} + {Founder2Cash}",
        ),
        VariableMapping(
            "founderOneShares", CALCULATED, DataType.NUMBER, "comma",
            formula="{Founder1Cash} / {FMV}",
        ),
    ]


def build_example_templates() -> list:
    certificate = Template(
        id="coi",
        name="certificate_of_incorporation",
        display_name="Certificate of Incorporation",
        category="Formation",
        rules=[SelectionRule(is_always_include=True)],
        variables=build_certificate_mappings(),
    )

    bylaws = Template(
        id="bylaws",
        name="bylaws",
        display_name="Bylaws",
        category="Formation",
        rules=[SelectionRule(conditions=[RuleCondition("hasUSAddress", ConditionOperator.EQUALS, "YES")])],
    )

    # One of two rules matches: exactly 0.5 stays optional.
    founder_stock = Template(
        id="founder-stock",
        name="founder_stock_purchase",
        display_name="Founder Stock Purchase Agreement",
        category="Equity",
        rules=[
            SelectionRule(conditions=[
                RuleCondition("foundersCount", ConditionOperator.GREATER_EQUAL, "2", source_type=SourceType.COMPUTED),
            ]),
            SelectionRule(conditions=[RuleCondition("stockOption", ConditionOperator.EQUALS, "no")]),
        ],
        variables=[VariableMapping("PersonName", "__auto__", required=True)],
        repeat_for_persons=True,
        person_type_filter=PersonTypeFilter.INDIVIDUAL_FOUNDER,
    )

    option_plan = Template(
        id="option-plan",
        name="equity_incentive_plan",
        display_name="Equity Incentive Plan",
        category="Equity",
        rules=[
            SelectionRule(conditions=[RuleCondition("stockOption", ConditionOperator.EQUALS, "yes")]),
            SelectionRule(conditions=[RuleCondition("optionPool", ConditionOperator.GREATER_THAN, "0")]),
            SelectionRule(conditions=[RuleCondition("services", ConditionOperator.CONTAINS, "payroll")]),
        ],
    )

    bank_consent = Template(
        id="bank-consent",
        name="bank_consent",
        display_name="Bank Consent",
        category="Banking",
        rules=[SelectionRule(is_manual_only=True)],
    )

    foreign_qualification = Template(
        id="foreign-qualification",
        name="foreign_qualification",
        display_name="Foreign Qualification",
        category="Compliance",
        rules=[SelectionRule(conditions=[RuleCondition("hasUSAddress", ConditionOperator.EQUALS, "no")])],
    )

    legacy = Template(
        id="legacy-form",
        name="legacy_form",
        display_name="Legacy Incorporation Form",
        rules=[SelectionRule(is_always_include=True)],
        is_active=False,
    )

    return [certificate, bylaws, founder_stock, option_plan, bank_consent, foreign_qualification, legacy]


def build_example_incorporation() -> Bundle:
    return Bundle(responses=build_example_responses(), templates=build_example_templates())
