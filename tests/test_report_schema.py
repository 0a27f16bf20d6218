from propreport.domain.report_schema import (
    PROPERTY_REPORT_JSON_SCHEMA,
    REPORT_SCHEMA_NAME,
    SENSITIVITY_SCENARIOS,
    TOP_LEVEL_KEYS,
    response_format,
    validate_report,
)


def _walk_objects(node):
    if isinstance(node, dict):
        if node.get("type") == "object":
            yield node
        for v in node.values():
            yield from _walk_objects(v)
    elif isinstance(node, list):
        for v in node:
            yield from _walk_objects(v)


def test_sample_report_conforms(sample_report):
    assert validate_report(sample_report) == []


def test_top_level_contract():
    assert PROPERTY_REPORT_JSON_SCHEMA["required"] == list(TOP_LEVEL_KEYS)
    assert set(PROPERTY_REPORT_JSON_SCHEMA["properties"]) == set(TOP_LEVEL_KEYS)


def test_no_additional_properties_anywhere():
    objects = list(_walk_objects(PROPERTY_REPORT_JSON_SCHEMA))
    assert len(objects) > 10
    assert all(o.get("additionalProperties") is False for o in objects)


def test_sensitivity_scenarios_share_one_shape():
    sens = PROPERTY_REPORT_JSON_SCHEMA["properties"]["sensitivity"]
    assert sens["required"] == list(SENSITIVITY_SCENARIOS)
    shapes = {str(sens["properties"][name]) for name in SENSITIVITY_SCENARIOS}
    assert len(shapes) == 1


def test_missing_top_level_key_is_reported(sample_report):
    del sample_report["glossary"]
    problems = validate_report(sample_report)
    assert len(problems) == 1
    assert "glossary" in problems[0]


def test_too_few_rent_comps(sample_report):
    sample_report["rentComps"] = sample_report["rentComps"][:4]
    problems = validate_report(sample_report)
    assert any(p.startswith("rentComps:") for p in problems)


def test_units_must_not_be_empty(sample_report):
    sample_report["units"] = []
    assert any(p.startswith("units:") for p in validate_report(sample_report))


def test_extra_property_is_rejected(sample_report):
    sample_report["purchase"]["sellerCredit"] = 5000
    problems = validate_report(sample_report)
    assert any(p.startswith("purchase:") and "sellerCredit" in p for p in problems)


def test_nullable_numbers_accept_null(sample_report):
    sample_report["purchase"]["purchasePrice"] = None
    sample_report["totals"]["dscr"] = None
    sample_report["sensitivity"]["baseCase"]["capRatePct"] = None
    assert validate_report(sample_report) == []


def test_non_nullable_number_rejects_null(sample_report):
    sample_report["operatingAssumptions"]["vacancyPct"] = None
    problems = validate_report(sample_report)
    assert problems and problems[0].startswith("operatingAssumptions/vacancyPct:")


def test_non_object_report():
    assert validate_report("nope")[0].startswith("<root>:")


def test_response_format_block():
    fmt = response_format()
    assert fmt["type"] == "json_schema"
    assert fmt["name"] == REPORT_SCHEMA_NAME
    assert fmt["strict"] is False
    assert fmt["schema"] is PROPERTY_REPORT_JSON_SCHEMA
