# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from forgemcp.templates import TemplateError, UriTemplate, match_first


def test_match_extracts_single_segment() -> None:
    template = UriTemplate("file:///logs/{date}")

    assert template.parameters == ("date",)
    assert template.match("file:///logs/2025-01-01") == {"date": "2025-01-01"}


def test_match_rejects_values_spanning_segments() -> None:
    template = UriTemplate("file:///logs/{date}")

    assert template.match("file:///logs/2025/01/01") is None
    assert template.match("file:///logs/") is None
    assert template.match("file:///logs/2025-01-01/extra") is None


def test_literal_text_is_escaped() -> None:
    template = UriTemplate("data://items.{kind}?v=1")

    assert template.match("data://items.books?v=1") == {"kind": "books"}
    assert template.match("data://itemsXbooks?v=1") is None


def test_multiple_placeholders() -> None:
    template = UriTemplate("repo://{owner}/{name}/readme")

    assert template.match("repo://acme/widgets/readme") == {"owner": "acme", "name": "widgets"}
    assert template.literal_prefix == "repo://"
    assert template.is_parametrized


def test_expand_round_trips_through_match() -> None:
    template = UriTemplate("repo://{owner}/{name}")
    params = {"owner": "acme", "name": "widgets"}

    assert template.match(template.expand(params)) == params


@pytest.mark.parametrize("value", ["", "a/b"])
def test_expand_refuses_unmatchable_values(value: str) -> None:
    with pytest.raises(ValueError):
        UriTemplate("repo://{owner}").expand({"owner": value})


def test_expand_requires_every_placeholder() -> None:
    with pytest.raises(ValueError, match="Missing template parameters: name"):
        UriTemplate("repo://{owner}/{name}").expand({"owner": "acme"})


@pytest.mark.parametrize("bad", ["", "repo://{owner", "repo://{1x}", "repo://{a}/{a}", "repo://a}"])
def test_malformed_templates_raise(bad: str) -> None:
    with pytest.raises(TemplateError):
        UriTemplate(bad)


def test_non_string_candidate_never_matches() -> None:
    assert UriTemplate("x://{id}").match(42) is None  # type: ignore[arg-type]


def test_match_first_uses_registration_order() -> None:
    templates = [UriTemplate("x://{anything}"), UriTemplate("x://{id}")]

    found = match_first(templates, "x://7", lambda item: item)

    assert found is not None
    assert found[0] is templates[0]
    assert found[1] == {"anything": "7"}
    assert match_first(templates, "y://7", lambda item: item) is None
