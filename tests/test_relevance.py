from __future__ import annotations

import pytest

from nutra.companies import to_company_dto
from nutra.relevance import rank_companies, score_company


@pytest.fixture
def dtos(sample_companies):
    return {int(c.id): to_company_dto(c) for c in sample_companies}


def test_keyword_points_per_field(dtos) -> None:
    # products and description
    assert score_company(dtos[1], ["ashwagandha"]) == 10
    # products only
    assert score_company(dtos[2], ["ashwagandha"]) == 5
    assert score_company(dtos[4], ["ashwagandha"]) == 0


def test_keyword_matching_is_case_insensitive(dtos) -> None:
    assert score_company(dtos[4], ["WHEY"]) == score_company(dtos[4], ["whey"]) == 10


def test_primary_type_outranks_functionality_mention(dtos) -> None:
    assert score_company(dtos[4], [], "manufacturer") == 10
    # Distribution Hub is a distributor that also trades
    assert score_company(dtos[7], [], "wholesaler") == 5
    assert score_company(dtos[5], [], "manufacturer") == 0


def test_rank_by_score_then_name(dtos) -> None:
    candidates = [dtos[6], dtos[3], dtos[2], dtos[1]]

    ranked = rank_companies(candidates, ["ashwagandha"])

    assert [c.name for c in ranked] == [
        "Gujarat Herbals Pvt Ltd",
        "Ashwa Naturals",
        "Chennai Raw Botanicals",
        "Kerala Ayur Exports",
    ]


def test_rank_does_not_mutate_input(dtos) -> None:
    candidates = [dtos[2], dtos[1]]

    rank_companies(candidates, ["ashwagandha"])

    assert [c.id for c in candidates] == ["2", "1"]
