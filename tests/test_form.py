"""Tests for building prediction requests from the opposition form."""

import pytest

from trademark_client import form as form_module
from trademark_client.errors import FormValidationError
from trademark_client.form import (
    GoodServiceEntry,
    OppositionForm,
    build_prediction_request,
    has_valid_goods,
    is_form_valid,
    parse_nice_class,
    validate_form,
)
from stubs import make_form


@pytest.mark.parametrize(
    "value, expected",
    [
        ("25", 25),
        (" 9 ", 9),
        (42, 42),
        ("1", 1),
        ("45", 45),
        ("0", None),
        ("46", None),
        ("-3", None),
        ("2.5", None),
        ("abc", None),
        ("", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_nice_class(value, expected) -> None:
    assert parse_nice_class(value) == expected


def test_empty_form_is_invalid():
    """A cleared form has one blank row per side and cannot be submitted."""
    form = OppositionForm.empty()
    assert len(form.applicant_goods) == 1
    assert len(form.opponent_goods) == 1
    assert not is_form_valid(form)


def test_complete_form_is_valid():
    assert validate_form(make_form()) is None
    assert is_form_valid(make_form())


def test_every_goods_entry_must_be_filled():
    """One blank row invalidates the list even if another row is complete."""
    goods = [GoodServiceEntry(term="T-shirts", nice_class="25"), GoodServiceEntry()]
    assert not has_valid_goods(goods)
    assert not has_valid_goods([])
    assert has_valid_goods([GoodServiceEntry(term="T-shirts", nice_class=25)])


def test_whitespace_term_is_blank():
    assert not has_valid_goods([GoodServiceEntry(term="   ", nice_class="25")])


def test_first_failing_rule_wins():
    """With everything wrong, the applicant mark is reported first."""
    form = make_form(applicant_wordmark="", opponent_wordmark="", applicant_goods=[("", "")])
    assert validate_form(form) == form_module.MISSING_APPLICANT_MARK


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"applicant_wordmark": "  "}, form_module.MISSING_APPLICANT_MARK),
        ({"opponent_wordmark": ""}, form_module.MISSING_OPPONENT_MARK),
        ({"opponent_is_registered": True}, form_module.MISSING_REGISTRATION_NUMBER),
        ({"applicant_goods": [("T-shirts", "99")]}, form_module.INVALID_APPLICANT_GOODS),
        ({"opponent_goods": [("", "25")]}, form_module.INVALID_OPPONENT_GOODS),
    ],
    ids=["applicant_mark", "opponent_mark", "registration_number", "applicant_goods", "opponent_goods"],
)
def test_validation_messages(kwargs, message) -> None:
    with pytest.raises(FormValidationError) as exc_info:
        build_prediction_request(make_form(**kwargs))
    assert str(exc_info.value) == message


FOUR_ROWS = [("T-shirts", "25"), ("Hats", "25"), ("Socks", "25"), ("Scarves", "25")]


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"applicant_goods": FOUR_ROWS}, form_module.TOO_MANY_APPLICANT_GOODS),
        ({"opponent_goods": FOUR_ROWS}, form_module.TOO_MANY_OPPONENT_GOODS),
    ],
    ids=["applicant", "opponent"],
)
def test_more_than_three_goods_rejected(kwargs, message) -> None:
    assert validate_form(make_form(**kwargs)) == message
    with pytest.raises(FormValidationError):
        build_prediction_request(make_form(**kwargs))


def test_three_goods_per_side_accepted():
    form = make_form(applicant_goods=FOUR_ROWS[:3], opponent_goods=FOUR_ROWS[1:])
    request = build_prediction_request(form)
    assert len(request.applicant_goods) == form_module.MAX_GOODS_PER_SIDE
    assert len(request.opponent_goods) == form_module.MAX_GOODS_PER_SIDE


def test_registration_number_not_needed_when_unregistered():
    form = make_form(opponent_is_registered=False, opponent_registration_number="")
    request = build_prediction_request(form)
    assert request.opponent.is_registered is False
    assert request.opponent.registration_number is None


def test_build_request_trims_and_types_values():
    form = make_form(
        applicant_wordmark="  SKYWORD ",
        opponent_wordmark="SKYWORKS",
        opponent_is_registered=True,
        opponent_registration_number=" EU12345678 ",
        applicant_goods=[(" Computer software ", " 9"), ("Content marketing services", 35)],
        opponent_goods=[("Semiconductors", "9")],
    )

    request = build_prediction_request(form)

    assert request.applicant.wordmark == "SKYWORD"
    assert request.applicant.is_registered is False
    assert request.applicant.registration_number is None
    assert request.opponent.registration_number == "EU12345678"
    assert [(g.term, g.nice_class) for g in request.applicant_goods] == [
        ("Computer software", 9),
        ("Content marketing services", 35),
    ]
    assert [(g.term, g.nice_class) for g in request.opponent_goods] == [("Semiconductors", 9)]
    assert request.mark_similarity_request().applicant == request.applicant


def test_build_request_does_not_mutate_form():
    form = make_form(applicant_wordmark=" SKYWORD ")
    build_prediction_request(form)
    assert form.applicant_wordmark == " SKYWORD "
