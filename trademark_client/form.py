"""
Request building for the opposition form.

Turns raw form state (free-text terms, class numbers typed as strings, toggles)
into a validated PredictionRequest, or rejects it with the message of the first
rule that fails. Nothing here touches the network.
"""

import re
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from trademark_client.errors import FormValidationError
from trademark_client.models import GoodOrService, PredictionRequest, TrademarkMark

MIN_NICE_CLASS = 1
MAX_NICE_CLASS = 45
# Goods/services rows allowed per side of the form
MAX_GOODS_PER_SIDE = 3

_INTEGER = re.compile(r"[+-]?\d+")

MISSING_APPLICANT_MARK = "Please enter a trademark for the Applicant."
MISSING_OPPONENT_MARK = "Please enter a trademark for the Opponent."
MISSING_REGISTRATION_NUMBER = "Please enter the registration number of the Opponent's registered mark."
INVALID_APPLICANT_GOODS = (
    "Every Applicant good/service must have a description and a Nice class between 1 and 45."
)
INVALID_OPPONENT_GOODS = (
    "Every Opponent good/service must have a description and a Nice class between 1 and 45."
)
TOO_MANY_APPLICANT_GOODS = f"Add at most {MAX_GOODS_PER_SIDE} goods/services for the Applicant."
TOO_MANY_OPPONENT_GOODS = f"Add at most {MAX_GOODS_PER_SIDE} goods/services for the Opponent."


class GoodServiceEntry(BaseModel):
    """One goods/services row as typed into the form."""
    term: str = ""
    nice_class: Union[int, str, None] = ""


class OppositionForm(BaseModel):
    """
    Raw state of the opposition form.

    The applicant is always treated as unregistered, so only the opponent
    carries a registration toggle and number.
    """
    applicant_wordmark: str = ""
    opponent_wordmark: str = ""
    opponent_is_registered: bool = False
    opponent_registration_number: str = ""
    applicant_goods: List[GoodServiceEntry] = Field(default_factory=lambda: [GoodServiceEntry()])
    opponent_goods: List[GoodServiceEntry] = Field(default_factory=lambda: [GoodServiceEntry()])

    @classmethod
    def empty(cls) -> "OppositionForm":
        """A cleared form: blank marks and one blank goods/services row per side."""
        return cls()


def parse_nice_class(value: Union[int, str, None]) -> Optional[int]:
    """
    Parse a Nice class typed into the form.

    Returns:
        The class number, or None if the value is blank, not an integer,
        or outside 1-45.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        text = value.strip()
        if not _INTEGER.fullmatch(text):
            return None
        number = int(text)
    if MIN_NICE_CLASS <= number <= MAX_NICE_CLASS:
        return number
    return None


def _is_complete(entry: GoodServiceEntry) -> bool:
    return entry.term.strip() != "" and parse_nice_class(entry.nice_class) is not None


def has_valid_goods(goods: List[GoodServiceEntry]) -> bool:
    """A goods list is valid when it is non-empty and every row is fully filled in."""
    return len(goods) > 0 and all(_is_complete(entry) for entry in goods)


def validate_form(form: OppositionForm) -> Optional[str]:
    """
    Check the form against the submission rules in order.

    Returns:
        The message of the first failing rule, or None if the form is valid.
    """
    if form.applicant_wordmark.strip() == "":
        return MISSING_APPLICANT_MARK
    if form.opponent_wordmark.strip() == "":
        return MISSING_OPPONENT_MARK
    if form.opponent_is_registered and form.opponent_registration_number.strip() == "":
        return MISSING_REGISTRATION_NUMBER
    if len(form.applicant_goods) > MAX_GOODS_PER_SIDE:
        return TOO_MANY_APPLICANT_GOODS
    if not has_valid_goods(form.applicant_goods):
        return INVALID_APPLICANT_GOODS
    if len(form.opponent_goods) > MAX_GOODS_PER_SIDE:
        return TOO_MANY_OPPONENT_GOODS
    if not has_valid_goods(form.opponent_goods):
        return INVALID_OPPONENT_GOODS
    return None


def is_form_valid(form: OppositionForm) -> bool:
    """Whether the form may be submitted at all."""
    return validate_form(form) is None


def _to_goods(entries: List[GoodServiceEntry]) -> List[GoodOrService]:
    return [
        GoodOrService(term=entry.term.strip(), nice_class=parse_nice_class(entry.nice_class))
        for entry in entries
    ]


def build_prediction_request(form: OppositionForm) -> PredictionRequest:
    """
    Build the typed request for one orchestration run.

    Args:
        form: Raw form state.

    Returns:
        PredictionRequest: Trimmed marks and goods/services lists.

    Raises:
        FormValidationError: With the first failing rule's message.
    """
    problem = validate_form(form)
    if problem is not None:
        raise FormValidationError(problem)

    registration_number = None
    if form.opponent_is_registered:
        registration_number = form.opponent_registration_number.strip()

    return PredictionRequest(
        applicant=TrademarkMark(wordmark=form.applicant_wordmark.strip(), is_registered=False),
        opponent=TrademarkMark(
            wordmark=form.opponent_wordmark.strip(),
            is_registered=form.opponent_is_registered,
            registration_number=registration_number,
        ),
        applicant_goods=_to_goods(form.applicant_goods),
        opponent_goods=_to_goods(form.opponent_goods),
    )
