"""
Delivery classification.
Turns one submitted delivery into the facts every ledger needs: legality,
who is credited with which runs, and whether a wicket counts.
"""
from dataclasses import dataclass
from typing import Optional, Union

from clubscore.models.match import ExtraType, DismissalType
from clubscore.engine.errors import DeliveryValidationError

NOT_LEGAL = {ExtraType.WIDE, ExtraType.NO_BALL}
NOT_BOWLERS_FAULT = {ExtraType.BYE, ExtraType.LEG_BYE}
BOWLER_CREDITED = {
    DismissalType.BOWLED,
    DismissalType.CAUGHT,
    DismissalType.LBW,
    DismissalType.HIT_WICKET,
    DismissalType.STUMPED,
}
FIELDER_INVOLVED = {DismissalType.CAUGHT, DismissalType.RUN_OUT, DismissalType.STUMPED}


@dataclass
class ClassifiedDelivery:
    """A validated delivery and everything derived from it"""
    batsman_name: str
    bowler_name: str
    runs_scored: int = 0
    extra_type: Optional[ExtraType] = None
    extra_runs: int = 0
    is_wicket: bool = False
    dismissal_type: Optional[DismissalType] = None
    fielder_name: Optional[str] = None
    batsman_id: Optional[int] = None
    bowler_id: Optional[int] = None

    @property
    def is_legal(self) -> bool:
        return self.extra_type not in NOT_LEGAL

    @property
    def ball_faced(self) -> bool:
        # Byes and leg-byes are still faced; wides are not
        return self.extra_type != ExtraType.WIDE

    @property
    def batter_runs(self) -> int:
        if self.extra_type in NOT_BOWLERS_FAULT:
            return 0
        return self.runs_scored

    @property
    def total_runs(self) -> int:
        return self.batter_runs + self.extra_runs

    @property
    def bowler_runs(self) -> int:
        if self.extra_type in NOT_BOWLERS_FAULT:
            return 0
        return self.total_runs

    @property
    def is_four(self) -> bool:
        return self.batter_runs == 4

    @property
    def is_six(self) -> bool:
        return self.batter_runs == 6

    @property
    def counts_as_wicket(self) -> bool:
        """Wicket against the innings total (retired batters do not count)"""
        return self.is_wicket and self.dismissal_type != DismissalType.RETIRED

    @property
    def bowler_wicket(self) -> bool:
        return self.is_wicket and self.dismissal_type in BOWLER_CREDITED

    @property
    def commentary(self) -> str:
        return build_commentary(self)


def _parse_enum(enum_cls, value, field_name: str):
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise DeliveryValidationError(f"Invalid {field_name} '{value}'. Expected one of: {allowed}")


def classify_delivery(
    batsman_name: str,
    bowler_name: str,
    runs_scored: int = 0,
    extra_type: Union[ExtraType, str, None] = None,
    extra_runs: int = 0,
    is_wicket: bool = False,
    dismissal_type: Union[DismissalType, str, None] = None,
    fielder_name: Optional[str] = None,
    batsman_id: Optional[int] = None,
    bowler_id: Optional[int] = None,
) -> ClassifiedDelivery:
    """
    Validate the raw fields of one delivery and classify it.
    Raises DeliveryValidationError before anything is written.
    """
    if not batsman_name or not batsman_name.strip() or not bowler_name or not bowler_name.strip():
        raise DeliveryValidationError("batsmanName and bowlerName are required")

    runs_scored = runs_scored or 0
    extra_runs = extra_runs or 0
    if runs_scored < 0 or extra_runs < 0:
        raise DeliveryValidationError("runsScored and extraRuns cannot be negative")

    parsed_extra = _parse_enum(ExtraType, extra_type, "extraType")
    parsed_dismissal = _parse_enum(DismissalType, dismissal_type, "dismissalType") if is_wicket else None

    return ClassifiedDelivery(
        batsman_name=batsman_name.strip(),
        bowler_name=bowler_name.strip(),
        runs_scored=runs_scored,
        extra_type=parsed_extra,
        extra_runs=extra_runs,
        is_wicket=bool(is_wicket),
        dismissal_type=parsed_dismissal,
        fielder_name=fielder_name.strip() if fielder_name and fielder_name.strip() else None,
        batsman_id=batsman_id,
        bowler_id=bowler_id,
    )


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def build_commentary(delivery: ClassifiedDelivery) -> str:
    """Human-readable one-liner for the ball event"""
    if delivery.is_wicket:
        how = delivery.dismissal_type.value if delivery.dismissal_type else "out"
        text = f"WICKET! {delivery.batsman_name} {how}"
        if delivery.fielder_name:
            text += f" ({delivery.fielder_name})"
        if delivery.dismissal_type in BOWLER_CREDITED and delivery.dismissal_type != DismissalType.STUMPED:
            text += f" b {delivery.bowler_name}"
        return text

    # Text shows the one-run penalty even when the scorer left extraRuns at 0
    if delivery.extra_type == ExtraType.WIDE:
        return f"Wide ball, {_plural(delivery.extra_runs or 1, 'run')}"
    if delivery.extra_type == ExtraType.NO_BALL:
        return f"No ball! {_plural(delivery.runs_scored, 'run')} + {delivery.extra_runs or 1} extra"
    if delivery.extra_type == ExtraType.BYE:
        return _plural(delivery.extra_runs, "bye")
    if delivery.extra_type == ExtraType.LEG_BYE:
        return _plural(delivery.extra_runs, "leg bye")
    if delivery.extra_type == ExtraType.PENALTY:
        return f"Penalty, {_plural(delivery.extra_runs, 'run')}"

    if delivery.runs_scored == 4:
        return f"FOUR! {delivery.batsman_name} hits a boundary"
    if delivery.runs_scored == 6:
        return f"SIX! {delivery.batsman_name} clears the rope"
    if delivery.runs_scored == 0:
        return "Dot ball"
    return _plural(delivery.runs_scored, "run")
