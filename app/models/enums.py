import enum


class Stage(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    MEETING = "meeting"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    ON_HOLD = "on_hold"
    WON = "won"
    LOST = "lost"


class SponsorStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    RENEWED = "renewed"


# Board / list order
STAGES = [
    (Stage.NEW, "New"),
    (Stage.CONTACTED, "Contacted"),
    (Stage.MEETING, "Meeting"),
    (Stage.PROPOSAL, "Proposal"),
    (Stage.NEGOTIATION, "Negotiation"),
    (Stage.ON_HOLD, "On Hold"),
    (Stage.WON, "Won"),
    (Stage.LOST, "Lost"),
]
STAGE_ORDER = [s.value for s, _ in STAGES]

# Excluded from every "active pipeline" aggregate
INACTIVE_STAGES = [Stage.ON_HOLD.value, Stage.WON.value, Stage.LOST.value]
ACTIVE_STAGES = [s for s in STAGE_ORDER if s not in INACTIVE_STAGES]

MEDIA_ASSETS = ["Tokenized", "Sporting Crypto", "Fintech Brainfood", "Predicted"]
DEFAULT_MEDIA_ASSET = "Tokenized"


def normalize_media_assets(values):
    """
    Dedupes (order kept) and validates media asset tags.
    An empty or missing list falls back to the default tag.
    """
    result = []
    for value in values or []:
        if value not in MEDIA_ASSETS:
            raise ValueError(f"Unknown media asset: {value}")
        if value not in result:
            result.append(value)
    return result or [DEFAULT_MEDIA_ASSET]
