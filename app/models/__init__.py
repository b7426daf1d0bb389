from .contact import Contact
from .media_asset import LeadMediaAsset, SponsorMediaAsset
from .lead import Lead
from .sponsor import Sponsor

__all__ = [
    "Contact",
    "LeadMediaAsset",
    "SponsorMediaAsset",
    "Lead",
    "Sponsor",
]
