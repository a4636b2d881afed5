"""Product-specific quirks for Tuya devices.

Keyed by platform product key, these correct behaviour that the generic
code tables get wrong for a particular product.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class Quirk:
    product_key: str
    # Scene switch code -> button number overrides
    button_numbers: Mapping[str, str] = field(default_factory=dict)


_QUIRKS: Dict[str, Quirk] = {
    # TS0044 four-button scene switch numbers its first key 1, not 4
    "vp6clf9d": Quirk("vp6clf9d", button_numbers={"switch1_value": "1"}),
}


def resolve_quirk(product_key: Optional[str]) -> Optional[Quirk]:
    """Return a quirk definition for the product key if known."""
    if not product_key:
        return None
    return _QUIRKS.get(product_key)
