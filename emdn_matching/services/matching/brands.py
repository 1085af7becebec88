"""Manufacturer code to brand keyword table.

Reference prices carry a short manufacturer code; products carry free-text
names. A price's brand bonus fires when one of its keywords occurs in the
product. Keywords are lowercase and matched as case-insensitive substrings.
"""
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from emdn_matching.errors.exceptions import ConfigError

MANUFACTURER_BRANDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "DPI": ("depuy", "charnley", "corail", "sigma", "attune", "pinnacle", "marathon", "triloc"),
    "ZIM": ("zimmer", "nexgen", "trilogy", "continuum", "persona", "avenir", "fitmore",
            "taperloc", "znn", "cbl"),
    "AES": ("aesculap", "braun", "bicontact", "plasmacup", "plasmafit", "centrament", "excia",
            "corehip", "trilliance", "isofar", "metha"),
    "BEZ": ("beznoska", "poldi", "csc", "rmd"),
    "LIM": ("lima", "physica", "modulus"),
    "SND": ("smith", "nephew", "genesis", "polarstem", "r3", "oxinium", "journey", "legion"),
    "MHG": ("mathys", "twinsys", "ccb", "optimys", "rmb", "bettlach", "enovis"),
    "GRP": ("lepine", "trendhip", "screwcup"),
    "M17": ("medacta", "amystem", "mpact", "versafitcup", "quadra", "mectacer"),
    "SRF": ("serf", "novae", "sunfit", "sagitta"),
    "STR": ("stryker", "abgii", "trident", "accolade", "mako", "triathlon", "rejuvenate"),
    "ICA": ("implantcast", "mutars", "ecofit", "actinia", "bicana", "muller"),
    "WAL": ("waldemar", "megasystem", "endo modell", "lubinus"),
    "BIM": ("biomet", "bimetric", "taperloc", "mallory", "exceed", "avantage"),
    "BIM-GB": ("biomet", "bimetric", "taperloc", "mallory", "oxford"),
    "BIM-US": ("biomet", "maxfire", "marxmen"),
    "ADL-IT": ("adler", "hydra", "fixa", "larus", "pulchra", "parva"),
    # Spelling used by some source files
    "ADL- IT": ("adler", "hydra", "fixa", "larus", "pulchra", "parva"),
    "XNO": ("xnov",),
    "SYT": ("synthes", "depuy synthes"),
    "SYT-CH": ("synthes", "depuy synthes"),
    "HOB": ("hofer",),
    "HOB-AT": ("hofer",),
    "C2F": ("c2f", "mc2"),
    "MDN": ("medin",),
    "SVQ": ("genutech",),
    "MHB": ("balansys",),
    "MMG": ("bioball",),
    "ZMN": ("zimmer",),
    "CVO": ("dixi",),
    "KRM": ("karpometakarp",),
    "MXO": ("freedom",),
    "DDE": ("symbol",),
    "ATH": ("arthrex", "tightrope", "gryphon"),
    "DPI-US": ("depuy", "intrafix", "gryphon", "versalok"),
    "MDO": ("medline", "versaloop", "rigidloop", "truespan", "latarjet"),
    "STORZ": ("storz", "megafix"),
    "CYE": ("conmed", "quattro", "crossfix"),
    "BTD": ("activapin", "activanail", "activascrew"),
    "SXA": ("magnezix",),
    "MGZ": ("medgal",),
    "KIO": ("kinamed", "inteos"),
    "CHP-PL": ("charfix",),
    "CHV": ("variloc", "neogen"),
    "DMM": ("marquardt",),
    "LSM": ("vrp", "diphos"),
    "NUI": ("precice", "stryde"),
    "PGM": ("fassier", "duval"),
})


class BrandTable:
    """Validated, lowercase view of a manufacturer brand table."""

    def __init__(self, brands: Mapping[str, Sequence[str]] = MANUFACTURER_BRANDS):
        problems: List[str] = []
        table: Dict[str, Tuple[str, ...]] = {}

        for code, keywords in brands.items():
            cleaned = tuple(k.strip().lower() for k in keywords if k and k.strip())
            if not cleaned:
                problems.append(f"{code}: empty keyword list")
                continue
            table[code] = cleaned

        if problems:
            raise ConfigError(
                f"{len(problems)} manufacturer brand entr(ies) are invalid",
                problems=problems,
            )
        self._table: Mapping[str, Tuple[str, ...]] = MappingProxyType(table)

    def keywords(self, manufacturer_code: Optional[str]) -> Tuple[str, ...]:
        if not manufacturer_code:
            return ()
        return self._table.get(manufacturer_code, ())

    def __contains__(self, manufacturer_code: object) -> bool:
        return manufacturer_code in self._table

    def __len__(self) -> int:
        return len(self._table)
