#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chemical Element Table

Defines the Element enumeration together with the van der Waals radii,
valence limits and display properties used by the geometry engines.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class Element(Enum):
    """
    Chemical element keyed by its PDB symbol (uppercase).

    ``Element.UNKNOWN`` is the sentinel for symbols outside the table; it never
    takes part in bonding or backbone tracing.
    """
    H = "H"
    HE = "HE"
    LI = "LI"
    BE = "BE"
    B = "B"
    C = "C"
    N = "N"
    O = "O"
    F = "F"
    NE = "NE"
    NA = "NA"
    MG = "MG"
    AL = "AL"
    SI = "SI"
    P = "P"
    S = "S"
    CL = "CL"
    AR = "AR"
    K = "K"
    CA = "CA"
    SC = "SC"
    TI = "TI"
    V = "V"
    CR = "CR"
    MN = "MN"
    FE = "FE"
    CO = "CO"
    NI = "NI"
    CU = "CU"
    ZN = "ZN"
    GA = "GA"
    GE = "GE"
    AS = "AS"
    SE = "SE"
    BR = "BR"
    KR = "KR"
    RB = "RB"
    SR = "SR"
    Y = "Y"
    ZR = "ZR"
    NB = "NB"
    MO = "MO"
    TC = "TC"
    RU = "RU"
    RH = "RH"
    PD = "PD"
    AG = "AG"
    CD = "CD"
    IN = "IN"
    SN = "SN"
    SB = "SB"
    TE = "TE"
    I = "I"
    XE = "XE"
    CS = "CS"
    BA = "BA"
    LA = "LA"
    CE = "CE"
    PR = "PR"
    ND = "ND"
    PM = "PM"
    SM = "SM"
    EU = "EU"
    GD = "GD"
    TB = "TB"
    DY = "DY"
    HO = "HO"
    ER = "ER"
    TM = "TM"
    YB = "YB"
    LU = "LU"
    HF = "HF"
    TA = "TA"
    W = "W"
    RE = "RE"
    OS = "OS"
    IR = "IR"
    PT = "PT"
    AU = "AU"
    HG = "HG"
    TL = "TL"
    PB = "PB"
    BI = "BI"
    PO = "PO"
    AT = "AT"
    RN = "RN"
    FR = "FR"
    RA = "RA"
    AC = "AC"
    TH = "TH"
    PA = "PA"
    U = "U"
    NP = "NP"
    PU = "PU"
    AM = "AM"
    CM = "CM"
    BK = "BK"
    CF = "CF"
    ES = "ES"
    FM = "FM"
    MD = "MD"
    NO = "NO"
    LR = "LR"
    UNKNOWN = "X"

    @classmethod
    def from_symbol(cls, symbol: Optional[str]) -> "Element":
        """
        Look up an element by symbol, case-insensitively.

        Args:
            symbol (Optional[str]): Element symbol such as "C", "Fe" or "ZN"

        Returns:
            Element: Matching element, or Element.UNKNOWN
        """
        if not symbol:
            return cls.UNKNOWN
        return _SYMBOL_LOOKUP.get(symbol.strip().upper(), cls.UNKNOWN)

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_known(self) -> bool:
        return self is not Element.UNKNOWN

    @property
    def vdw_radius(self) -> float:
        """Van der Waals radius in Å (Bondi / Mantina)."""
        return VDW_RADII.get(self, DEFAULT_VDW_RADIUS)

    @property
    def max_bonds(self) -> int:
        """Heuristic valence limit used by strict bond inference."""
        return MAX_BONDS.get(self, DEFAULT_MAX_BONDS)

    @property
    def display_radius(self) -> float:
        """Sphere radius in Å for space-filling and surface geometry."""
        return DISPLAY_RADII.get(self, DISPLAY_RADII[Element.UNKNOWN])

    @property
    def color(self) -> Tuple[float, float, float, float]:
        """RGBA display colour."""
        return ELEMENT_COLORS.get(self, DEFAULT_COLOR)


_SYMBOL_LOOKUP: Dict[str, Element] = {e.value: e for e in Element}

# Symbols with two letters that may appear left-justified in the atom name
# field when the element columns are blank
MULTI_LETTER_SYMBOLS = frozenset({
    "FE", "ZN", "MG", "MN", "CU", "NI", "CO", "NA", "CL", "BR", "SE", "CA",
    "CD", "LI", "AL", "SI", "AG", "AU", "PT", "SR", "BA", "CS", "RB",
})

DEFAULT_VDW_RADIUS = 1.70
VDW_RADII: Dict[Element, float] = {
    Element.H: 1.20,
    Element.HE: 1.40,
    Element.LI: 1.82,
    Element.BE: 1.53,
    Element.B: 1.92,
    Element.C: 1.70,
    Element.N: 1.55,
    Element.O: 1.52,
    Element.F: 1.47,
    Element.NE: 1.54,
    Element.NA: 2.27,
    Element.MG: 1.73,
    Element.AL: 1.84,
    Element.SI: 2.10,
    Element.P: 1.80,
    Element.S: 1.80,
    Element.CL: 1.75,
    Element.AR: 1.88,
    Element.K: 2.75,
    Element.CA: 2.31,
    Element.FE: 2.05,
    Element.CO: 1.88,
    Element.ZN: 1.39,
    Element.CU: 1.40,
    Element.BR: 1.85,
    Element.I: 1.98,
}

DEFAULT_MAX_BONDS = 2
MAX_BONDS: Dict[Element, int] = {
    Element.C: 4,
    Element.N: 3,
    Element.O: 2,
    Element.S: 2,
    Element.H: 1,
}

# Display radii in Å
DISPLAY_RADII: Dict[Element, float] = {
    Element.H: 0.30,
    Element.C: 0.40,
    Element.N: 0.38,
    Element.O: 0.35,
    Element.P: 0.42,
    Element.S: 0.43,
    Element.FE: 0.45,
    Element.ZN: 0.42,
    Element.MG: 0.41,
    Element.CA: 0.47,
    Element.CL: 0.44,
    Element.F: 0.38,
    Element.BR: 0.45,
    Element.I: 0.48,
    Element.CU: 0.45,
    Element.MN: 0.43,
    Element.CO: 0.35,
    Element.NI: 0.41,
    Element.NA: 0.45,
    Element.K: 0.50,
    Element.B: 0.38,
    Element.UNKNOWN: 0.40,
}

DEFAULT_COLOR = (0.8, 0.8, 0.8, 1.0)
ELEMENT_COLORS: Dict[Element, Tuple[float, float, float, float]] = {
    Element.H: (0.9, 0.9, 0.9, 1.0),
    Element.C: (0.5, 0.5, 0.5, 1.0),
    Element.N: (0.2, 0.2, 0.8, 1.0),
    Element.O: (0.9, 0.2, 0.2, 1.0),
    Element.S: (0.9, 0.9, 0.0, 1.0),
    Element.P: (0.9, 0.5, 0.0, 1.0),
    Element.F: (0.2, 0.9, 0.2, 1.0),
    Element.CL: (0.1, 0.9, 0.1, 1.0),
    Element.BR: (0.6, 0.1, 0.1, 1.0),
    Element.I: (0.5, 0.0, 0.5, 1.0),
    Element.NA: (0.6, 0.6, 0.9, 1.0),
    Element.MG: (0.5, 0.9, 0.5, 1.0),
    Element.K: (0.5, 0.5, 1.0, 1.0),
    Element.CA: (0.7, 0.7, 0.7, 1.0),
    Element.FE: (0.7, 0.0, 0.0, 1.0),
    Element.ZN: (0.5, 0.5, 0.8, 1.0),
    Element.SE: (0.6, 0.6, 0.0, 1.0),
    Element.MN: (0.6, 0.0, 0.6, 1.0),
    Element.NI: (0.0, 0.6, 0.6, 1.0),
    Element.CO: (0.0, 0.4, 0.7, 1.0),
    Element.CU: (0.8, 0.4, 0.0, 1.0),
    Element.HE: (0.9, 0.9, 0.9, 1.0),
    Element.LI: (0.6, 0.0, 0.0, 1.0),
    Element.BE: (0.0, 0.6, 0.0, 1.0),
    Element.B: (0.8, 0.6, 0.6, 1.0),
    Element.NE: (0.7, 0.9, 0.9, 1.0),
    Element.AL: (0.8, 0.6, 0.8, 1.0),
    Element.SI: (0.5, 0.6, 0.8, 1.0),
    Element.AR: (0.8, 0.8, 0.9, 1.0),
    Element.SC: (0.6, 0.6, 0.6, 1.0),
    Element.TI: (0.6, 0.6, 0.7, 1.0),
    Element.V: (0.6, 0.6, 0.7, 1.0),
    Element.CR: (0.5, 0.5, 0.6, 1.0),
    Element.GA: (0.5, 0.5, 0.7, 1.0),
    Element.GE: (0.5, 0.5, 0.6, 1.0),
    Element.AS: (0.6, 0.3, 0.6, 1.0),
    Element.RB: (0.5, 0.5, 1.0, 1.0),
    Element.SR: (0.5, 1.0, 0.0, 1.0),
    Element.Y: (0.5, 0.5, 0.5, 1.0),
    Element.ZR: (0.5, 0.5, 0.5, 1.0),
    Element.MO: (0.5, 0.5, 0.5, 1.0),
    Element.AG: (0.7, 0.7, 0.7, 1.0),
    Element.CD: (0.5, 0.5, 0.8, 1.0),
    Element.SN: (0.5, 0.5, 0.5, 1.0),
    Element.SB: (0.6, 0.6, 0.6, 1.0),
    Element.BA: (0.1, 0.7, 0.1, 1.0),
    Element.W: (0.5, 0.5, 0.5, 1.0),
    Element.AU: (0.8, 0.8, 0.0, 1.0),
    Element.HG: (0.6, 0.6, 0.6, 1.0),
    Element.PB: (0.5, 0.5, 0.5, 1.0),
}
