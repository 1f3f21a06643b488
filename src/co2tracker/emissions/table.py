"""Emission factor tables.

Factors are kg CO₂ per km for the whole aircraft, combustion only, derived as
fuel burn (kg/km) × 3.16 (IPCC kerosene factor). Values marked *est.* are
interpolated from similar types.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

_TYPE_FACTORS: dict[str, float] = {
    # Turboprops
    "AT43": 4.1, "AT45": 4.0, "AT72": 4.9, "AT76": 4.7,
    "DH8A": 4.4, "DH8B": 4.7, "DH8C": 5.4, "DH8D": 6.5,
    "SF34": 3.2, "D328": 3.6, "F50": 4.7, "JS41": 3.2,
    "L410": 2.1, "AN26": 7.9, "AN24": 7.0, "BEH2": 3.2,
    # Regional jets
    "CRJ1": 5.9, "CRJ2": 5.7, "CRJ7": 7.7, "CRJ9": 8.8, "CRJX": 8.4,
    "E135": 4.6, "E145": 4.9, "E170": 8.2, "E75L": 8.8, "E75S": 8.8,
    "E190": 10.2, "E195": 10.1, "E290": 7.8, "E295": 8.3,
    "F70": 7.3, "F100": 8.8, "RJ85": 9.5, "RJ1H": 10.1,  # est.
    "SU95": 8.9, "AR85": 8.8,
    # Narrow-body
    "A318": 8.5, "A319": 9.3, "A19N": 7.6,
    "A320": 9.5, "A20N": 8.8,
    "A321": 11.4, "A21N": 10.7,
    "B731": 9.5, "B732": 10.1, "B733": 10.1,
    "B734": 10.4, "B735": 9.5, "B736": 8.8,
    "B737": 8.9, "B738": 10.0, "B739": 10.8,
    "B37M": 7.9, "B38M": 8.6, "B39M": 9.2,
    "B752": 13.9, "B753": 14.8,
    "MD80": 11.1, "MD81": 10.7, "MD82": 11.1, "MD83": 11.1,  # est.
    "MD87": 10.1, "MD88": 11.1, "MD90": 10.4,  # est.
    "BCS1": 7.2, "BCS3": 7.7,
    "C919": 9.8, "B712": 8.8,  # est.
    "DC93": 8.8, "DC95": 9.5,  # est.
    "T204": 10.4, "T154": 17.4,  # est.
    # Wide-body
    "A306": 20.5, "A30B": 22.1, "A310": 17.4,  # est.
    "A332": 19.6, "A333": 20.6,
    "A338": 17.2, "A339": 18.9,
    "A342": 22.1, "A343": 22.3, "A345": 25.3, "A346": 26.9,
    "A359": 20.7, "A35K": 23.8, "A388": 43.5,
    "B741": 37.9, "B742": 37.9, "B743": 37.9,  # est.
    "B744": 36.5, "B748": 33.0,
    "B762": 15.5, "B763": 17.2, "B764": 18.5,
    "B772": 21.6, "B77L": 23.9, "B77W": 27.4,
    "B788": 16.8, "B789": 18.1, "B78X": 19.5,
    "DC10": 26.9, "MD11": 26.9,  # est.
    "L101": 26.9, "IL96": 28.4, "IL86": 31.6,  # est.
    # Business / private
    "C25A": 1.2, "C25B": 1.3, "C25C": 1.5, "C25M": 1.6,
    "C510": 1.0, "C525": 1.2,  # est.
    "C500": 1.1, "C550": 1.4, "C560": 1.8, "C56X": 2.0,  # est.
    "C680": 2.4, "C68A": 2.4, "C700": 2.6, "C750": 3.5,
    "CL30": 2.9, "CL35": 2.9, "CL60": 3.2,
    "GL5T": 5.1, "GL7T": 5.5, "GLEX": 5.3,
    "GLF4": 3.5, "GLF5": 5.9, "GLF6": 5.4,
    "G150": 1.8, "G280": 2.4,  # est.
    "FA50": 2.2, "FA7X": 3.4, "FA8X": 3.5, "F900": 2.7, "F2TH": 2.4,
    "E35L": 1.6, "E55P": 1.6,
    "LJ35": 2.0, "LJ45": 2.1, "LJ60": 2.4, "LJ75": 2.3,
    "H25B": 2.5, "H25C": 3.0,
    "GALX": 2.6, "ASTR": 1.8,
    "PC12": 1.4, "PC24": 1.6, "TBM7": 1.1, "TBM8": 1.1, "TBM9": 1.1,
    "PRM1": 1.5, "P180": 1.4,  # est.
    "BE20": 1.4, "BE30": 1.9, "BE40": 1.6, "BE4W": 1.7,
    "EA50": 1.0,  # est.
    # Military transport / tanker, all est.
    "C130": 14.2, "C30J": 12.6, "C17": 31.6, "C5": 45.8, "C5M": 45.8,
    "K35R": 26.9, "KC10": 26.9, "A400": 15.2, "MRTT": 20.5,
    "A124": 56.9, "AN12": 14.2, "IL76": 23.7,
    "E3CF": 26.9, "E6": 26.9, "P3": 11.1, "P8": 11.1,
}  # fmt: skip

# ICAO wake turbulence category: Light, Medium, Heavy, Super (J).
_WEIGHT_CLASS_FACTORS: dict[str, float] = {"L": 1.5, "M": 8.0, "H": 22.0, "J": 43.5}

# ADS-B emitter category. B*/C* are gliders, balloons, UAVs and surface
# vehicles and contribute (almost) nothing.
_CATEGORY_FACTORS: dict[str, float] = {
    "A1": 1.2, "A2": 3.5, "A3": 9.0, "A4": 13.9, "A5": 22.0, "A6": 22.0, "A7": 0.5,
    "B1": 0.0, "B2": 0.1, "B4": 0.0, "B6": 0.1, "C1": 0.0, "C3": 0.0,
}  # fmt: skip

TYPE_FACTORS: Mapping[str, float] = MappingProxyType(_TYPE_FACTORS)
"""Primary table: ICAO type designator -> kg CO₂/km."""

WEIGHT_CLASS_FACTORS: Mapping[str, float] = MappingProxyType(_WEIGHT_CLASS_FACTORS)
"""Fallback by wake turbulence category -> kg CO₂/km."""

CATEGORY_FACTORS: Mapping[str, float] = MappingProxyType(_CATEGORY_FACTORS)
"""Fallback by ADS-B emitter category -> kg CO₂/km."""
