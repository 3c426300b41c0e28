"""Module which contains enumerated types shared across the project."""

from enum import IntEnum

from .globals import *

__all__ = ["enum_factory", "SpeciesEnum", "StepEnum", "OriginEnum"]


class SpeciesEnum(IntEnum):
    """Enumerates the charged particle species hypotheses."""

    UNKNOWN = -1
    ELECTRON = ELEC_SPECIES
    MUON = MUON_SPECIES
    PION = PION_SPECIES
    KAON = KAON_SPECIES
    PROTON = PROT_SPECIES


class StepEnum(IntEnum):
    """Enumerates the PID selection steps monitored by the QA."""

    BEFORE_PID = 0
    AFTER_PID = 1


class OriginEnum(IntEnum):
    """Enumerates the Monte Carlo origins of a reconstructed candidate."""

    FAKE = 0
    PHYS_PRIMARY = 1
    WEAK = 2
    MATERIAL = 3
    UNKNOWN = 4


def enum_factory(enum, value):
    """Parses an enumerated object from string name(s) to value(s).

    Parameters
    ----------
    enum : str
        Name of the enumerated type
    value : Union[str, int, List[Union[str, int]]]
        Name or names of the enumerated objects (from config)

    Returns
    -------
    Union[int, List[int]]
        Value or values of the enumerated objects
    """
    enum_dict = {"species": SpeciesEnum, "step": StepEnum, "origin": OriginEnum}
    if enum not in enum_dict:
        raise ValueError(
            f"Enumerated type not recognized: {enum}. Must be one of "
            f"{list(enum_dict.keys())}."
        )
    enum = enum_dict[enum]

    def parse(v):
        if not isinstance(v, str):
            return enum(v).value
        if not hasattr(enum, v.upper()):
            raise ValueError(
                f"Enumerated object not recognized: {v}. Must be one "
                f"of {[e.name for e in enum]}."
            )
        return getattr(enum, v.upper()).value

    if isinstance(value, (str, int)):
        return parse(value)

    return [parse(v) for v in value]
