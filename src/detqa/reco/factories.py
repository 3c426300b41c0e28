"""Construct a reconstruction stage class from its name."""

from detqa.utils.factory import instantiate, module_dict

from . import builder

# Build a dictionary of available reconstruction stages
RECO_DICT = {}
for module in [builder]:
    RECO_DICT.update(**module_dict(module))

__all__ = ["reco_factory"]


def reco_factory(name, cfg):
    """Instantiates a reconstruction stage from a configuration dictionary.

    Parameters
    ----------
    name : str
        Name of the reconstruction stage
    cfg : dict
        Reconstruction stage configuration

    Returns
    -------
    RecoBase
        Initialized reconstruction stage
    """
    cfg = dict(cfg or {})
    cfg.setdefault("name", name)

    return instantiate(RECO_DICT, cfg)
