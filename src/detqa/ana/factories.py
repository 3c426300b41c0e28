"""Construct an analysis script class from its name."""

from detqa.utils.factory import instantiate, module_dict

from . import track, v0

# Build a dictionary of available analysis scripts
ANA_DICT = {}
for module in [track, v0]:
    ANA_DICT.update(**module_dict(module))

__all__ = ["ana_script_factory"]


def ana_script_factory(name, cfg, overwrite=None, log_dir=None, prefix=None):
    """Instantiates an analysis script from a configuration dictionary.

    Parameters
    ----------
    name : str
        Name of the analysis script
    cfg : dict
        Analysis script configuration
    overwrite : bool, optional
        If `True`, overwrite the CSV files if they already exist
    log_dir : str, optional
        Output CSV file directory (shared with driver log)
    prefix : str, optional
        Input file prefix. If provided, it is used to prefix the CSV files

    Returns
    -------
    AnaBase
        Initialized analysis script
    """
    cfg = dict(cfg or {})
    cfg.setdefault("name", name)

    if overwrite is not None:
        return instantiate(
            ANA_DICT, cfg, overwrite=overwrite, log_dir=log_dir, prefix=prefix
        )

    return instantiate(ANA_DICT, cfg, log_dir=log_dir, prefix=prefix)
