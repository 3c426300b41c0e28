"""Construct a QA module class from its name."""

from detqa.utils.factory import instantiate, module_dict

from . import tpc, trd

# Build a dictionary of available QA modules
QA_DICT = {}
for module in [tpc, trd]:
    QA_DICT.update(**module_dict(module))

__all__ = ["qa_factory"]


def qa_factory(name, cfg):
    """Instantiates a QA module from a configuration dictionary.

    Parameters
    ----------
    name : str
        Name of the QA module
    cfg : dict
        QA module configuration

    Returns
    -------
    QABase
        Initialized QA module
    """
    # Provide the name to the configuration
    cfg = dict(cfg or {})
    cfg.setdefault("name", name)

    return instantiate(QA_DICT, cfg)
