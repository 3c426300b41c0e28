"""Functions needed to instantiate a class from a configuration block.

A YAML block is converted into an instantiated class, after checking that the
requested class is known and that its arguments are not specified twice.
"""

from copy import deepcopy
from warnings import warn

from .logger import logger

__all__ = ["module_dict", "instantiate"]


def module_dict(module, pattern=None):
    """Maps the names of the classes defined in a module onto the classes.

    Each class is registered under its class name, under its `name` class
    attribute (if non-empty) and under each of its `aliases`.

    Parameters
    ----------
    module : module
        Module from which to fetch the classes
    pattern : str, optional
        If specified, only keep classes which contain this pattern in their name

    Returns
    -------
    dict
        Dictionary which maps acceptable class names to classes themselves
    """
    classes = {}
    for cls_name in getattr(module, "__all__", dir(module)):
        # Skip private objects
        if cls_name.startswith("_"):
            continue

        # Only consider classes defined within the module of interest
        cls = getattr(module, cls_name)
        if not isinstance(cls, type) or module.__name__ not in cls.__module__:
            continue
        if pattern is not None and pattern not in cls.__name__:
            continue

        classes[cls_name] = cls
        if getattr(cls, "name", None):
            classes[cls.name] = cls
        for alias in getattr(cls, "aliases", ()):
            classes[alias] = cls

    return classes


def instantiate(module_dict, cfg, alt_name=None, **kwargs):
    """Instantiates a class from a configuration dictionary.

    The configuration may be provided as:

    .. code-block:: yaml

        module:
          name: class_name
          kwarg_1: value_1
          kwarg_2: value_2

    or, equivalently, with the keyword arguments nested under `kwargs`. A
    plain string is interpreted as a class name with no arguments.

    Parameters
    ----------
    module_dict : dict
        Dictionary which maps a class name onto a class
    cfg : Union[str, dict]
        Configuration dictionary
    alt_name : str, optional
        Key under which the class name can be specified, beside `name` itself
    **kwargs : dict, optional
        Additional keyword arguments to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    # A string is a class name with no parameters
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    # Fetch the class name
    config = deepcopy(cfg)
    key = "name"
    if alt_name is not None and alt_name in config:
        assert "name" not in config, f"Should specify one of `name` or `{alt_name}`"
        key = alt_name
    assert key in config, "Could not find the name of the class under `name`"
    class_name = config.pop(key)

    if class_name not in module_dict:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps "
            f"names to classes. Available names: {list(module_dict.keys())}"
        )

    # Gather the arguments and keyword arguments
    args = config.pop("args", [])
    kwargs = dict(config.pop("kwargs", {}), **kwargs)
    if isinstance(args, dict):
        warn(
            "Keyword arguments should be provided under `kwargs`, not "
            f"`args` in {class_name}",
            DeprecationWarning,
        )
        config.update(args)
        args = []

    for k in config:
        assert k not in kwargs, (
            f"The keyword argument {k} is provided at the top level "
            "and under `kwargs`. Ambiguous."
        )
    kwargs.update(config)

    # Initialize
    cls = module_dict[class_name]
    try:
        return cls(*args, **kwargs)

    except Exception as err:
        logger.error(
            "Failed to instantiate %s with these arguments:\n"
            "  - args: %s\n  - kwargs: %s",
            cls.__name__,
            args,
            kwargs,
        )
        raise err
