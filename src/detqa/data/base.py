"""Module with a parent class of all data structures."""

from dataclasses import asdict, dataclass, fields

import numpy as np

__all__ = ["DataBase"]


def parse_size(size):
    """Splits a fixed-length attribute size into a shape and a type.

    Parameters
    ----------
    size : Union[int, Tuple[int], Tuple[Union[int, Tuple[int]], type]]
        Size of the attribute, optionally paired with its type

    Returns
    -------
    Union[int, Tuple[int]]
        Shape of the attribute
    type
        Type of the attribute values
    """
    if isinstance(size, tuple) and len(size) == 2 and isinstance(size[1], type):
        return size

    return size, np.float64


@dataclass(eq=False)
class DataBase:
    """Base class of all data structures.

    Defines basic methods shared by all data structures, among which the
    conversion to and from numpy structured arrays used to store lists of
    objects in HDF5 files.
    """

    # Fixed-length attributes as (key, size) or (key, (size, dtype)) pairs
    _fixed_length_attrs = ()

    # Variable-length attributes as (key, dtype) pairs
    _var_length_attrs = ()

    # Attributes specifying coordinates
    _pos_attrs = ()

    # Attributes specifying vector components
    _vec_attrs = ()

    # String attributes
    _str_attrs = ()

    # Attributes that must never be stored to file
    _skip_attrs = ()

    # Maximum length of stored strings
    _str_length = 256

    # Euclidean axis labels
    _axes = ("x", "y", "z")

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Provides two functions:
        - Gives default values to array-like attributes. If a default value was
          provided in the attribute definition, all instances of this class
          would point to the same memory location.
        - Casts strings when they are provided as binary objects, which is the
          format one gets when loading string from HDF5 files.
        """
        for attr, dtype in self._var_length_attrs:
            if getattr(self, attr) is None:
                setattr(self, attr, np.empty(0, dtype=dtype))
            else:
                setattr(self, attr, np.asarray(getattr(self, attr), dtype=dtype))

        for attr, size in self._fixed_length_attrs:
            shape, dtype = parse_size(size)
            if getattr(self, attr) is None:
                setattr(self, attr, np.zeros(shape, dtype=dtype))
            else:
                value = np.asarray(getattr(self, attr), dtype=dtype)
                assert value.shape == np.empty(shape).shape, (
                    f"The `{attr}` attribute of {self.__class__.__name__} must "
                    f"have shape {shape}, got {value.shape}."
                )
                setattr(self, attr, value)

        for attr in self._str_attrs:
            if isinstance(getattr(self, attr), bytes):
                setattr(self, attr, getattr(self, attr).decode())

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        if self.__class__ != other.__class__:
            return False

        for k, v in self.__dict__.items():
            v_other = getattr(other, k)
            if isinstance(v, np.ndarray):
                if v.shape != v_other.shape or (v_other != v).any():
                    return False
            elif isinstance(v, list):
                if len(v) != len(v_other) or any(a != b for a, b in zip(v, v_other)):
                    return False
            elif v != v_other:
                return False

        return True

    @property
    def fixed_length_attrs(self):
        """Dictionary which maps fixed-length attributes onto their size."""
        return dict(self._fixed_length_attrs)

    @property
    def var_length_attrs(self):
        """Dictionary which maps variable-length attributes onto their type."""
        return dict(self._var_length_attrs)

    def as_dict(self):
        """Returns the data class as dictionary of (key, value) pairs.

        Returns
        -------
        dict
            Dictionary of attribute names and their values
        """
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in self._skip_attrs
        }

    def scalar_dict(self, attrs=None):
        """Returns the data class attributes as a dictionary of scalars.

        This is useful when storing data classes in CSV files, which expect
        a single scalar per column in the table. Vectors are expanded with
        their axis label, fixed-length arrays with their index. Variable-length
        arrays are not stored.

        Parameters
        ----------
        attrs : List[str], optional
            List of attribute names to include in the dictionary. If not
            specified, all the keys are included.

        Returns
        -------
        dict
            Dictionary of scalar values
        """
        scalar_dict, found = {}, []
        for attr, value in self.as_dict().items():
            if attrs is not None and attr not in attrs:
                continue
            found.append(attr)

            if np.isscalar(value):
                scalar_dict[attr] = value

            elif attr in (self._pos_attrs + self._vec_attrs):
                for i, v in enumerate(value):
                    scalar_dict[f"{attr}_{self._axes[i]}"] = v

            elif attr in self.fixed_length_attrs:
                for i, v in enumerate(np.ravel(value)):
                    scalar_dict[f"{attr}_{i}"] = v

            elif attr in self.var_length_attrs:
                assert attrs is None or attr not in attrs, (
                    f"Cannot cast the variable-length `{attr}` attribute to scalars."
                )

            else:
                raise ValueError(
                    f"Cannot expand the `{attr}` attribute of "
                    f"`{self.__class__.__name__}` to scalar values."
                )

        if attrs is not None and len(attrs) != len(found):
            miss = list(set(attrs).difference(set(found)))
            raise AttributeError(
                f"Attribute(s) {miss} do(es) not appear in {self.__class__.__name__}."
            )

        return scalar_dict

    @classmethod
    def dtype(cls):
        """Numpy structured type used to store objects of this class.

        Variable-length attributes and skipped attributes are excluded.

        Returns
        -------
        np.dtype
            Structured type
        """
        fixed = dict(cls._fixed_length_attrs)
        var = dict(cls._var_length_attrs)
        descr = []
        for f in fields(cls):
            if f.name in cls._skip_attrs or f.name in var:
                continue
            if f.name in fixed:
                size, dtype = parse_size(fixed[f.name])
                descr.append((f.name, dtype, size))
            elif f.name in cls._str_attrs:
                descr.append((f.name, f"S{cls._str_length}"))
            elif f.type is bool:
                descr.append((f.name, np.bool_))
            elif f.type is int:
                descr.append((f.name, np.int64))
            else:
                descr.append((f.name, np.float64))

        return np.dtype(descr)

    @classmethod
    def to_array(cls, objects):
        """Converts a list of objects into a structured array.

        Parameters
        ----------
        objects : List[DataBase]
            List of objects of this class

        Returns
        -------
        np.ndarray
            (N) structured array
        """
        dtype = cls.dtype()
        array = np.empty(len(objects), dtype=dtype)
        for i, obj in enumerate(objects):
            for name in dtype.names:
                value = getattr(obj, name)
                if name in cls._str_attrs:
                    value = value.encode()
                array[name][i] = value

        return array

    @classmethod
    def from_record(cls, record, names=None, **kwargs):
        """Builds an object from one element of a structured array.

        Parameters
        ----------
        record : np.void
            One element of a structured array
        names : List[str], optional
            Fields of the record to use. Defaults to all of them
        **kwargs : dict, optional
            Additional attributes (e.g. variable-length arrays)

        Returns
        -------
        DataBase
            Object of this class
        """
        attrs = {}
        for name in names or record.dtype.names:
            value = record[name]
            if isinstance(value, np.ndarray):
                value = value.copy()
            elif isinstance(value, np.bool_):
                value = bool(value)
            elif isinstance(value, np.integer):
                value = int(value)
            elif isinstance(value, np.floating):
                value = float(value)
            attrs[name] = value

        return cls(**attrs, **kwargs)
