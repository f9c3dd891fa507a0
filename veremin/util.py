"""Utils for veremin."""

import os
import json
from pathlib import Path
from typing import Dict, TypeVar, Union

pkg_name = 'veremin'

DFLT_MODEL_DIR = Path.home() / '.cache' / pkg_name
model_dir = Path(os.environ.get('VEREMIN_MODEL_DIR', DFLT_MODEL_DIR))


def return_none(*args, **kwargs):
    """
    An empty function that returns None no matter the arguments.
    Often used as a "do nothing" general callback function.
    """
    return None


# --------------------------------------------------------------------------------------
# Logging callbacks


def print_json_if_possible(x):
    """Prints the input as json (if it can be serialized) and adds a newline."""
    try:
        x = json.dumps(x)
    except TypeError:
        pass
    print(x)
    print()


# --------------------------------------------------------------------------------------
# Object resolution

T = TypeVar("T")


def resolve_object(
    obj: Union[str, T],
    *,
    object_map: Dict[str, T],
    expected_type: type = None,
    error_message: str = None,
) -> T:
    """
    Resolves an object by either returning it directly if it's of the correct type,
    or looking it up in a mapping if it's a string.

    Args:
        obj: The object to resolve. Can be a string (to be looked up in object_map)
             or the object itself (if it's already of type T).
        object_map: A dictionary mapping strings to objects of type T.
        expected_type: (Optional) The expected type of the resolved object.
        error_message: (Optional) A custom error message to use if a ValueError
                       or TypeError is raised.

    Raises:
        TypeError: If obj is not a string or of the expected type.
        ValueError: If obj is a string but is not found in object_map.

    >>> resolve_object('a', object_map={'a': 1})
    1
    >>> resolve_object(2, object_map={'a': 1}, expected_type=int)
    2
    """
    if isinstance(obj, str):
        if obj in object_map:
            resolved_obj = object_map[obj]
        else:
            msg = error_message or (
                f"Unknown object identifier: {obj}. Choose from {sorted(object_map)}"
            )
            raise ValueError(msg)
    elif expected_type is None or isinstance(obj, expected_type):
        resolved_obj = obj
    else:
        msg = error_message or f"Expected type {expected_type}, got {type(obj)}"
        raise TypeError(msg)

    if expected_type and not isinstance(resolved_obj, expected_type):
        msg = (
            error_message
            or f"Resolved object should be of type {expected_type}, got {type(resolved_obj)}"
        )
        raise TypeError(msg)

    return resolved_obj
