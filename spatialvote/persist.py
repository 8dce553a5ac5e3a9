'''Dictionary serialization of spatialvote parameter objects.

Method parameter bundles, candidates, choosers and evaluators carry
a ``to_dict()`` method added by the :func:`simple_serialization` decorator.
The dictionaries are JSON-ready and name the class of the object under the
``class`` key, so :func:`from_dict` can rebuild an equal object from them.

Only classes defined in the spatialvote package can be rebuilt.
'''

import inspect
import importlib
from typing import Any, Callable, Dict, List

PACKAGE = 'spatialvote'

PLAIN_TYPES = (str, int, float, bool, type(None))

# immutable containers that do not survive JSON as themselves
TYPED_SEQUENCES: Dict[str, type] = {
    'tuple': tuple,
    'frozenset': frozenset,
}


def simple_serialization(class_: type) -> type:
    '''Add a ``to_dict()`` method serializing the constructor arguments.

    The arguments are read back from the attributes of the same names, so
    the class must store each of its constructor arguments under its name.

    :param class_: The class to decorate.
    '''
    param_names = constructor_params(class_)

    def to_dict(self) -> Dict[str, Any]:
        out = {'class': class_path(type(self))}
        for name in param_names:
            out[name] = serialize_value(getattr(self, name))
        return out

    class_.to_dict = to_dict
    return class_


def constructor_params(class_: type) -> List[str]:
    '''Names of the explicit constructor parameters of the class.'''
    if class_.__init__ is object.__init__:
        return []
    return [
        name
        for name, param in inspect.signature(class_.__init__).parameters.items()
        if name != 'self' and param.kind not in (
            param.VAR_POSITIONAL, param.VAR_KEYWORD
        )
    ]


def class_path(class_: type) -> str:
    return f'{class_.__module__}.{class_.__name__}'


def serialize_value(value: Any) -> Any:
    '''Convert a value to a JSON-ready form.

    Objects with a ``to_dict()`` method are converted by it. Tuples and
    frozensets are tagged with their type. Dictionaries with non-string
    keys are stored as parallel key and value lists.

    :raises ValueError: If the value cannot be represented.
    '''
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, PLAIN_TYPES):
        return value
    for name, seqtype in TYPED_SEQUENCES.items():
        if type(value) is seqtype:
            return {'type': name, 'value': _serialize_items(value)}
    if isinstance(value, dict):
        if all(isinstance(key, str) for key in value):
            return {key: serialize_value(val) for key, val in value.items()}
        return {
            'type': 'dict',
            'keys': _serialize_items(value.keys()),
            'values': _serialize_items(value.values()),
        }
    if isinstance(value, list):
        return _serialize_items(value)
    raise ValueError(f'cannot serialize {value!r} to dict format')


def _serialize_items(items) -> List[Any]:
    return [serialize_value(item) for item in items]


def deserialize_value(value: Any) -> Any:
    '''Rebuild a value converted by :func:`serialize_value`.'''
    if isinstance(value, PLAIN_TYPES):
        return value
    if isinstance(value, list):
        return [deserialize_value(item) for item in value]
    if not isinstance(value, dict):
        raise ValueError(f'cannot deserialize {value!r}, type unknown')
    if value.get('type') == 'dict':
        return dict(zip(
            [deserialize_value(key) for key in value['keys']],
            [deserialize_value(val) for val in value['values']],
        ))
    if value.get('type') in TYPED_SEQUENCES:
        seqtype = TYPED_SEQUENCES[value['type']]
        return seqtype(deserialize_value(item) for item in value['value'])
    if 'class' in value:
        return _rebuild(value)
    return {key: deserialize_value(val) for key, val in value.items()}


def _rebuild(clsdef: Dict[str, Any]) -> Any:
    cls = resolve_class(clsdef['class'])
    kwargs = {
        key: deserialize_value(val)
        for key, val in clsdef.items() if key != 'class'
    }
    return cls(**kwargs)


def resolve_class(path: Any) -> Callable:
    '''Find the spatialvote class with the given dotted path.

    :raises ValueError: If the path is malformed or points outside
        spatialvote.
    '''
    if not is_class_path(path):
        raise ValueError(f'invalid spatialvote class def: {path!r}')
    module_name, name = path.rsplit('.', 1)
    try:
        cls = getattr(importlib.import_module(module_name), name)
    except (ImportError, AttributeError) as e:
        raise ValueError(f'unknown spatialvote class: {path}') from e
    if not isinstance(cls, type):
        raise ValueError(f'not a class: {path}')
    return cls


def is_class_path(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    chunks = value.split('.')
    return (
        len(chunks) >= 2
        and chunks[0] == PACKAGE
        and all(chunk.isidentifier() for chunk in chunks)
    )


def from_dict(value: Dict[str, Any]) -> Any:
    """Rebuild a parameter object from its dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    :raises ValueError: If the dictionary does not describe a spatialvote
        object.
    """
    if not isinstance(value, dict):
        raise ValueError('invalid spatialvote object def: dict expected,'
                         f' got {value!r}')
    if 'class' not in value:
        raise ValueError('invalid spatialvote object def: '
                         'must have a class key')
    return _rebuild(value)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a parameter object to a JSON-ready dictionary.

    :param obj: An object with a ``to_dict()`` method, such as the method
        parameters, candidates, choosers and evaluators.
    """
    if not hasattr(obj, 'to_dict'):
        raise ValueError(f'{obj!r} is not a spatialvote parameter object')
    return obj.to_dict()
