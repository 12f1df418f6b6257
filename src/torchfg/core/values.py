import torch
from typing import Dict, Iterator, KeysView, List, Optional, Type, TypeVar

from ..sparse import BlockSparseVector
from ..variables.base import Variable

T = TypeVar("T", bound=Variable)


class Values:
    """
    An insertion-ordered store of heterogeneous variables, addressed by integer key.

    Every inserted variable is assigned the next contiguous slice of one joint tangent
    space: a variable with `tangent_dim` d inserted when the running offset is `o` owns
    `range(o, o + d)`. Ranges of distinct keys never overlap and follow insertion order.

    Reads and writes are type-checked against the stored value's runtime type:

        values.insert(0, Vector2([1.0, 2.0]))
        p = values[0, Vector2]          # or values.get(0, Vector2)
        values[0] = p.retract(delta)    # or values.set(0, ..., Vector2)

    Attributes:
        dimension (int): The joint tangent dimension (sum of all variables' tangent_dim).
    """
    def __init__(self):
        self._values: List[Variable] = []
        self._indices: Dict[int, int] = {}
        self._ranges: Dict[int, range] = {}
        self.dimension: int = 0

    def insert(self, key: int, value: Variable):
        """
        Inserts a new variable and assigns it the next tangent range.

        Args:
            key (int): Key of the variable. Must not already be present.
            value (Variable): The variable.
        """
        assert key not in self._indices, f"Key {key} is already present."
        tangent_range = range(self.dimension, self.dimension + value.tangent_dim)
        self.dimension += value.tangent_dim

        self._indices[key] = len(self._values)
        self._ranges[key] = tangent_range
        self._values.append(value)

    def get(self, key: int, as_type: Type[T]) -> T:
        """
        Returns the variable stored under `key`.

        Raises:
            KeyError: If `key` is absent.
            TypeError: If the stored value is not exactly of type `as_type`.
        """
        value = self[key]
        if type(value) is not as_type:
            raise TypeError(
                f"Key {key} holds a {type(value).__name__}, not a {as_type.__name__}."
            )
        return value

    def set(self, key: int, value: Variable, as_type: Optional[Type[Variable]] = None):
        """
        Replaces the variable stored under `key` with a value of the same type.

        Args:
            key (int): Key of the variable.
            value (Variable): The replacement.
            as_type (Optional[Type[Variable]], optional): If given, the stored value must
                also be exactly of this type, as in `get`.

        Raises:
            KeyError: If `key` is absent.
            TypeError: If `value` is not of the stored value's type, or either is not `as_type`.
        """
        current = self.get(key, as_type) if as_type is not None else self[key]
        if type(value) is not type(current):
            raise TypeError(
                f"Key {key} holds a {type(current).__name__}, cannot assign a {type(value).__name__}."
            )
        self._values[self._indices[key]] = value

    def __getitem__(self, key):
        if isinstance(key, tuple):
            return self.get(*key)
        if key not in self._indices:
            raise KeyError(key)
        return self._values[self._indices[key]]

    def __setitem__(self, key, value: Variable):
        if isinstance(key, tuple):
            self.set(key[0], value, key[1])
        else:
            self.set(key, value)

    def __contains__(self, key: int) -> bool:
        return key in self._indices

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._indices)

    def keys(self) -> KeysView[int]:
        return self._indices.keys()

    def tangent_range(self, key: int) -> range:
        """range: The slice of the joint tangent space owned by `key`."""
        return self._ranges[key]

    def pullback(self, key: int, cotangent: torch.Tensor) -> BlockSparseVector:
        """
        Expresses a sensitivity with respect to the variable under `key` in joint
        tangent coordinates.

        Args:
            key (int): The variable the sensitivity refers to.
            cotangent (torch.Tensor): Sensitivity in the variable's own tangent space.
                Shape (tangent_dim,).

        Returns:
            BlockSparseVector: A vector whose only block is `tangent_range(key)`.
        """
        return BlockSparseVector(cotangent, block=self._ranges[key])

    def copy(self) -> 'Values':
        """Returns a shallow copy sharing the (immutable) variables but not the bookkeeping."""
        result = Values()
        result._values = list(self._values)
        result._indices = dict(self._indices)
        result._ranges = dict(self._ranges)
        result.dimension = self.dimension
        return result

    def retract(self, delta: torch.Tensor) -> 'Values':
        """
        Moves every variable along its slice of a joint tangent vector.

        Args:
            delta (torch.Tensor): The joint tangent update. Shape (dimension,).

        Returns:
            Values: A new store with the same keys, ranges and types.
        """
        if delta.ndim != 1 or delta.shape[0] != self.dimension:
            raise ValueError(f"Expected a tangent vector of shape ({self.dimension},), got {tuple(delta.shape)}.")
        result = self.copy()
        for key, index in self._indices.items():
            tangent_range = self._ranges[key]
            result._values[index] = self._values[index].retract(delta[tangent_range.start:tangent_range.stop])
        return result

    def __repr__(self) -> str:
        entries = ", ".join(f"{key}: {self._values[index]!r}" for key, index in self._indices.items())
        return f"{self.__class__.__name__}({{{entries}}})"
