"""
Command-line argument bookkeeping for a compilation job.

Arguments use engine CLI nomenclature (e.g. "-output-directory") and map to an
optional value. Every mutation bumps a generation counter so callers holding a
result computed for an older generation can tell it is stale.
"""

from typing import Dict, Iterator, List, Optional


class CompilationArguments:
    """
    Ordered mapping of argument names to optional values.

    Attributes:
        generation: Monotonic counter bumped by set() and remove()
    """

    def __init__(self, initial: Optional[Dict[str, Optional[str]]] = None):
        self._values: Dict[str, Optional[str]] = dict(initial or {})
        self.generation = 0

    def set(self, name: str, value: Optional[str] = None) -> None:
        """Store or overwrite an argument (last write wins)."""
        self._values[name] = value
        self.generation += 1

    def remove(self, name: str) -> None:
        """Delete an argument if present. Counts as a mutation either way."""
        self._values.pop(name, None)
        self.generation += 1

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(name, default)

    def setdefault(self, name: str, default: str) -> str:
        """
        Return the value for name, storing default first if name is absent or has no value.

        Does not bump the generation: caching a default the engine would use
        anyway does not change the compilation.
        """
        if self._values.get(name) is None:
            self._values[name] = default
        return self._values[name]

    def tokens(self) -> List[str]:
        """Command-line tokens, `name` or `name=value`, in insertion order."""
        return [name if value is None else f"{name}={value}" for name, value in self._values.items()]

    def as_dict(self) -> Dict[str, Optional[str]]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> Optional[str]:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"CompilationArguments({self._values!r}, generation={self.generation})"
