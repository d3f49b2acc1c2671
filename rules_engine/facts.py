"""
Fact store shared by the rules of a firing session.
"""

from typing import Dict, Any, Iterator, Optional
from dataclasses import dataclass, field

from shared.errors import NoSuchFactError


@dataclass(frozen=True)
class Fact:
    """A named fact. Facts are identified by name only."""
    name: str
    value: Any = field(compare=False)

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return f"Fact{{name='{self.name}', value={self.value!r}}}"


class Facts:
    """
    Ordered set of named facts.

    Names are unique: putting an existing name replaces its value. The store
    is owned by the caller and may be mutated by rule actions while the
    engine is firing, which is how inference rules retract the facts that
    triggered them.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._facts: Dict[str, Any] = {}
        for name, value in (initial or {}).items():
            self.put(name, value)

    def put(self, name: str, value: Any) -> Any:
        """Add a fact, replacing any fact with the same name.

        Returns:
            The previous value, or ``None``.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("fact name must be a non-empty string")
        previous = self._facts.get(name)
        self._facts[name] = value
        return previous

    def add(self, fact: Fact) -> Any:
        """Add a ``Fact`` object."""
        return self.put(fact.name, fact.value)

    def get(self, name: str, default: Any = None) -> Any:
        """Get a fact value by name, or ``default`` when absent."""
        return self._facts.get(name, default)

    def get_fact(self, name: str) -> Optional[Fact]:
        """Get a fact by name."""
        if name not in self._facts:
            return None
        return Fact(name, self._facts[name])

    def require(self, name: str) -> Any:
        """Get a fact value a rule declared it depends on.

        Raises:
            NoSuchFactError: the fact is absent.
        """
        if name not in self._facts:
            raise NoSuchFactError(name, details={"known_facts": list(self._facts)})
        return self._facts[name]

    def remove(self, name: str) -> Any:
        """Remove a fact by name. Removing an absent fact is a no-op."""
        return self._facts.pop(name, None)

    def clear(self):
        self._facts.clear()

    def as_map(self) -> Dict[str, Any]:
        """Snapshot of the facts as a plain dict."""
        return dict(self._facts)

    def __contains__(self, name: object) -> bool:
        return name in self._facts

    def __len__(self) -> int:
        return len(self._facts)

    def __iter__(self) -> Iterator[Fact]:
        # Iterate a snapshot so actions may mutate the store mid-iteration
        for name, value in list(self._facts.items()):
            yield Fact(name, value)

    def __repr__(self) -> str:
        return "Facts[" + ", ".join(str(fact) for fact in self) + "]"
