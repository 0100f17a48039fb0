from typing import Any, Dict, Iterator, List, Optional, Set


class Environment:
    """A scope record mapping identifiers to values.

    Scopes do not hold references to their parents; they store the parent's
    id in the owning ``EnvironmentArena`` and resolve it through the arena.
    ``get``/``set`` only touch local bindings, walking outward through the
    chain is left to the interpreter.
    """
    def __init__(self, arena: 'EnvironmentArena', env_id: int, parent_id: Optional[int], name: Optional[str] = None,
                 serial: int = 0):
        self.arena = arena
        self.id = env_id
        self.serial = serial
        self.parent_id = parent_id
        self.name = name
        self.values: Dict[str, Any] = {}

    @property
    def parent(self) -> Optional['Environment']:
        if self.parent_id is None:
            return None
        return self.arena[self.parent_id]

    @property
    def depth(self) -> int:
        depth = 0
        env = self
        while env.parent_id is not None:
            env = env.parent
            depth += 1
        return depth

    def create_child(self, name: Optional[str] = None) -> 'Environment':
        return self.arena.allocate(self.id, name)

    def get(self, name: str) -> Any:
        return self.values.get(name)

    def set(self, name: str, value: Any):
        self.values[name] = value

    def has(self, name: str) -> bool:
        return name in self.values

    def __repr__(self) -> str:
        label = self.name or 'scope'
        return f"<Environment #{self.id} {label} parent={self.parent_id}>"


class EnvironmentArena:
    """Index-addressed storage for every live scope of a run.

    Released slots are recycled. Live unpinned scopes are released in the
    reverse of their creation order, which ``serial`` records. A scope that
    a surviving function closes over is pinned together with its ancestors
    and is no longer released.
    """
    def __init__(self):
        self._slots: List[Optional[Environment]] = []
        self._free: List[int] = []
        self._pinned: Set[int] = set()
        self._serial = 0

    def __getitem__(self, env_id: int) -> Environment:
        env = self._slots[env_id] if 0 <= env_id < len(self._slots) else None
        if env is None:
            raise KeyError(f'environment #{env_id} has been released')
        return env

    def __len__(self) -> int:
        return len(self._slots) - len(self._free)

    def __iter__(self) -> Iterator[Environment]:
        return (env for env in self._slots if env is not None)

    def allocate(self, parent_id: Optional[int], name: Optional[str] = None) -> Environment:
        if self._free:
            env_id = self._free.pop()
        else:
            env_id = len(self._slots)
            self._slots.append(None)
        self._serial += 1
        env = Environment(self, env_id, parent_id, name, self._serial)
        self._slots[env_id] = env
        return env

    def create_root(self, name: str = '__top_expression') -> Environment:
        return self.allocate(None, name)

    def pin(self, env: Environment) -> List[Environment]:
        """Keep ``env`` and its ancestors alive; returns the newly pinned scopes."""
        pinned = []
        env_id: Optional[int] = env.id
        while env_id is not None and env_id not in self._pinned:
            self._pinned.add(env_id)
            pinned.append(self[env_id])
            env_id = pinned[-1].parent_id
        return pinned

    def is_pinned(self, env: Environment) -> bool:
        return env.id in self._pinned

    def release(self, env: Environment):
        if env.id in self._pinned or self._slots[env.id] is not env:
            return
        self._slots[env.id] = None
        self._free.append(env.id)

    def clear(self):
        self._slots.clear()
        self._free.clear()
        self._pinned.clear()
