from typing import Dict, Set, Optional, List, Iterable, Iterator, Tuple, Union
from enum import Enum


class ScheduleError(ValueError):
    """Base class for malformed schedule input."""


class InvalidOperation(ScheduleError):
    """
    Raised when a schedule element cannot be interpreted as an operation.

    Covers unknown operation kinds, an empty transaction id and elements
    that are not (tid, kind, data_item) tuples.
    """


class MissingDataItem(ScheduleError):
    """Raised when a Read or Write operation has no data item."""


class OperationType(Enum):
    """
    Enumeration of the operations a transaction can issue in a schedule.

    READ: Transaction reads a data item
    WRITE: Transaction writes a data item
    COMMIT: Transaction terminates successfully
    ABORT: Transaction is rolled back
    """
    READ = "R"
    WRITE = "W"
    COMMIT = "C"
    ABORT = "A"

    @property
    def is_data_access(self) -> bool:
        return self in (OperationType.READ, OperationType.WRITE)


class Operation:
    """
    One atomic event in a transaction schedule.

    Position in the schedule is the only ordering information; an operation
    carries no timestamp of its own.
    """

    def __init__(self, tid: str, kind: Union[OperationType, str], data_item: str = ""):
        """
        Create a new operation.

        Args:
            tid: Transaction identifier (e.g., "T1")
            kind: OperationType or its single-letter code ("R", "W", "C", "A")
            data_item: Accessed data item; ignored for Commit and Abort

        Raises:
            InvalidOperation: If tid is empty or kind is not a known operation
            MissingDataItem: If a Read or Write has an empty data item
        """
        if not tid:
            raise InvalidOperation(f"Operation {kind!r} has no transaction id")
        if not isinstance(kind, OperationType):
            try:
                kind = OperationType(kind)
            except ValueError:
                raise InvalidOperation(
                    f"Unknown operation kind {kind!r} for transaction {tid}"
                ) from None

        if kind.is_data_access:
            if not data_item:
                raise MissingDataItem(
                    f"{kind.name.capitalize()} by {tid} has no data item"
                )
        else:
            data_item = ""

        self.tid = tid
        self.kind = kind
        self.data_item = data_item

    @classmethod
    def from_tuple(cls, value) -> "Operation":
        """
        Build an Operation from a schedule element.

        Accepts an existing Operation, a (tid, kind, data_item) tuple, or a
        (tid, kind) pair for Commit and Abort.

        Raises:
            InvalidOperation: If the element has the wrong shape
        """
        if isinstance(value, Operation):
            return value
        if not isinstance(value, (tuple, list)) or len(value) not in (2, 3):
            raise InvalidOperation(f"Malformed schedule element {value!r}")
        tid, kind = value[0], value[1]
        data_item = value[2] if len(value) == 3 else ""
        return cls(tid, kind, data_item or "")

    def conflicts_with(self, other: "Operation") -> bool:
        """
        Check whether two operations conflict.

        Two operations conflict when they belong to different transactions,
        access the same data item and at least one of them is a write.
        Commits and aborts never conflict.
        """
        if not (self.kind.is_data_access and other.kind.is_data_access):
            return False
        return (
            self.tid != other.tid
            and self.data_item == other.data_item
            and OperationType.WRITE in (self.kind, other.kind)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return (self.tid, self.kind, self.data_item) == (
            other.tid,
            other.kind,
            other.data_item,
        )

    def __hash__(self) -> int:
        return hash((self.tid, self.kind, self.data_item))

    def __repr__(self) -> str:
        return f"Operation({self.tid!r}, {self.kind.value!r}, {self.data_item!r})"

    def __str__(self) -> str:
        if self.kind.is_data_access:
            return f"{self.kind.value}({self.tid},{self.data_item})"
        return f"{self.kind.value}({self.tid})"


ScheduleElement = Union[Operation, Tuple[str, str, str]]
PrecedenceGraph = Dict[str, Set[str]]


def _operations(schedule: Iterable[ScheduleElement]) -> List[Operation]:
    return [Operation.from_tuple(element) for element in schedule]


def aborted_transactions(schedule: Iterable[ScheduleElement]) -> Set[str]:
    """
    Collect the transactions that issue an Abort anywhere in the schedule.

    Args:
        schedule: Ordered sequence of operations or (tid, kind, item) tuples

    Returns:
        Set of aborted transaction ids

    Raises:
        InvalidOperation: If an element is malformed
        MissingDataItem: If a Read or Write has no data item
    """
    return {op.tid for op in _operations(schedule) if op.kind == OperationType.ABORT}


def valid_sub_schedule(schedule: Iterable[ScheduleElement]) -> List[Operation]:
    """
    Remove every non-abort operation of an aborted transaction.

    The Abort markers themselves are kept so the abort stays visible in the
    filtered history. Order is preserved.

    Args:
        schedule: Ordered sequence of operations or (tid, kind, item) tuples

    Returns:
        The filtered list of operations

    Side effects:
        None (the input schedule is never modified)
    """
    operations = _operations(schedule)
    aborted = aborted_transactions(operations)
    return [
        op
        for op in operations
        if op.tid not in aborted or op.kind == OperationType.ABORT
    ]


def build_precedence_graph(schedule: Iterable[ScheduleElement]) -> PrecedenceGraph:
    """
    Build the precedence (serialization) graph of a schedule.

    Every transaction left in the valid sub-schedule becomes a node, aborted
    transactions do not. An edge T1 -> T2 is added when an operation of T1
    conflicts with a later operation of T2. Repeated conflicts between the
    same pair collapse into a single edge.

    Args:
        schedule: Ordered sequence of operations or (tid, kind, item) tuples

    Returns:
        Mapping from transaction id to the set of transactions it precedes

    Raises:
        InvalidOperation: If an element is malformed
        MissingDataItem: If a Read or Write has no data item
    """
    operations = valid_sub_schedule(schedule)
    aborted = {op.tid for op in operations if op.kind == OperationType.ABORT}

    graph: PrecedenceGraph = {}
    for op in operations:
        if op.tid not in aborted and op.tid not in graph:
            graph[op.tid] = set()

    accesses = [op for op in operations if op.kind.is_data_access]
    for i, earlier in enumerate(accesses):
        for later in accesses[i + 1:]:
            if earlier.conflicts_with(later):
                graph[earlier.tid].add(later.tid)
    return graph


def has_cycle(graph: Dict[str, Iterable[str]]) -> bool:
    """
    Detect cycles in a precedence graph using depth-first search.

    Uses an explicit stack of (node, successor iterator) pairs instead of
    recursion, so long dependency chains do not hit the interpreter's
    recursion limit. A successor that is still on the active path closes a
    cycle.

    Args:
        graph: Mapping from node to its successors

    Returns:
        True if a cycle is detected, False otherwise

    Side effects:
        None (uses local visited and on-stack sets)
    """
    visited: Set[str] = set()
    on_stack: Set[str] = set()

    for root in graph:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]

        while stack:
            node, successors = stack[-1]
            for neighbour in successors:
                if neighbour not in visited:
                    visited.add(neighbour)
                    on_stack.add(neighbour)
                    stack.append((neighbour, iter(graph.get(neighbour, ()))))
                    break
                if neighbour in on_stack:
                    return True
            else:
                on_stack.remove(node)
                stack.pop()
    return False


def validate_transaction_endings(schedule: Iterable[ScheduleElement]) -> List[str]:
    """
    Check that every transaction terminates exactly one way.

    Scans the raw schedule, so aborted transactions are included. A
    transaction that both commits and aborts, or that reads/writes without
    ever committing or aborting, produces a warning. Warnings follow the
    order in which transactions first appear.

    Args:
        schedule: Ordered sequence of operations or (tid, kind, item) tuples

    Returns:
        List of human-readable warnings (empty if all endings are consistent)

    Raises:
        InvalidOperation: If an element is malformed
        MissingDataItem: If a Read or Write has no data item
    """
    states: Dict[str, Dict[str, bool]] = {}
    for op in _operations(schedule):
        state = states.setdefault(
            op.tid, {"commit": False, "abort": False, "other": False}
        )
        if op.kind == OperationType.COMMIT:
            state["commit"] = True
        elif op.kind == OperationType.ABORT:
            state["abort"] = True
        else:
            state["other"] = True

    warnings = []
    for tid, state in states.items():
        if state["commit"] and state["abort"]:
            warnings.append(f"Warning: transaction {tid} has both Commit and Abort")
        elif not state["commit"] and not state["abort"] and state["other"]:
            warnings.append(f"Warning: transaction {tid} has no Commit or Abort")
    return warnings


def convert_graph_to_object(graph: Dict[str, Iterable[str]]) -> Dict[str, List[str]]:
    """Convert set adjacency to sorted successor lists for display."""
    return {node: sorted(successors) for node, successors in graph.items()}


def equivalent_serial_order(graph: Dict[str, Iterable[str]]) -> Optional[List[str]]:
    """
    Find a serial order of transactions equivalent to the schedule.

    Topologically sorts the precedence graph (Kahn's algorithm). Among
    transactions that are ready at the same time, the one seen first in
    the schedule goes first.

    Args:
        graph: Mapping from transaction to the transactions it precedes

    Returns:
        List of transaction ids, or None if the graph has a cycle
    """
    in_degree = {node: 0 for node in graph}
    for successors in graph.values():
        for neighbour in successors:
            in_degree[neighbour] = in_degree.get(neighbour, 0) + 1

    order = []
    ready = [node for node, degree in in_degree.items() if degree == 0]
    while ready:
        node = ready.pop(0)
        order.append(node)
        for neighbour in graph.get(node, ()):
            in_degree[neighbour] -= 1
            if in_degree[neighbour] == 0:
                ready.append(neighbour)
        ready.sort(key=list(in_degree).index)

    if len(order) != len(in_degree):
        return None
    return order


class SerializabilityResult:
    """
    Outcome of a conflict-serializability check.

    Warnings about transaction endings are advisory and never change the
    verdict.
    """

    def __init__(
        self,
        is_serializable: bool,
        warnings: List[str],
        graph: Dict[str, List[str]],
        serial_order: Optional[List[str]] = None,
    ):
        self.is_serializable = is_serializable
        self.warnings = warnings
        self.graph = graph
        self.serial_order = serial_order

    def to_dict(self) -> Dict[str, object]:
        return {
            "isSerializable": self.is_serializable,
            "warnings": list(self.warnings),
            "graph": {node: list(successors) for node, successors in self.graph.items()},
            "serialOrder": list(self.serial_order) if self.serial_order is not None else None,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, SerializabilityResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"SerializabilityResult(is_serializable={self.is_serializable}, "
            f"warnings={self.warnings}, graph={self.graph})"
        )


def check_conflict_serializability(
    schedule: Iterable[ScheduleElement],
) -> SerializabilityResult:
    """
    Decide whether a schedule is conflict-serializable.

    Validates transaction endings on the raw schedule, builds the precedence
    graph from the valid sub-schedule and checks it for cycles. Ending
    warnings are reported alongside the verdict but never short-circuit it.

    Args:
        schedule: Ordered sequence of operations or (tid, kind, item) tuples

    Returns:
        SerializabilityResult with the verdict, warnings and the graph

    Raises:
        InvalidOperation: If an element is malformed
        MissingDataItem: If a Read or Write has no data item
    """
    operations = _operations(schedule)
    warnings = validate_transaction_endings(operations)
    graph = build_precedence_graph(operations)
    is_serializable = not has_cycle(graph)
    return SerializabilityResult(
        is_serializable=is_serializable,
        warnings=warnings,
        graph=convert_graph_to_object(graph),
        serial_order=equivalent_serial_order(graph) if is_serializable else None,
    )
