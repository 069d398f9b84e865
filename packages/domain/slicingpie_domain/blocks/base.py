"""Base classes for computation blocks.

This module provides the foundation for the blocks architecture:
- Block abstract base class
- BlockContext for passing data between blocks
- BlockExecutor for dependency resolution and execution
- Topological sort for DAG execution order
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field


# =============================================================================
# Block Context
# =============================================================================

@dataclass
class BlockContext:
    """Context object for passing data between blocks.

    Blocks read their inputs from context and write their outputs to context.

    Example:
        context = BlockContext()
        context.set("pie_data", ledger.export_data())

        EquityBlock().execute(context)
        equity_df = context.get("equity_by_contributor")
    """

    _data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Get value from context.

        Raises:
            KeyError: If key not found in context
        """
        if key not in self._data:
            raise KeyError(f"Key '{key}' not found in context. Available keys: {list(self._data.keys())}")
        return self._data[key]

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data.keys())


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """Abstract base class for computation blocks.

    A Block declares the context keys it reads (inputs) and writes
    (outputs), and implements the computation in execute(). Declared
    dependencies let BlockExecutor order blocks without the caller caring.

    Subclass example:
        class EquityBlock(Block):
            def inputs(self) -> List[str]:
                return ["pie_data"]

            def outputs(self) -> List[str]:
                return ["equity_by_contributor", "equity_summary"]

            def execute(self, context: BlockContext) -> None:
                data = context.get("pie_data")
                context.set("equity_by_contributor", compute_equity(data))
                context.set("equity_summary", compute_summary(data))
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        """Context keys this block reads."""
        pass

    @abstractmethod
    def outputs(self) -> List[str]:
        """Context keys this block writes."""
        pass

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Read inputs from context, compute, write outputs to context.

        Raises:
            KeyError: If required inputs not available in context
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inputs={self.inputs()}, outputs={self.outputs()})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(Exception):
    """Raised when blocks have circular dependencies."""
    pass


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Sort blocks so every block runs after the blocks producing its inputs.

    Kahn's algorithm. Inputs not produced by any block must be supplied by
    the initial context.

    Raises:
        ValueError: If two blocks declare the same output
        CircularDependencyError: If blocks have circular dependencies

    Example:
        EquityBlock:   outputs ["equity_by_contributor"]
        VestingBlock:  inputs  ["equity_by_contributor"]

        topological_sort([vesting_block, equity_block])
        → [equity_block, vesting_block]
    """
    producers: Dict[str, Block] = {}
    for block in blocks:
        for output_key in block.outputs():
            if output_key in producers:
                raise ValueError(
                    f"Multiple blocks produce '{output_key}': "
                    f"{producers[output_key]} and {block}"
                )
            producers[output_key] = block

    in_degree: Dict[Block, int] = {block: 0 for block in blocks}
    dependents: Dict[Block, List[Block]] = {block: [] for block in blocks}

    for block in blocks:
        for input_key in block.inputs():
            if input_key in producers:
                dependents[producers[input_key]].append(block)
                in_degree[block] += 1

    ready: List[Block] = [block for block in blocks if in_degree[block] == 0]
    ordered: List[Block] = []

    while ready:
        current = ready.pop(0)
        ordered.append(current)
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                ready.append(dependent)

    if len(ordered) != len(blocks):
        remaining = [block for block in blocks if in_degree[block] > 0]
        raise CircularDependencyError(
            f"Circular dependency detected among blocks: {remaining}"
        )

    return ordered


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Executes blocks in dependency order.

    Example:
        executor = BlockExecutor([VestingBlock(), EquityBlock()])
        context = BlockContext()
        context.set("pie_data", data)
        context.set("as_of_date", date(2025, 6, 30))

        executor.execute(context)
        vesting_df = context.get("vesting_by_contributor")
    """

    def __init__(self, blocks: List[Block]):
        self.blocks = blocks
        self._sorted_blocks: Optional[List[Block]] = None

    def execute(self, context: BlockContext) -> BlockContext:
        """Execute all blocks in dependency order.

        Returns:
            The same context, with every block's outputs set

        Raises:
            CircularDependencyError: If blocks have circular dependencies
            KeyError: If a required input is missing from context
            ValueError: If a block did not write a declared output
        """
        if self._sorted_blocks is None:
            self._sorted_blocks = topological_sort(self.blocks)

        for block in self._sorted_blocks:
            for input_key in block.inputs():
                if not context.has(input_key):
                    raise KeyError(
                        f"Block {block} requires input '{input_key}' but it's not in context. "
                        f"Available keys: {context.keys()}"
                    )

            block.execute(context)

            for output_key in block.outputs():
                if not context.has(output_key):
                    raise ValueError(
                        f"Block {block} declared output '{output_key}' but didn't write it to context"
                    )

        return context
