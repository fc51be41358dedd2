#!/usr/bin/env python3
"""
signalkit vs ReactiveX Result-Adaptation Benchmark

This script compares signalkit's result-adaptation pipelines against the
equivalent ReactiveX (reactivex) operator chains. Each workload is scaled
until one run reaches the time target, then profiled once more for memory
and GC activity.

Workloads:
- Outcome Tagging: values and a final failure carried as Ok/Err values
- Outcome Partition: projecting Ok and Err payloads from one stream
- Inner Recovery: flattening inner streams whose failures are dropped
- Type Narrowing: keeping only instances of one type
- Side-effect Taps: per-value and completion handlers on a stream
"""

import argparse
import gc
import time
import tracemalloc
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Tuple, TypeVar

import reactivex
from reactivex import operators as ops
from reactivex.subject import Subject
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from signalkit import Err, FlattenStrategy, Ok, Signal, SignalProducer

T = TypeVar("T")

# Configuration
TIME_LIMIT_SECONDS = 1.0
STARTING_N = 10
SCALE_FACTOR = 1.5
NUM_ITERATIONS = 1  # Run multiple times to average out GC variance
MAX_N = 10_000_000

LIBRARIES = ("signalkit", "ReactiveX")


class BenchmarkError(Exception):
    """Failure injected into benchmark streams."""


@dataclass
class BenchmarkMetrics:
    """Measurements of one profiled workload run."""

    library: str
    operation: str
    max_n: int
    operation_time: float
    operations_per_second: float
    memory_peak_kb: int
    memory_allocated_kb: int
    objects_delta: int
    gc_collections: int


class BenchmarkProfiler:
    """Context manager recording time, traced memory and GC activity."""

    def __enter__(self):
        gc.collect()
        tracemalloc.start()
        self._memory_start, _ = tracemalloc.get_traced_memory()
        self._gc_before = sum(gc.get_count())
        self._objects_before = len(gc.get_objects())
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self._start
        self.gc_collections = max(0, sum(gc.get_count()) - self._gc_before)
        self.objects_delta = len(gc.get_objects()) - self._objects_before
        memory_end, memory_peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        self.memory_peak_kb = memory_peak // 1024
        self.memory_allocated_kb = (memory_end - self._memory_start) // 1024

    def metrics(self, library: str, operation: str, n: int, performed: int) -> BenchmarkMetrics:
        return BenchmarkMetrics(
            library=library,
            operation=operation,
            max_n=n,
            operation_time=self.elapsed,
            operations_per_second=performed / self.elapsed if self.elapsed > 0 else 0,
            memory_peak_kb=self.memory_peak_kb,
            memory_allocated_kb=self.memory_allocated_kb,
            objects_delta=self.objects_delta,
            gc_collections=self.gc_collections,
        )


def _timed(operation_func: Callable[[int], int], n: int) -> float:
    start = time.perf_counter()
    operation_func(n)
    return time.perf_counter() - start


def run_adaptive_benchmark(
    library: str,
    operation: str,
    operation_func: Callable[[int], int],
    time_limit: float = TIME_LIMIT_SECONDS,
    starting_n: int = STARTING_N,
    scale_factor: float = SCALE_FACTOR,
) -> BenchmarkMetrics:
    """
    Grow the workload until one run takes `time_limit`, then profile it.

    `operation_func(n)` runs the workload and returns the number of
    elements that reached its subscriber.
    """
    n = starting_n
    while _timed(operation_func, n) < time_limit and n < MAX_N:
        n = min(MAX_N, max(n + 1, int(n * scale_factor)))

    runs = []
    for _ in range(NUM_ITERATIONS):
        with BenchmarkProfiler() as profiler:
            performed = operation_func(n)
        runs.append(profiler.metrics(library, operation, n, performed))
    return average_metrics(runs)


def average_metrics(metrics_list: List[BenchmarkMetrics]) -> BenchmarkMetrics:
    """Average the numeric fields of several runs of the same workload."""
    if not metrics_list:
        raise ValueError("No metrics to average")

    first = metrics_list[0]
    averaged = {}
    for field in fields(BenchmarkMetrics):
        sample = getattr(first, field.name)
        if isinstance(sample, str) or field.name == "max_n":
            averaged[field.name] = sample
            continue
        mean = sum(getattr(m, field.name) for m in metrics_list) / len(metrics_list)
        averaged[field.name] = mean if isinstance(sample, float) else int(mean)
    return BenchmarkMetrics(**averaged)


# ============================================================================
# WORKLOADS
# ============================================================================
#
# Each workload returns the number of elements that reached the final
# subscriber, so both implementations can be checked against each other.


def signalkit_outcome_tagging(n: int) -> int:
    signal, observer = Signal.pipe()
    received = []
    signal.to_outcomes().observe_values(received.append)
    for i in range(n):
        observer.send_value(i)
    observer.send_failed(BenchmarkError("end of stream"))
    return len(received)


def rx_outcome_tagging(n: int) -> int:
    subject = Subject()
    received = []
    subject.pipe(
        ops.map(Ok),
        ops.catch(lambda error, source: reactivex.of(Err(error))),
    ).subscribe(on_next=received.append)
    for i in range(n):
        subject.on_next(i)
    subject.on_error(BenchmarkError("end of stream"))
    return len(received)


def _mixed_outcomes(n: int) -> List:
    return [Ok(i) if i % 3 else Err(i) for i in range(n)]


def signalkit_outcome_partition(n: int) -> int:
    signal, observer = Signal.pipe()
    values, errors = [], []
    signal.filter_values().observe_values(values.append)
    signal.filter_errors().observe_values(errors.append)
    for outcome in _mixed_outcomes(n):
        observer.send_value(outcome)
    observer.send_completed()
    return len(values) + len(errors)


def rx_outcome_partition(n: int) -> int:
    subject = Subject()
    values, errors = [], []
    subject.pipe(
        ops.filter(lambda o: o.is_ok), ops.map(lambda o: o.value)
    ).subscribe(on_next=values.append)
    subject.pipe(
        ops.filter(lambda o: o.is_err), ops.map(lambda o: o.error)
    ).subscribe(on_next=errors.append)
    for outcome in _mixed_outcomes(n):
        subject.on_next(outcome)
    subject.on_completed()
    return len(values) + len(errors)


def signalkit_inner_recovery(n: int) -> int:
    received = []

    def attempt(i: int) -> SignalProducer:
        if i % 2:
            return SignalProducer.of(i)
        return SignalProducer.failure(BenchmarkError(i))

    SignalProducer.from_values(range(n)).flat_map(
        FlattenStrategy.MERGE, lambda i: attempt(i).drop_error()
    ).start_with_values(received.append)
    return len(received)


def rx_inner_recovery(n: int) -> int:
    received = []

    def attempt(i: int):
        if i % 2:
            return reactivex.of(i)
        return reactivex.throw(BenchmarkError(i))

    reactivex.from_iterable(range(n)).pipe(
        ops.flat_map(lambda i: attempt(i).pipe(ops.catch(reactivex.empty())))
    ).subscribe(on_next=received.append)
    return len(received)


def _mixed_values(n: int) -> List:
    return [i if i % 2 else str(i) for i in range(n)]


def signalkit_type_narrowing(n: int) -> int:
    received = []
    SignalProducer.from_values(_mixed_values(n)).filter_type(int).start_with_values(
        received.append
    )
    return len(received)


def rx_type_narrowing(n: int) -> int:
    received = []
    reactivex.from_iterable(_mixed_values(n)).pipe(
        ops.filter(lambda v: isinstance(v, int))
    ).subscribe(on_next=received.append)
    return len(received)


def signalkit_taps(n: int) -> int:
    signal, observer = Signal.pipe()
    tapped = []
    signal.on_value(tapped.append).on_completed(lambda: tapped.append(None)).observe(
        None
    )
    for i in range(n):
        observer.send_value(i)
    observer.send_completed()
    return len(tapped)


def rx_taps(n: int) -> int:
    subject = Subject()
    tapped = []
    subject.pipe(
        ops.do_action(
            on_next=tapped.append, on_completed=lambda: tapped.append(None)
        )
    ).subscribe()
    for i in range(n):
        subject.on_next(i)
    subject.on_completed()
    return len(tapped)


WORKLOADS: Dict[str, Tuple[Callable[[int], int], Callable[[int], int]]] = {
    "Outcome Tagging": (signalkit_outcome_tagging, rx_outcome_tagging),
    "Outcome Partition": (signalkit_outcome_partition, rx_outcome_partition),
    "Inner Recovery": (signalkit_inner_recovery, rx_inner_recovery),
    "Type Narrowing": (signalkit_type_narrowing, rx_type_narrowing),
    "Side-effect Taps": (signalkit_taps, rx_taps),
}


# ============================================================================
# COMPARISON
# ============================================================================


class SignalkitRxComparison:
    """Compare signalkit and ReactiveX performance with GC analysis."""

    def __init__(self, time_limit: float = TIME_LIMIT_SECONDS):
        self.console = Console()
        self.time_limit = time_limit
        self.results: List[BenchmarkMetrics] = []

    def run_comparison(self):
        """Run all comparison benchmarks."""
        start_time = time.time()

        self._display_header()

        for operation, (signalkit_func, rx_func) in WORKLOADS.items():
            self._run_workload(operation, signalkit_func, rx_func)

        self._display_comparison_results()
        self._display_memory_comparison()
        self._display_summary()

        elapsed = time.time() - start_time
        self.console.print(
            f"\n[dim]Comparison completed in {elapsed:.2f} seconds[/dim]"
        )

    def _display_header(self):
        header = Panel(
            f"signalkit vs ReactiveX Result Adaptation\n"
            f"{NUM_ITERATIONS} iterations per benchmark, {self.time_limit:.1f}s target",
            title="Library Comparison",
            border_style="blue",
        )
        self.console.print(header)
        self.console.print()

    def _run_workload(
        self,
        operation: str,
        signalkit_func: Callable[[int], int],
        rx_func: Callable[[int], int],
    ):
        self.console.print(f"[yellow]Running {operation} comparison...[/yellow]")

        signalkit_result = run_adaptive_benchmark(
            "signalkit", operation, signalkit_func, time_limit=self.time_limit
        )
        rx_result = run_adaptive_benchmark(
            "ReactiveX", operation, rx_func, time_limit=self.time_limit
        )
        self.results.extend([signalkit_result, rx_result])

        self._display_progress(operation, signalkit_result, rx_result)

    def _display_progress(
        self,
        operation_name: str,
        signalkit_result: BenchmarkMetrics,
        rx_result: BenchmarkMetrics,
    ):
        ours = signalkit_result.operations_per_second
        theirs = rx_result.operations_per_second

        if ours > theirs:
            winner_text = f"[green]signalkit {ours / max(theirs, 1e-9):.1f}x faster[/green]"
        else:
            winner_text = f"[blue]ReactiveX {theirs / max(ours, 1e-9):.1f}x faster[/blue]"

        self.console.print(
            f"[green]✓[/green] {operation_name}: "
            f"signalkit {ours:,.0f} ops/sec vs ReactiveX {theirs:,.0f} ops/sec ({winner_text})"
        )

    def _by_operation(self) -> Dict[str, Dict[str, BenchmarkMetrics]]:
        operations: Dict[str, Dict[str, BenchmarkMetrics]] = {}
        for result in self.results:
            operations.setdefault(result.operation, {})[result.library] = result
        return operations

    def _display_comparison_results(self):
        self.console.print()

        table = Table(title="Performance Comparison")
        table.add_column("Operation", style="cyan")
        table.add_column("signalkit ops/sec", style="green", justify="right")
        table.add_column("ReactiveX ops/sec", style="blue", justify="right")
        table.add_column("Winner", style="yellow", justify="center")
        table.add_column("Speedup", style="magenta", justify="right")

        for op_name, lib_results in self._by_operation().items():
            ours = lib_results.get("signalkit")
            theirs = lib_results.get("ReactiveX")
            if not (ours and theirs):
                continue

            if ours.operations_per_second > theirs.operations_per_second:
                winner = "signalkit"
                ratio = ours.operations_per_second / max(theirs.operations_per_second, 1e-9)
            else:
                winner = "ReactiveX"
                ratio = theirs.operations_per_second / max(ours.operations_per_second, 1e-9)

            table.add_row(
                op_name,
                f"{ours.operations_per_second:,.0f}",
                f"{theirs.operations_per_second:,.0f}",
                winner,
                f"{ratio:.2f}x",
            )

        self.console.print(table)

    def _display_memory_comparison(self):
        self.console.print()

        table = Table(title="Memory and GC")
        table.add_column("Operation", style="cyan")
        table.add_column("Library", style="white")
        table.add_column("Peak Memory", style="yellow", justify="right")
        table.add_column("Allocated", style="green", justify="right")
        table.add_column("Object Δ", style="blue", justify="right")
        table.add_column("GCs", style="red", justify="right")

        for op_name, lib_results in self._by_operation().items():
            for lib_name in LIBRARIES:
                if lib_name not in lib_results:
                    continue
                r = lib_results[lib_name]
                table.add_row(
                    op_name if lib_name == LIBRARIES[0] else "",
                    lib_name,
                    f"{r.memory_peak_kb:,} KB",
                    f"{r.memory_allocated_kb:,} KB",
                    f"{r.objects_delta:,}",
                    str(r.gc_collections),
                )

        self.console.print(table)

    def _display_summary(self):
        self.console.print()

        signalkit_wins = sum(
            1
            for lib_results in self._by_operation().values()
            if lib_results["signalkit"].operations_per_second
            > lib_results["ReactiveX"].operations_per_second
        )
        rx_wins = len(WORKLOADS) - signalkit_wins

        if signalkit_wins > rx_wins:
            winner, color = "signalkit", "green"
        elif rx_wins > signalkit_wins:
            winner, color = "ReactiveX", "blue"
        else:
            winner, color = "Tie", "yellow"

        summary = Panel(
            f"Overall Winner: {winner}\nsignalkit wins: {signalkit_wins}\nReactiveX wins: {rx_wins}",
            title="Performance Summary",
            border_style=color,
        )
        self.console.print(summary)


def check_workloads(n: int = 20) -> Dict[str, Tuple[int, int]]:
    """Run every workload once at size `n`; returns (signalkit, ReactiveX) counts."""
    return {
        operation: (signalkit_func(n), rx_func(n))
        for operation, (signalkit_func, rx_func) in WORKLOADS.items()
    }


def print_config():
    """Print the current benchmark configuration."""
    print("signalkit vs ReactiveX Comparison Configuration:")
    print(f"  TIME_LIMIT_SECONDS: {TIME_LIMIT_SECONDS}")
    print(f"  STARTING_N: {STARTING_N}")
    print(f"  SCALE_FACTOR: {SCALE_FACTOR}")
    print(f"  NUM_ITERATIONS: {NUM_ITERATIONS}")
    print("\nBenchmark Categories:")
    for operation in WORKLOADS:
        print(f"  - {operation}")


def main():
    """Main entry point for the comparison script."""
    parser = argparse.ArgumentParser(
        description="signalkit vs ReactiveX result-adaptation benchmark"
    )
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress the configuration banner, show only results",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        default=TIME_LIMIT_SECONDS,
        help="Target seconds per workload when scaling n",
    )

    args = parser.parse_args()

    if args.config:
        print_config()
        return

    if not args.quiet:
        print_config()
        print()

    comparison = SignalkitRxComparison(time_limit=args.time_limit)
    comparison.run_comparison()


if __name__ == "__main__":
    main()
