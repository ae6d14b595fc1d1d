from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm
from .errors import SimulationError
from .gantt import build_memory_map, build_rich_gantt
from .memory import simulate_allocations
from .metrics import summarize, summarize_process_metrics
from .models import AllocationOutcome, ProcessRecord, ScheduleResult, Strategy
from .workload_io import load_requests, load_workload, parse_request, processes_from_services

DEFAULT_QUANTUM = 2
DEFAULT_CAPACITY = 100
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _add_process_source(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    source.add_argument(
        "--services",
        "-s",
        type=int,
        nargs="+",
        metavar="SERVICE",
        help="Service times; process i arrives at time i and gets pid i+1.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ossim",
        description="OS simulator: CPU scheduling (FCFS, SPN, RR) and first-fit / best-fit memory allocation.",
    )
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging verbosity (default: {DEFAULT_LOG_LEVEL}).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (fcfs, spn, rr).",
    )
    _add_process_source(run_parser)
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by FCFS and SPN).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    _add_process_source(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: fcfs spn rr).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {DEFAULT_QUANTUM}).",
    )

    memory_parser = subparsers.add_parser(
        "memory",
        help="Allocate a sequence of requests from a single memory pool.",
    )
    memory_parser.add_argument(
        "--capacity",
        "-c",
        type=int,
        default=DEFAULT_CAPACITY,
        help=f"Total pool capacity (default: {DEFAULT_CAPACITY}).",
    )
    memory_parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.FIRST_FIT.value,
        help="Placement strategy (default: first-fit).",
    )
    requests = memory_parser.add_mutually_exclusive_group(required=True)
    requests.add_argument(
        "--requests",
        "-r",
        help="Path to JSON or CSV file of owner_id,size requests.",
    )
    requests.add_argument(
        "--request",
        "-R",
        action="append",
        type=parse_request,
        metavar="OWNER:SIZE",
        help="A single request; repeat for more.",
    )

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu: pick an algorithm and type in service times.",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Default quantum to prefill for RR (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def _processes_from_args(args: argparse.Namespace) -> List[ProcessRecord]:
    if args.workload:
        return load_workload(Path(args.workload))
    return processes_from_services(args.services)


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    if not result.processes:
        console.print("[yellow]No processes to schedule.[/yellow]")
        return

    summary = summarize(result.processes)

    headers = [
        "PID",
        "Arrival",
        "Service",
        "Start",
        "Finish",
        "Response",
        "Wait",
        "Turnaround",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for p in summary.per_process:
        proc_table.add_row(
            str(p.pid),
            str(p.arrival_time),
            str(p.service_time),
            str(p.start_time),
            str(p.finish_time),
            str(p.response_time),
            str(p.wait_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg response", f"{summary.avg_response:.2f}")
    sys_table.add_row("Avg wait", f"{summary.avg_wait:.2f}")
    sys_table.add_row("Avg turnaround", f"{summary.avg_turnaround:.2f}")
    sys_table.add_row("Makespan", str(summary.makespan))
    sys_table.add_row("Throughput (proc/time)", f"{summary.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{summary.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _print_compare(processes: List[ProcessRecord], algorithms: List[str], quantum: int, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Avg wait", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Throughput", justify="right")

    for alg in algorithms:
        result = run_algorithm(alg, processes, quantum=quantum)
        summary = summarize(result.processes)
        averages = summarize_process_metrics(summary)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{averages['avg_response']:.2f}",
            f"{averages['avg_wait']:.2f}",
            f"{averages['avg_turnaround']:.2f}",
            f"{summary.throughput:.3f}",
        )

    console.print(summary_table)


def _print_allocation(outcome: AllocationOutcome, index: int, console: Console) -> None:
    status = "[green]placed[/green]" if outcome.success else "[red]failed[/red]"
    console.print(f"[bold]Request {index}:[/bold] owner {outcome.owner_id}, size {outcome.size} -> {status}")
    if outcome.error:
        console.print(f"[red]{outcome.error}[/red]")

    table = Table(box=box.SIMPLE_HEAVY)
    for h in ("Block", "Offset", "Size", "State", "Owner"):
        table.add_column(h, justify="right")
    for b in outcome.snapshot:
        table.add_row(
            str(b.block_id),
            str(b.offset),
            str(b.size),
            "free" if b.free else "used",
            "" if b.owner_id is None else str(b.owner_id),
        )
    console.print(table)


def _run_memory(args: argparse.Namespace, console: Console) -> None:
    requests = load_requests(Path(args.requests)) if args.requests else args.request
    outcomes = simulate_allocations(args.capacity, requests, args.strategy)

    console.print(f"[bold]Strategy:[/bold] {args.strategy}  [bold]Capacity:[/bold] {args.capacity}")
    for index, outcome in enumerate(outcomes, start=1):
        _print_allocation(outcome, index, console)

    if not outcomes:
        console.print("[yellow]No requests given.[/yellow]")
        return

    console.print(build_memory_map(outcomes[-1].snapshot))
    placed = sum(1 for o in outcomes if o.success)
    free_blocks = [b for b in outcomes[-1].snapshot if b.free]
    console.print(
        f"Placed {placed}/{len(outcomes)} requests; "
        f"free {sum(b.size for b in free_blocks)} in {len(free_blocks)} block(s)"
    )


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    timeline = sorted(result.timeline, key=lambda s: (s.start_time, s.end_time))
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = max(s.end_time for s in timeline)
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        running = next((sl for sl in timeline if sl.start_time <= t < sl.end_time), None)
        if running is None:
            console.print(f"t={t:2d}: (idle)")
        else:
            bar = f"[green]{'#' * (t - running.start_time + 1)}[/green]"
            console.print(f"t={t:2d}: P{running.pid} {bar}")
        time.sleep(delay)


def _prompt_int(console: Console, prompt: str, default: Optional[int] = None, minimum: int = 1) -> int:
    while True:
        raw = console.input(prompt).strip()
        if not raw and default is not None:
            return default
        try:
            value = int(raw)
        except ValueError:
            console.print("[red]Please enter a whole number.[/red]")
            continue
        if value < minimum:
            console.print(f"[red]Value must be at least {minimum}.[/red]")
            continue
        return value


def _interactive_menu(default_quantum: int, console: Console) -> None:
    alg_choices = list(ALGORITHMS)

    while True:
        console.print("\n[bold cyan]OS Simulator Menu[/bold cyan] [dim](q to quit)[/dim]")
        console.print("[bold]Select scheduling algorithm by number:[/bold]")
        for idx, alg in enumerate(alg_choices, start=1):
            console.print(f"  [yellow]{idx}[/yellow]. [white]{ALGORITHMS[alg].name}[/white]")

        choice = console.input(f"Choice [1-{len(alg_choices)} or q]: ").strip().lower()
        if choice in {"q", "quit", "exit"}:
            return

        try:
            alg = alg_choices[int(choice) - 1]
        except (ValueError, IndexError):
            console.print("[red]Invalid selection.[/red]")
            continue

        count = _prompt_int(console, "Number of processes: ")
        services = []
        for i in range(count):
            console.print(f"Process [bold]#{i + 1}[/bold] | arrival: {i}")
            services.append(_prompt_int(console, "  Service time: "))

        quantum = None
        if alg == "rr":
            quantum = _prompt_int(console, f"Quantum [{default_quantum}]: ", default=default_quantum)

        try:
            result = run_algorithm(alg, processes_from_services(services), quantum=quantum)
            _print_result(result, console)
        except SimulationError as exc:
            console.print(f"[red]Error: {exc}[/red]")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    console = Console()

    try:
        if args.command == "run":
            processes = _processes_from_args(args)
            result = run_algorithm(args.algorithm, processes, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console)
            return 0

        if args.command == "compare":
            _print_compare(_processes_from_args(args), args.algorithms, args.quantum, console)
            return 0

        if args.command == "memory":
            _run_memory(args, console)
            return 0

        if args.command == "menu":
            _interactive_menu(args.quantum, console)
            return 0
    except (OSError, ValueError) as exc:
        # SimulationError is a ValueError, as are malformed workload entries.
        logger.debug("command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {exc}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
