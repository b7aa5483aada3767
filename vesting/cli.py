"""
vesting.cli
===========

Distribution tooling for Merkle-committed vesting:

- build     allocations file → Merkle root (+ full distribution with proofs)
- proof     print one beneficiary's claim ticket
- verify    re-check a claim ticket against the distribution's root
- schedule  linear accrual arithmetic for a point in time

Examples:
  python -m vesting.cli build allocations.csv --out distribution.json
  python -m vesting.cli proof distribution.json 17
  python -m vesting.cli verify distribution.json 17
  python -m vesting.cli schedule --share 1000 --duration 100 --elapsed 50
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import logging as vlog
from .accrual import accrual_interval, claimable_amount
from .allocations import Distribution, load_allocations, load_distribution
from .config import VestingConfig
from .errors import VestingError
from .hashing import to_hex
from .records import AllocationRecord
from .version import __version__

app = typer.Typer(
    name="merkle-vesting",
    help="Build and inspect Merkle vesting distributions.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def _die(msg: str, code: int = 2) -> NoReturn:
    sys.stderr.write(msg.rstrip() + "\n")
    raise typer.Exit(code)


def _load_dist(path: Path) -> Distribution:
    try:
        return load_distribution(path)
    except OSError as e:
        _die(f"[vesting] cannot read {path}: {e}")
    except VestingError as e:
        _die(f"[vesting] {path}: {e}")


def _echo_json(obj: Dict[str, Any]) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


@app.callback(invoke_without_command=True)
def _meta(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Print version and exit", is_eager=True),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override VESTING_LOG_LEVEL"),
) -> None:
    if version:
        typer.echo(f"merkle-vesting {__version__}")
        raise typer.Exit(0)
    vlog.configure(level=log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command("build")
def build_cmd(
    allocations: Path = typer.Argument(..., help="Allocations file (.json or .csv)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the full distribution (root + proofs) here"),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable summary"),
) -> None:
    """Compute the Merkle root for an allocation set."""
    try:
        dist = load_allocations(allocations)
    except OSError as e:
        _die(f"[build] cannot read {allocations}: {e}")
    except VestingError as e:
        _die(f"[build] {allocations}: {e}")

    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(dist.to_json(), indent=2, sort_keys=True) + "\n", encoding="utf-8")

    summary = {
        "merkle_root": to_hex(dist.merkle_root),
        "total_share": dist.total_share,
        "count": len(dist),
        "out": str(out) if out is not None else None,
    }
    if json_out:
        _echo_json(summary)
        return

    t = Table(title="Distribution", show_header=False)
    t.add_column("Field")
    t.add_column("Value")
    for k, v in summary.items():
        if v is not None:
            t.add_row(k, str(v))
    console.print(t)


@app.command("proof")
def proof_cmd(
    distribution: Path = typer.Argument(..., help="Distribution JSON written by `build --out`"),
    index: int = typer.Argument(..., help="Position index"),
) -> None:
    """Print the claim ticket (account, share, proof) for one index."""
    dist = _load_dist(distribution)
    if index not in dist:
        _die(f"[proof] no allocation for index {index}")
    _echo_json(dist.claim(index).to_dict())


@app.command("verify")
def verify_cmd(
    distribution: Path = typer.Argument(..., help="Distribution JSON written by `build --out`"),
    index: int = typer.Argument(..., help="Position index"),
) -> None:
    """Check one claim ticket against the distribution root. Exit 1 if invalid."""
    dist = _load_dist(distribution)
    if index not in dist:
        _die(f"[verify] no allocation for index {index}")
    ticket = dist.claim(index)
    ok = ticket.verify(dist.merkle_root)
    _echo_json({"ok": ok, "index": index, "merkle_root": to_hex(dist.merkle_root), "leaf": to_hex(ticket.leaf)})
    if not ok:
        raise typer.Exit(1)


@app.command("schedule")
def schedule_cmd(
    share: int = typer.Option(..., "--share", min=0, help="Total allocation"),
    duration: int = typer.Option(..., "--duration", min=1, help="Total vesting duration"),
    elapsed: int = typer.Option(..., "--elapsed", min=0, help="Time since vesting start"),
    last_claimed: int = typer.Option(0, "--last-claimed", min=0, help="Elapsed time of the last settlement"),
) -> None:
    """Claimable amount at ELAPSED for a position last settled at LAST_CLAIMED."""
    cfg = VestingConfig(
        merkle_root=bytes(32),
        total_vesting_duration=duration,
        vesting_start_time=0,
        vesting_end_time=duration,
        reward_asset=None,
    )
    rec = AllocationRecord(share=share, last_claimed_at=last_claimed)
    _echo_json(
        {
            "share": share,
            "duration": duration,
            "elapsed": elapsed,
            "last_claimed": last_claimed,
            "interval": accrual_interval(cfg, rec, elapsed),
            "claimable": claimable_amount(cfg, rec, elapsed),
        }
    )


def main() -> None:  # pragma: no cover - entrypoint
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
