"""Unrolled versus loop kernel timings for small arities, with a jax.numpy reference."""

from __future__ import annotations

import argparse
import json
import operator
from contextlib import ExitStack, contextmanager
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from unittest import mock

import jax.numpy as jnp

from avm import _unrolled, array, linalg
from _bench_utils import (
    configure_cpu_affinity_from_env,
    host_metadata,
    mean as _mean,
    percentile as _percentile,
    sample_us,
    stddev as _stddev,
)


PROFILE_PRESETS: dict[str, dict[str, int]] = {
    "quick": {"samples": 3, "warmup": 1, "repeats": 2_000},
    "full": {"samples": 7, "warmup": 3, "repeats": 20_000},
}


@dataclass(frozen=True)
class KernelRow:
    name: str
    arity: int
    unrolled_us: float
    loop_us: float
    unrolled_p90_us: float
    loop_p90_us: float
    unrolled_std_us: float

    @property
    def speedup(self) -> float:
        return self.loop_us / self.unrolled_us if self.unrolled_us > 0 else float("inf")


@contextmanager
def _unrolled_mode(enabled: bool):
    with ExitStack() as stack:
        for module in (array, linalg):
            stack.enter_context(mock.patch.object(module, "USE_UNROLLED_KERNELS", enabled))
        yield


def _cases(arity: int):
    a = [float(i) + 0.5 for i in range(arity)]
    b = [float(arity - i) for i in range(arity)]
    yield "add", (array.add, (a, b))
    yield "mul_constant", (array.mul_constant, (a, 2.0))
    yield "reduce_add", (array.reduce, (operator.add, a))
    yield "dot", (linalg.dot, (a, b))


def _measure(fn, args, *, repeats: int, warmup: int, samples: int) -> list[float]:
    return sample_us(fn, args, repeats=repeats, warmup=warmup, samples=samples)


def _time_both(fn, args, *, repeats: int, warmup: int, samples: int) -> tuple[list[float], list[float]]:
    with _unrolled_mode(True):
        unrolled = _measure(fn, args, repeats=repeats, warmup=warmup, samples=samples)
    with _unrolled_mode(False):
        loop = _measure(fn, args, repeats=repeats, warmup=warmup, samples=samples)
    return unrolled, loop


def _row(name: str, arity: int, unrolled: list[float], loop: list[float]) -> KernelRow:
    return KernelRow(
        name=name,
        arity=arity,
        unrolled_us=_mean(unrolled),
        loop_us=_mean(loop),
        unrolled_p90_us=_percentile(unrolled, 0.9),
        loop_p90_us=_percentile(loop, 0.9),
        unrolled_std_us=_stddev(unrolled),
    )


def run_kernel_benchmarks(arities: list[int], *, repeats: int, warmup: int, samples: int) -> list[KernelRow]:
    rows: list[KernelRow] = []
    for arity in arities:
        for name, (fn, args) in _cases(arity):
            unrolled, loop = _time_both(fn, args, repeats=repeats, warmup=warmup, samples=samples)
            rows.append(_row(name, arity, unrolled, loop))
    for size in (2, 3, 4):
        m = tuple(float(i) for i in range(size * size))
        unrolled, loop = _time_both(
            linalg.matmul, (m, m, size, size, size), repeats=repeats, warmup=warmup, samples=samples
        )
        rows.append(_row(f"matmul_mat{size}", size * size, unrolled, loop))
    return rows


def run_jax_reference(n: int, *, repeats: int, warmup: int, samples: int) -> dict[str, float]:
    a = [float(i) for i in range(n)]
    ja = jnp.asarray(a)

    def jax_add(x):
        return (x + x).block_until_ready()

    avm_us = _mean(_measure(array.add, (a, a), repeats=repeats, warmup=warmup, samples=samples))
    jax_us = _mean(_measure(jax_add, (ja,), repeats=repeats, warmup=warmup, samples=samples))
    return {"n": n, "avm_add_us": avm_us, "jax_add_us": jax_us}


def _print_rows(rows: list[KernelRow]) -> None:
    print(f"{'case':16} {'arity':>5} {'unrolled us':>12} {'loop us':>10} {'speedup':>8}")
    for row in rows:
        print(f"{row.name:16} {row.arity:5d} {row.unrolled_us:12.3f} {row.loop_us:10.3f} {row.speedup:7.2f}x")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare unrolled kernels with the generic loop path")
    parser.add_argument("--profile", choices=sorted(PROFILE_PRESETS), default="quick", help="fixed benchmark profile")
    parser.add_argument("--samples", type=int, default=None, help="override timing sample count")
    parser.add_argument("--warmup", type=int, default=None, help="override warmup rounds")
    parser.add_argument("--repeats", type=int, default=None, help="calls per sample")
    parser.add_argument("--arities", default="1,2,3,4,8,16", help="comma separated arities to time")
    parser.add_argument("--jax-n", type=int, default=1_000, help="array length for the jax.numpy reference")
    parser.add_argument("--json-out", default="", help="optional path to write machine-readable results")
    args = parser.parse_args()
    affinity_info = configure_cpu_affinity_from_env()

    profile = PROFILE_PRESETS[args.profile]
    samples = int(profile["samples"] if args.samples is None else args.samples)
    warmup = int(profile["warmup"] if args.warmup is None else args.warmup)
    repeats = int(profile["repeats"] if args.repeats is None else args.repeats)
    arities = [int(token) for token in args.arities.split(",") if token.strip()]

    print("avm kernel benchmark")
    print(f"config: profile={args.profile}, samples={samples}, warmup={warmup}, repeats={repeats}, arities={arities}")
    print(f"host: affinity={affinity_info.get('active')}")
    print()

    rows = run_kernel_benchmarks(arities, repeats=repeats, warmup=warmup, samples=samples)
    _print_rows(rows)
    reference = run_jax_reference(args.jax_n, repeats=max(1, repeats // 100), warmup=warmup, samples=samples)
    print(f"add n={reference['n']}: avm {reference['avm_add_us']:.1f} us, jax.numpy {reference['jax_add_us']:.1f} us")

    if args.json_out:
        payload = {
            "timestamp_utc": datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ"),
            "config": {"profile": args.profile, "samples": samples, "warmup": warmup, "repeats": repeats},
            "affinity": affinity_info,
            "host": host_metadata(),
            "kernel_cache": _unrolled.cache_stats(),
            "rows": [asdict(row) | {"speedup": row.speedup} for row in rows],
            "jax_reference": reference,
        }
        outpath = Path(args.json_out)
        outpath.parent.mkdir(parents=True, exist_ok=True)
        outpath.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote JSON benchmark output: {outpath}")


if __name__ == "__main__":
    main()
