import os
import json
from datetime import datetime

import numpy as np

from alias_sampler import AliasTable


def get_logger(log_file_path=None, print_to_console=True):
    """
    Returns a logger that writes JSON-formatted logs to file (1 per line).

    Args:
        log_file_path (str): File to append logs to. None skips the file.
        print_to_console (bool): If True, also prints log entries to stdout.

    Returns:
        log_fn (callable): log_fn(message_dict: dict)
    """
    if log_file_path is not None:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    def log_fn(message_dict):
        message_dict["timestamp"] = datetime.now().isoformat()
        line = json.dumps(message_dict)
        if log_file_path is not None:
            with open(log_file_path, "a") as f:
                f.write(line + "\n")
        if print_to_console:
            print(line)

    return log_fn


def implied_weights(table):
    """
    Per-bucket probability the table actually produces: each bucket is
    picked with 1/n, keeps p/n for itself and hands (1 - p)/n to its alias.
    """
    probability, alias = table.to_arrays()
    n = len(probability)
    out = probability / n
    np.add.at(out, alias, (1.0 - probability) / n)
    return out


def empirical_frequencies(indices, n):
    counts = np.bincount(np.asarray(indices, dtype=np.int64), minlength=n)
    total = counts.sum()
    if total == 0:
        return np.zeros(n)
    return counts / total


def tv_distance(p, q):
    """Total variation distance between two distributions in [0,1]."""
    return 0.5 * float(np.abs(np.asarray(p) - np.asarray(q)).sum())


def convergence_check(table, weights, num_samples, rng, z=4.0, floor=1e-3):
    """
    Samples `num_samples` buckets and checks every bucket frequency against
    its weight, within z standard errors of a binomial proportion plus
    `floor`.

    Returns:
        dict: passed, max_abs_error, worst_bucket, tv_distance, num_samples
    """
    if num_samples <= 0:
        raise ValueError(f"num_samples must be > 0, got {num_samples}.")
    weights = np.asarray(weights, dtype=np.float64)
    observed = empirical_frequencies(
        table.sample_indices(rng, num_samples), len(table)
        )
    error = np.abs(observed - weights)
    band = z * np.sqrt(weights * (1.0 - weights) / num_samples) + floor
    worst = int(np.argmax(error))
    return {
        "passed": bool(np.all(error <= band)),
        "max_abs_error": float(error[worst]),
        "worst_bucket": worst,
        "tv_distance": tv_distance(observed, weights),
        "num_samples": int(num_samples),
    }


def simulate(n=30, num_samples=100000, seed=0, log_fn=None):
    rng = np.random.default_rng(seed)
    raw = rng.integers(1, 100, n)
    truth = raw / raw.sum()
    table = AliasTable.build(range(n), truth)
    report = convergence_check(table, truth, num_samples, rng)
    report["n"] = n
    report["seed"] = seed
    if log_fn is not None:
        log_fn(dict(report, event="simulate"))
    return report


if __name__ == '__main__':
    logger = get_logger(f"logs/simulate_{datetime.now():%Y%m%d_%H%M%S}.json")
    simulate(log_fn=logger)
