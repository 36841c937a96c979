"""Batch packer that fills a byte-budgeted buffer with NDJSON records."""

import logging
import random
from typing import Callable

from loadgen.records import generate_line

logger = logging.getLogger(__name__)

DELIMITER = b"\n"


def pack_batch(
    budget: int,
    rng: random.Random,
    generate: Callable[[random.Random], str] = generate_line,
) -> bytes:
    """Generate records into one batch of at most *budget* bytes.

    Each record is followed by a single newline. Packing stops once the
    buffer reaches the budget or the next record would push it over; that
    candidate is dropped rather than carried into the next batch.

    A record that alone needs more than *budget* bytes still forms a batch
    of its own, so the result may exceed the budget only when it holds
    exactly one record. Records are never truncated.
    """
    if budget <= 0:
        raise ValueError(f"budget must be positive, got {budget}")

    buffer = bytearray()
    while len(buffer) < budget:
        line = generate(rng).encode("utf-8")
        required = len(line) + len(DELIMITER)

        if not buffer and required > budget:
            buffer += line
            buffer += DELIMITER
            logger.debug(
                "Single record of %d bytes exceeds budget of %d bytes",
                required,
                budget,
            )
            break

        if len(buffer) + required > budget:
            break

        buffer += line
        buffer += DELIMITER

    return bytes(buffer)


def count_records(batch: bytes) -> int:
    return batch.count(DELIMITER)
