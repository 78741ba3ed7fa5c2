"""Transaction reference generator for offline ledger entries.

Offline donations have no gateway settlement reference, so one is minted
locally at capture time:

    OFFLINE-TXN-<epoch ms>-<4 random digits>

The millisecond component keeps references sortable by capture time; the
random suffix separates two captures in the same millisecond.
"""

import random
import time


class TransactionRefGenerator:
    """Mint prefixed, time-ordered transaction references."""

    def __init__(self, prefix: str = "OFFLINE-TXN", rng: random.Random | None = None) -> None:
        if not prefix or prefix != prefix.strip():
            raise ValueError("prefix must be non-empty and contain no surrounding whitespace")
        self._prefix = prefix
        self._rng = rng or random.Random()

    def next_ref(self) -> str:
        suffix = self._rng.randint(1000, 9999)
        return f"{self._prefix}-{self._current_ms()}-{suffix}"

    def _current_ms(self) -> int:
        return int(time.time() * 1000)


_default_generator = TransactionRefGenerator()


def generate_offline_txn_ref() -> str:
    """Generate an offline transaction reference using the module-level default generator."""
    return _default_generator.next_ref()
