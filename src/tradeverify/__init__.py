"""tradeverify: trade document verification and integrity engine.

Three cores:

* ``tradeverify.lc``: cross-checks letter-of-credit terms against presented
  documents under UCP 600 / ISBP 745.
* ``tradeverify.readiness``: scores a trade corridor's regulatory readiness.
* ``tradeverify.proofs``: hash-chained, tamper-evident audit log per trade.
"""

__version__ = "0.1.0"
