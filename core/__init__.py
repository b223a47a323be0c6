"""
Core business logic

This package holds everything that changes state:
- RoundManager: active round lifecycle, closure, scoring, rollover
- WagerEngine: board purchase validation and creation
- LedgerService: deposit state machine and derived balance
- PlayerManager: player records and identity resolution
- Locks: row-level concurrency helpers
- Clock: injectable time source
"""
