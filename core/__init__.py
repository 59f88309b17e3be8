"""
Core Package

Exchange-agnostic ticker logic:
- currency / currency_matrix: Currency catalog and base->quote matrices
- exchange_interface: Capability set every exchange integration implements
- exchange_engine: Polling state machine (start/stop/reset, timer, selection)
- exchange_registry: Factory mapping exchange sites to engines
- observer: Callback contract for engine notifications
"""
