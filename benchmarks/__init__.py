"""
Benchmark suite for partialjzon parsing performance.

Compares partialjzon against standard JSON libraries including:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures parsing speed and memory usage for complete, truncated and
streamed documents.
"""
