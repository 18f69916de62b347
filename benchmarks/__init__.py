"""
Benchmark suite for tson parsing performance.

Compares tson decoding of TSON documents against JSON libraries decoding the
equivalent JSON documents:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures parsing speed and memory usage across different data types.
"""
