"""
Piscari - Wizard opponent engine for the Piscari board game.

Piscari is tic-tac-toe on a 3x3 grid layered with a food-chain capture
rule (fisherman catches fish, fish eats fly, fly stings fisherman).
This package provides:
- Board model, winning lines and move legality
- Line state encoding and the precomputed state value table
- The wizard move evaluator (gain aggregation, caching, tie-breaking)
- A failure guard with timeout and a cheap fallback heuristic
- Host adapters: REST API and command line
"""

__version__ = "0.1.0"
