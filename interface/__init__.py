"""
Interface package: communication protocols for the chess engine.

Modules:
    uci: Universal Chess Interface (UCI) protocol handler.
          Reads commands from stdin, writes responses to stdout.
          Can be run as a standalone script: python interface/uci.py
"""
