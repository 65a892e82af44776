"""
ata2 — Ask the Terminal Anything

An interactive terminal client for OpenAI-compatible chat-completion services.
Prompts typed at the terminal (or piped on stdin) are sent one at a time and
the streamed answer is printed as it arrives, while Ctrl-C stays responsive.

Layers (bottom to top):
    1. Control state and text normalization (shared, dependency-free)
    2. Completion client (streaming OpenAI chat completions)
    3. Input producer and response consumer (the two session tasks)
    4. Session loop (handoff channel, history persistence, signals)
    5. CLI (configuration lookup, shortcuts, conversation replay)
"""

__version__ = "3.1.0"
__author__ = "ATA Project Authors"
