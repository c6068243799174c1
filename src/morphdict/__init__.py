"""
morphdict - compile tab-delimited wordlists into morphological dictionaries.

Pipeline: scanner -> validator -> assembler -> ordering -> compiler,
with the resulting entries handed to a MARISA-trie automaton.
"""

from morphdict.compiler import CompileResult, compile_wordlist
from morphdict.config import CompileConfig, load_config

__version__ = '0.1.0'

__all__ = ['CompileConfig', 'CompileResult', 'compile_wordlist', 'load_config']
