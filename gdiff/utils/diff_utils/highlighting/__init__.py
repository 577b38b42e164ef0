"""
Intra-line highlighting: line correlation and character level diffs.
"""

from .char_diff import char_diff
from .line_correlator import correlate, similarity, compute_highlighted_diff
from .tokenizer import tokenize, Token
