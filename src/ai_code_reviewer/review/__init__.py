from .diff import DiffFile, split_diff, whole_file_diff, language_for_path
from .normalizer import normalize_response
from .prompts import build_review_prompt, NO_COMMENT

__all__ = [
    "DiffFile",
    "split_diff",
    "whole_file_diff",
    "language_for_path",
    "normalize_response",
    "build_review_prompt",
    "NO_COMMENT",
]
