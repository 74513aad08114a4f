"""Utility modules for runcmd."""

from runcmd.utils.console import ColorfulFormatter
from runcmd.utils.lines import decode_output, split_output_lines

__all__ = ["ColorfulFormatter", "decode_output", "split_output_lines"]
