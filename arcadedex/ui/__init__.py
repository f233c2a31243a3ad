"""Terminal display for arcadedex runs."""

from .console_progress import SourceProgressDisplay, render_errors, render_summary

__all__ = ["SourceProgressDisplay", "render_errors", "render_summary"]
