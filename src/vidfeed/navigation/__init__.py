"""
Playback navigation for vidfeed.

Progress tracking for individual players and sequencing of playlist feeds.
"""

from vidfeed.navigation.progress import ProgressTracker, track
from vidfeed.navigation.reorder import move_item, translate_index
from vidfeed.navigation.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from vidfeed.navigation.sequencer import EntryView, PlaylistSequencer

__all__ = [
    "AsyncioScheduler",
    "EntryView",
    "PlaylistSequencer",
    "ProgressTracker",
    "Scheduler",
    "TimerHandle",
    "move_item",
    "track",
    "translate_index",
]
